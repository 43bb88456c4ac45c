#!/usr/bin/env python3
"""
Duka Manager Startup Script
Launches the API, the dashboard and the Celery worker and beat.
"""
import os
import sys
import subprocess
import time
import signal
import threading
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from duka.core.config import settings


class DukaLauncher:
    """Launcher for Duka Manager components."""

    def __init__(self):
        self.processes = []
        self.running = True

    def _spawn(self, name: str, cmd: list) -> None:
        # Children write straight to this terminal
        process = subprocess.Popen(cmd)
        self.processes.append((name, process))

    def start_api_server(self):
        """Start the FastAPI server."""
        print("🚀 Starting Duka Manager API Server...")
        cmd = [sys.executable, "-m", "uvicorn", "duka.main:app", "--host", "0.0.0.0", "--port", "8000"]
        cmd += ["--reload"] if settings.debug else ["--workers", "4"]
        self._spawn("API Server", cmd)
        print("✅ API Server started on http://localhost:8000")

    def start_dashboard(self):
        """Start the Dash dashboard."""
        print("📊 Starting Duka Manager Dashboard...")
        self._spawn("Dashboard", [sys.executable, "-m", "duka.dashboard.main"])
        print(f"✅ Dashboard started on http://localhost:{settings.dashboard_port}")

    def start_celery_worker(self):
        """Start Celery worker for background tasks."""
        print("🔧 Starting Celery Worker...")
        self._spawn("Celery Worker", [
            sys.executable, "-m", "celery",
            "-A", "duka.worker.celery",
            "worker",
            "--loglevel=info",
            "--concurrency=2"
        ])
        print("✅ Celery Worker started")

    def start_celery_beat(self):
        """Start Celery beat for scheduled tasks."""
        print("⏰ Starting Celery Beat...")
        self._spawn("Celery Beat", [
            sys.executable, "-m", "celery",
            "-A", "duka.worker.celery",
            "beat",
            "--loglevel=info"
        ])
        print("✅ Celery Beat started")

    def check_dependencies(self):
        """Check the environment before launching."""
        print("🔍 Checking configuration...")

        if not os.path.exists(".env"):
            print("⚠️  .env file not found. Using defaults and environment variables.")
        if not settings.dashboard_session_token:
            print("⚠️  DASHBOARD_SESSION_TOKEN is not set; the dashboard will show empty data.")
        return True

    def monitor_processes(self):
        """Report processes that exit unexpectedly."""
        reported = set()
        while self.running:
            for name, process in self.processes:
                if process.poll() is not None and name not in reported:
                    print(f"❌ {name} stopped unexpectedly (exit code {process.returncode})")
                    reported.add(name)
            time.sleep(5)

    def signal_handler(self, signum, frame):
        """Handle shutdown signals."""
        print("\n🛑 Shutting down Duka Manager...")
        self.running = False

    def shutdown(self):
        """Shutdown all processes."""
        print("🔄 Stopping all processes...")
        for name, process in self.processes:
            try:
                process.terminate()
                process.wait(timeout=5)
                print(f"✅ {name} stopped")
            except subprocess.TimeoutExpired:
                process.kill()
                print(f"⚠️  {name} force killed")
            except Exception as e:
                print(f"❌ Error stopping {name}: {e}")

    def run(self):
        """Run all Duka Manager services."""
        print("🏪 Duka Manager - Simple Inventory Tracking")
        print("=" * 60)

        if not self.check_dependencies():
            print("❌ Configuration check failed. Please fix the issues above.")
            return

        signal.signal(signal.SIGINT, self.signal_handler)
        signal.signal(signal.SIGTERM, self.signal_handler)

        try:
            self.start_api_server()
            time.sleep(2)

            self.start_dashboard()
            time.sleep(2)

            self.start_celery_worker()
            time.sleep(2)

            self.start_celery_beat()

            print("\n🎉 Duka Manager is now running!")
            print("📊 Dashboard: http://localhost:%d" % settings.dashboard_port)
            print("🔍 Health Check: http://localhost:8000/health")
            print("\nPress Ctrl+C to stop all services")

            monitor_thread = threading.Thread(target=self.monitor_processes, daemon=True)
            monitor_thread.start()

            while self.running:
                time.sleep(1)

        except KeyboardInterrupt:
            print("\n🛑 Received interrupt signal")
        except Exception as e:
            print(f"❌ Error starting Duka Manager: {e}")
        finally:
            self.shutdown()
            print("👋 Duka Manager stopped")


if __name__ == "__main__":
    launcher = DukaLauncher()
    launcher.run()
