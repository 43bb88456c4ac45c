"""
Business logic services for Duka Manager.
"""

from .shop_accounts import ShopAccounts
from .inventory_monitor import InventoryMonitor
from .sales_logger import SalesLogger
from .credit_ledger import CreditLedger
from .expense_tracker import ExpenseTracker
from .dashboard_stats import DashboardStats

__all__ = [
    "ShopAccounts",
    "InventoryMonitor",
    "SalesLogger",
    "CreditLedger",
    "ExpenseTracker",
    "DashboardStats"
]
