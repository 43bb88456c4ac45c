"""
Duka Manager Dashboard - shop overview, sales trend and stock alerts.
"""
import logging
from typing import Any, Dict, List, Optional

import dash
from dash import dcc, html, Input, Output
import dash_bootstrap_components as dbc
import pandas as pd
import plotly.express as px
import plotly.graph_objs as go
import requests

from duka.core.config import settings

logger = logging.getLogger(__name__)

REFRESH_SECONDS = 30

# Initialize Dash app
app = dash.Dash(
    __name__,
    external_stylesheets=[dbc.themes.BOOTSTRAP],
    title="Duka Manager Dashboard",
    update_title="Duka Manager - Loading..."
)


def format_currency(amount: Optional[float]) -> str:
    """Format an amount the way the shop reads it, e.g. KSh 1,250."""
    amount = amount or 0
    if float(amount).is_integer():
        return f"{settings.currency} {int(amount):,}"
    return f"{settings.currency} {amount:,.2f}"


def fetch_api_data(endpoint: str, params: Optional[dict] = None) -> dict:
    """Fetch data from an API endpoint using the dashboard's session token."""
    try:
        url = f"{settings.dashboard_api_url.rstrip('/')}/{endpoint}"
        headers = {"Authorization": f"Bearer {settings.dashboard_session_token}"}
        response = requests.get(url, params=params, headers=headers, timeout=10)
        response.raise_for_status()
        return response.json()
    except Exception as e:
        logger.error(f"Error fetching data from {endpoint}: {e}")
        return {}


def load_dashboard_data(time_range: str = "7d") -> Dict[str, Any]:
    return {
        "stats": fetch_api_data("dashboard/stats"),
        "report": fetch_api_data("sales/report", {"range": time_range}),
        "low_stock": fetch_api_data("products/low-stock").get("products", [])
    }


def stat_card(title: str, value: str, card_id: str, color: str) -> dbc.Col:
    return dbc.Col([
        dbc.Card([
            dbc.CardBody([
                html.H6(title, className="card-title text-muted"),
                html.H3(id=card_id, children=value, className=f"text-{color}")
            ])
        ])
    ], md=4, lg=2, className="mb-3")


def build_sales_figure(daily: List[Dict[str, Any]]) -> go.Figure:
    """Grouped bar chart of daily sales and profit."""
    if not daily:
        fig = go.Figure()
        fig.update_layout(
            title="No Sales Data Yet",
            height=350,
            xaxis={"visible": False},
            yaxis={"visible": False}
        )
        return fig

    df = pd.DataFrame(daily)
    df["date"] = pd.to_datetime(df["date"]).dt.strftime("%d %b")
    long_df = df.melt(id_vars="date", value_vars=["sales", "profit"], var_name="series", value_name="amount")

    fig = px.bar(
        long_df,
        x="date",
        y="amount",
        color="series",
        barmode="group",
        color_discrete_map={"sales": "#0d6efd", "profit": "#198754"},
        labels={"date": "Date", "amount": f"Amount ({settings.currency})", "series": ""}
    )
    fig.update_layout(title="Daily Sales", height=350)
    return fig


def build_top_products(top_products: List[Dict[str, Any]]):
    if not top_products:
        return html.P("No sales data yet")

    return dbc.ListGroup([
        dbc.ListGroupItem([
            html.Div([
                html.Strong(f"{index}. {product.get('name', 'Unknown')}"),
                html.Span(format_currency(product.get("revenue")), className="float-end text-success")
            ]),
            html.Small(f"{product.get('quantity', 0)} sold", className="text-muted")
        ])
        for index, product in enumerate(top_products, start=1)
    ])


def build_low_stock_list(products: List[Dict[str, Any]]):
    if not products:
        return dbc.Alert("All products are well stocked", color="success")

    return html.Div([
        dbc.Alert([
            html.Strong(product.get("name", "Unknown")),
            html.Span(
                f" {product.get('quantity', 0)} {product.get('unit', 'pcs')} left "
                f"(threshold {product.get('low_stock_threshold', 0)})"
            )
        ], color="danger" if product.get("quantity", 0) <= 0 else "warning", className="mb-2")
        for product in products
    ])


# Dashboard layout
app.layout = dbc.Container([
    dbc.Row([
        dbc.Col([
            html.H1("Duka Manager", className="text-center mt-3"),
            html.P("Simple Inventory Tracking", className="text-center text-muted"),
            html.Hr()
        ])
    ]),

    dbc.Row([
        stat_card("Products", "0", "total-products", "primary"),
        stat_card("Low Stock", "0", "low-stock-count", "warning"),
        stat_card("Today's Sales", format_currency(0), "today-sales", "primary"),
        stat_card("Today's Profit", format_currency(0), "today-profit", "success"),
        stat_card("Stock Value", format_currency(0), "stock-value", "secondary"),
        stat_card("Deni Owed", format_currency(0), "credit-owed", "danger"),
    ]),

    dbc.Row([
        dbc.Col([
            dbc.RadioItems(
                id="time-range",
                options=[
                    {"label": "7 Days", "value": "7d"},
                    {"label": "30 Days", "value": "30d"},
                    {"label": "All Time", "value": "all"}
                ],
                value="7d",
                inline=True,
                className="mb-3"
            )
        ])
    ]),

    dbc.Row([
        dbc.Col([
            dbc.Card([
                dbc.CardHeader("Sales Trend"),
                dbc.CardBody([dcc.Graph(id="sales-chart")])
            ])
        ], lg=8, className="mb-3"),
        dbc.Col([
            dbc.Card([
                dbc.CardHeader("Top Sellers"),
                dbc.CardBody([html.Div(id="top-products")])
            ])
        ], lg=4, className="mb-3")
    ]),

    dbc.Row([
        dbc.Col([
            dbc.Card([
                dbc.CardHeader("Low Stock Alerts"),
                dbc.CardBody([html.Div(id="low-stock-list")])
            ])
        ])
    ], className="mb-4"),

    dcc.Interval(id="interval-component", interval=REFRESH_SECONDS * 1000, n_intervals=0)
], fluid=True)


@app.callback(
    [Output("total-products", "children"),
     Output("low-stock-count", "children"),
     Output("today-sales", "children"),
     Output("today-profit", "children"),
     Output("stock-value", "children"),
     Output("credit-owed", "children"),
     Output("sales-chart", "figure"),
     Output("top-products", "children"),
     Output("low-stock-list", "children")],
    [Input("interval-component", "n_intervals"),
     Input("time-range", "value")]
)
def refresh_dashboard(n, time_range):
    """Reload every panel from the API."""
    data = load_dashboard_data(time_range or "7d")
    stats = data["stats"]
    report = data["report"]

    return (
        str(stats.get("total_products", 0)),
        str(stats.get("low_stock_count", 0)),
        format_currency(stats.get("today_sales")),
        format_currency(stats.get("today_profit")),
        format_currency(stats.get("total_stock_value")),
        format_currency(stats.get("total_credit_owed")),
        build_sales_figure(report.get("daily", [])),
        build_top_products(report.get("top_products", [])),
        build_low_stock_list(data["low_stock"])
    )


if __name__ == "__main__":
    app.run(
        debug=settings.debug,
        host=settings.dashboard_host,
        port=settings.dashboard_port
    )
