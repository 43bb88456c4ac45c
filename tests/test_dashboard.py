"""
Tests for the Dash dashboard helpers.
"""
from unittest.mock import Mock, patch

import requests

from duka.dashboard.main import (
    build_low_stock_list,
    build_sales_figure,
    build_top_products,
    fetch_api_data,
    format_currency,
    load_dashboard_data,
)


def test_format_currency():
    assert format_currency(1250) == "KSh 1,250"
    assert format_currency(1250.5) == "KSh 1,250.50"
    assert format_currency(None) == "KSh 0"


def test_empty_sales_figure():
    fig = build_sales_figure([])

    assert fig.layout.title.text == "No Sales Data Yet"
    assert len(fig.data) == 0


def test_sales_figure_has_sales_and_profit():
    fig = build_sales_figure([
        {"date": "2024-03-01", "sales": 540.0, "profit": 90.0},
        {"date": "2024-03-02", "sales": 180.0, "profit": 30.0},
    ])

    assert sorted(trace.name for trace in fig.data) == ["profit", "sales"]


def test_fetch_api_data_sends_session_token():
    response = Mock()
    response.json.return_value = {"total_products": 3}

    with patch("duka.dashboard.main.requests.get", return_value=response) as mock_get:
        assert fetch_api_data("dashboard/stats") == {"total_products": 3}

    headers = mock_get.call_args.kwargs["headers"]
    assert headers["Authorization"].startswith("Bearer ")
    assert mock_get.call_args.args[0].endswith("/dashboard/stats")


def test_fetch_api_data_returns_empty_on_error():
    with patch("duka.dashboard.main.requests.get", side_effect=requests.ConnectionError("offline")):
        assert fetch_api_data("dashboard/stats") == {}


def test_load_dashboard_data_survives_api_outage():
    with patch("duka.dashboard.main.fetch_api_data", return_value={}):
        data = load_dashboard_data("30d")

    assert data == {"stats": {}, "report": {}, "low_stock": []}


def test_empty_panels():
    assert build_top_products([]).children == "No sales data yet"
    assert build_low_stock_list([]).children == "All products are well stocked"


def test_low_stock_list_marks_out_of_stock():
    panel = build_low_stock_list([
        {"name": "Soda", "quantity": 0, "unit": "pcs", "low_stock_threshold": 5},
        {"name": "Unga", "quantity": 2, "unit": "pcs", "low_stock_threshold": 5},
    ])

    assert [alert.color for alert in panel.children] == ["danger", "warning"]
