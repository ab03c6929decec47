import pandas as pd
import pytest

from core.analytics_service import (
    fetch_server_dashboard,
    get_dashboard_summary,
    get_menu_stats,
    get_message_stats,
    get_sales_trends,
    get_status_breakdown,
)

NOW = pd.Timestamp.now(tz="UTC").isoformat()

ORDERS = [
    {"id": 1, "order_status": "delivered", "total_amount": 100, "final_amount": 90, "created_at": "2024-01-01T10:00:00Z"},
    {"id": 2, "order_status": "delivered", "total_amount": 50, "created_at": "2024-01-01T18:30:00Z"},
    {"id": 3, "order_status": "cancelled", "total_amount": 500, "created_at": "2024-01-02T09:00:00Z"},
    {"id": 4, "order_status": "pending", "final_amount": 40, "created_at": "2024-02-10T12:00:00Z"},
    {"id": 5, "order_status": "pending", "total_amount": 25, "created_at": NOW},
]


def test_dashboard_summary():
    users = [{"id": 1, "role": "user"}, {"id": 2, "role": "admin"}, {"id": 3}]
    menu = [{"id": 1}, {"id": 2}]

    summary = get_dashboard_summary(ORDERS, users, menu)

    assert summary["total_orders"] == 5
    assert summary["total_revenue"] == pytest.approx(90 + 50 + 500 + 40 + 25)
    assert summary["total_customers"] == 2
    assert summary["total_products"] == 2
    assert summary["today_orders"] == 1
    assert summary["today_revenue"] == pytest.approx(25)


def test_dashboard_summary_with_no_data():
    summary = get_dashboard_summary([])

    assert summary == {
        "total_orders": 0,
        "total_revenue": 0.0,
        "total_customers": 0,
        "total_products": 0,
        "today_orders": 0,
        "today_revenue": 0.0,
    }


def test_status_breakdown_lists_every_status():
    breakdown = get_status_breakdown(ORDERS)

    assert breakdown == {
        "pending": 2,
        "confirmed": 0,
        "preparing": 0,
        "ready": 0,
        "delivered": 2,
        "cancelled": 1,
    }


def test_daily_sales_exclude_cancelled_orders():
    trends = get_sales_trends(ORDERS[:4], period="daily")

    assert trends["dates"] == ["2024-01-01", "2024-02-10"]
    assert trends["revenue"] == [pytest.approx(140), pytest.approx(40)]


def test_monthly_sales():
    trends = get_sales_trends(ORDERS[:4], period="monthly")

    assert trends["dates"] == ["2024-01", "2024-02"]


def test_sales_trends_without_dates():
    assert get_sales_trends([{"id": 1, "total_amount": 10}]) == {"dates": [], "revenue": []}


def test_menu_stats():
    items = [
        {"id": 1, "type": "veg", "is_available": True},
        {"id": 2, "type": "non-veg", "is_available": False},
        {"id": 3, "type": "veg", "is_available": True},
    ]

    assert get_menu_stats(items) == {"total": 3, "available": 2, "veg": 2, "non_veg": 1}
    assert get_menu_stats([]) == {"total": 0, "available": 0, "veg": 0, "non_veg": 0}


def test_message_stats_treat_missing_status_as_unread():
    messages = [{"id": 1}, {"id": 2, "status": "read"}, {"id": 3, "status": "replied"}, {"id": 4, "status": None}]

    assert get_message_stats(messages) == {"total": 4, "unread": 2, "read": 1, "replied": 1}


def test_fetch_server_dashboard(api, http):
    http.queue(200, {"success": True, "data": {"totalOrders": 12}})

    assert fetch_server_dashboard(api) == {"totalOrders": 12}
    assert http.last["url"].endswith("/api/admin/dashboard")
