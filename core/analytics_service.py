import pandas as pd

from core.api_client import ApiClient
from core.order_lifecycle import OrderStatus


def _orders_frame(orders) -> pd.DataFrame:
    """Orders as a DataFrame with parsed dates and a single revenue column."""
    df = pd.DataFrame(list(orders))
    if df.empty:
        return pd.DataFrame(columns=["created_at", "revenue", "order_status"])

    revenue = pd.Series(0.0, index=df.index)
    for column in ("total_amount", "final_amount"):
        if column in df:
            values = pd.to_numeric(df[column], errors="coerce")
            revenue = values.where(values.notna(), revenue)
    df["revenue"] = revenue.fillna(0.0)

    if "created_at" in df:
        df["created_at"] = pd.to_datetime(df["created_at"], errors="coerce", utc=True, format="ISO8601")
    else:
        df["created_at"] = pd.Series(pd.NaT, index=df.index, dtype="datetime64[ns, UTC]")
    if "order_status" not in df:
        df["order_status"] = df.get("status", "")
    return df


def get_dashboard_summary(orders, users=(), menu_items=()):
    """
    Get overall dashboard summary stats
    Returns: dict with key metrics
    """
    df = _orders_frame(orders)
    today = pd.Timestamp.now(tz="UTC").normalize()
    today_df = df[df["created_at"] >= today] if not df.empty else df

    customers = [u for u in users if u.get("role", "user") == "user"]

    return {
        "total_orders": int(len(df)),
        "total_revenue": float(df["revenue"].sum()) if not df.empty else 0.0,
        "total_customers": len(customers),
        "total_products": len(list(menu_items)),
        "today_orders": int(len(today_df)),
        "today_revenue": float(today_df["revenue"].sum()) if not today_df.empty else 0.0,
    }


def get_status_breakdown(orders):
    """Order count per status, every status present (zero if unused)."""
    df = _orders_frame(orders)
    counts = df["order_status"].astype(str).str.lower().value_counts() if not df.empty else {}
    return {status.value: int(counts.get(status.value, 0)) for status in OrderStatus}


def get_sales_trends(orders, period="daily"):
    """
    Get revenue per period ("daily", "weekly" or "monthly")
    Returns: dict with dates and revenue
    """
    df = _orders_frame(orders)
    df = df.dropna(subset=["created_at"])
    if df.empty:
        return {"dates": [], "revenue": []}

    # Cancelled orders never brought in money
    df = df[df["order_status"].astype(str).str.lower() != OrderStatus.CANCELLED.value]

    if period == "daily":
        keys = df["created_at"].dt.strftime("%Y-%m-%d")
    elif period == "weekly":
        keys = df["created_at"].dt.strftime("%Y-W%U")
    else:
        keys = df["created_at"].dt.strftime("%Y-%m")

    grouped = df.groupby(keys)["revenue"].sum().sort_index()
    return {
        "dates": list(grouped.index),
        "revenue": [float(v) for v in grouped.values],
    }


def get_menu_stats(menu_items):
    df = pd.DataFrame(list(menu_items))
    if df.empty:
        return {"total": 0, "available": 0, "veg": 0, "non_veg": 0}
    available = df["is_available"].fillna(False).astype(bool).sum() if "is_available" in df else 0
    types = df["type"] if "type" in df else pd.Series(dtype=str)
    return {
        "total": int(len(df)),
        "available": int(available),
        "veg": int((types == "veg").sum()),
        "non_veg": int((types == "non-veg").sum()),
    }


def get_message_stats(messages):
    df = pd.DataFrame(list(messages))
    statuses = df["status"].fillna("unread").str.lower() if "status" in df else pd.Series(dtype=str)
    return {
        "total": int(len(df)),
        "unread": int((statuses == "unread").sum()),
        "read": int((statuses == "read").sum()),
        "replied": int((statuses == "replied").sum()),
    }


def fetch_server_dashboard(api: ApiClient):
    """Stats computed by the backend (GET /api/admin/dashboard)."""
    body = api.get("/api/admin/dashboard")
    return body.get("data") or {}
