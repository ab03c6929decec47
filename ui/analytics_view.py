import logging
import threading

import flet as ft
from flet.plotly_chart import PlotlyChart
import plotly.express as px
import plotly.graph_objects as go

from core.analytics_service import (
    get_dashboard_summary,
    get_menu_stats,
    get_message_stats,
    get_sales_trends,
    get_status_breakdown,
)
from core.errors import AdminError, AuthRequired
from core.logger import get_recent_actions
from core.resource_sync import ResourceSynchronizer
from core.resources import CONTACT_MESSAGES, MENU_ITEMS, ORDERS, USERS
from ui.admin_constants import ACCENT, BREAKPOINT, ORDER_STATUS_COLORS

logger = logging.getLogger(__name__)


def _empty_chart(text):
    return ft.Container(
        content=ft.Text(text, size=14, color="grey"),
        alignment=ft.alignment.center,
        padding=30
    )


def _summary_card(value, label, note, color):
    return ft.Container(
        content=ft.Column([
            ft.Text(value, size=24, weight="bold"),
            ft.Text(label, size=12, color="grey700"),
            ft.Text(note, size=10, color="green")
        ], horizontal_alignment=ft.CrossAxisAlignment.CENTER, spacing=3, alignment=ft.MainAxisAlignment.CENTER),
        padding=12, bgcolor=color, border_radius=8, expand=1, height=100
    )


def _panel(content, is_desktop):
    return ft.Container(
        content=content,
        border=ft.border.all(1, "grey300"),
        border_radius=8,
        padding=12,
        bgcolor="white",
        expand=1 if is_desktop else None,
        margin=None if is_desktop else ft.margin.symmetric(horizontal=10, vertical=8),
    )


def analytics_view(page: ft.Page, api, syncs: list):
    page.title = "Analytics Dashboard"

    if not api.session.is_authenticated:
        page.snack_bar = ft.SnackBar(ft.Text("Please log in to continue."), open=True)
        page.go("/login")
        return

    current_width = page.window.width or 400
    is_desktop = current_width >= BREAKPOINT
    container_width = current_width if is_desktop else 400
    container_height = page.window.height or 700

    # Read-only copies of the collections the charts are built from
    orders = ResourceSynchronizer(api, ORDERS)
    users = ResourceSynchronizer(api, USERS)
    menu_items = ResourceSynchronizer(api, MENU_ITEMS)
    messages = ResourceSynchronizer(api, CONTACT_MESSAGES)
    syncs.extend([orders, users, menu_items, messages])

    def handle_back(e):
        page.go("/admin")

    def header():
        return ft.Column([
            ft.Container(
                content=ft.Row([
                    ft.IconButton(
                        icon=ft.Icons.ARROW_BACK,
                        tooltip="Back to Admin",
                        on_click=handle_back,
                        icon_color="black"
                    ),
                    ft.Text("Analytics Dashboard", size=20, weight="bold", color="black"),
                ], alignment=ft.MainAxisAlignment.START),
                padding=ft.padding.only(left=5, right=15, top=10, bottom=8)
            ),
            ft.Divider(height=1, color="grey300", thickness=1)
        ], spacing=0)

    main_container = ft.Container(
        content=ft.Column([
            header(),
            ft.Container(
                content=ft.Column([
                    ft.ProgressRing(width=50, height=50, stroke_width=4, color=ACCENT),
                    ft.Text("Loading analytics...", size=14, color="grey700")
                ],
                horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                alignment=ft.MainAxisAlignment.CENTER,
                spacing=20
                ),
                expand=True,
                alignment=ft.alignment.center
            )
        ], expand=True, spacing=0),
        width=container_width,
        height=container_height,
        padding=0
    )

    page.clean()
    page.add(main_container)
    page.update()

    # --- CHART CREATION FUNCTIONS ---

    def create_sales_trend_chart(period="daily"):
        data = get_sales_trends(orders.items, period=period)
        if not data["dates"]:
            return _empty_chart("No sales data available")

        fig = go.Figure()
        fig.add_trace(go.Scatter(
            x=data["dates"],
            y=data["revenue"],
            mode='lines+markers',
            name='Revenue',
            line=dict(color='#2196F3', width=2),
            marker=dict(size=6),
            fill='tozeroy',
            fillcolor='rgba(33, 150, 243, 0.1)'
        ))
        fig.update_layout(
            title=dict(text=f"Sales Trend ({period.capitalize()})", font=dict(size=14)),
            xaxis_title="Date",
            yaxis_title="Revenue (₹)",
            hovermode='x unified',
            height=350 if is_desktop else 250,
            margin=dict(l=40, r=20, t=40, b=40),
            font=dict(size=10)
        )
        return PlotlyChart(fig, expand=True)

    def create_status_chart():
        breakdown = {k: v for k, v in get_status_breakdown(orders.items).items() if v}
        if not breakdown:
            return _empty_chart("No orders yet")

        labels = list(breakdown)
        fig = go.Figure(go.Pie(
            labels=[label.capitalize() for label in labels],
            values=[breakdown[label] for label in labels],
            hole=0.4,
            marker=dict(colors=[ORDER_STATUS_COLORS.get(label, "grey") for label in labels]),
            textinfo='label+value',
            textposition='auto',
            textfont=dict(size=10)
        ))
        fig.update_layout(
            title=dict(text="Orders by Status", font=dict(size=14)),
            height=320 if is_desktop else 280,
            margin=dict(l=20, r=20, t=40, b=20),
            font=dict(size=10)
        )
        return PlotlyChart(fig, expand=True)

    def create_menu_chart():
        stats = get_menu_stats(menu_items.items)
        if not stats["total"]:
            return _empty_chart("No menu items")

        labels = ["Available", "Unavailable", "Veg", "Non-Veg"]
        values = [stats["available"], stats["total"] - stats["available"], stats["veg"], stats["non_veg"]]
        fig = go.Figure(go.Bar(
            x=labels,
            y=values,
            marker=dict(color=px.colors.qualitative.Set2[:len(labels)]),
            text=values,
            textposition='auto',
        ))
        fig.update_layout(
            title=dict(text="Menu Overview", font=dict(size=14)),
            yaxis_title="Items",
            height=320 if is_desktop else 280,
            margin=dict(l=40, r=20, t=40, b=40),
            font=dict(size=10)
        )
        return PlotlyChart(fig, expand=True)

    def create_message_summary():
        stats = get_message_stats(messages.items)
        return ft.Row([
            _summary_card(str(stats["unread"]), "Unread", "", "orange50"),
            _summary_card(str(stats["read"]), "Read", "", "blue50"),
            _summary_card(str(stats["replied"]), "Replied", f"of {stats['total']}", "green50"),
        ], spacing=8)

    def create_recent_actions():
        entries = get_recent_actions(limit=8)
        if not entries:
            return ft.Text("No admin actions recorded yet", size=12, color="grey")
        return ft.Column([
            ft.Text(
                f"{entry.timestamp:%Y-%m-%d %H:%M}  {entry.admin_email}: {entry.action} {entry.resource}"
                + (f" #{entry.resource_id}" if entry.resource_id else ""),
                size=11,
                color="grey800",
            )
            for entry in entries
        ], spacing=4)

    def show_error(text):
        main_container.content = ft.Column([
            header(),
            ft.Container(
                content=ft.Column([
                    ft.Icon(ft.Icons.ERROR_OUTLINE, size=60, color="red"),
                    ft.Text(f"Error loading analytics: {text}", size=14, color="red", text_align=ft.TextAlign.CENTER),
                    ft.ElevatedButton("Try Again", on_click=lambda e: analytics_view(page, api, syncs),
                                      bgcolor=ACCENT, color="white")
                ], horizontal_alignment=ft.CrossAxisAlignment.CENTER, spacing=20),
                expand=True, alignment=ft.alignment.center, padding=20
            )
        ], expand=True, spacing=0)
        page.update()

    # --- LOAD DATA IN BACKGROUND THREAD ---

    def load_analytics():
        try:
            for sync in (orders, users, menu_items, messages):
                sync.fetch_all()
        except AuthRequired:
            page.go("/login")
            return
        except AdminError as ex:
            # A closed synchronizer means the admin already left this screen
            if not orders.closed:
                show_error(ex.message)
            return

        if orders.closed:
            logger.info("Analytics loading cancelled, screen closed")
            return

        summary = get_dashboard_summary(orders.items, users.items, menu_items.items)
        cards = [
            _summary_card(str(summary["total_orders"]), "Total Orders", f"Today: {summary['today_orders']}", "blue50"),
            _summary_card(f"₹{summary['total_revenue']:,.0f}", "Revenue", f"₹{summary['today_revenue']:,.0f}", "green50"),
            _summary_card(str(summary["total_customers"]), "Customers", "", "orange50"),
            _summary_card(str(summary["total_products"]), "Menu Items", "", "purple50"),
        ]
        if is_desktop:
            summary_cards = ft.Row(cards, spacing=8)
        else:
            summary_cards = ft.Column([ft.Row(cards[:2], spacing=8), ft.Row(cards[2:], spacing=8)], spacing=8)

        sales_chart_container = ft.Container(content=create_sales_trend_chart("daily"))

        def update_sales_chart(e):
            sales_chart_container.content = create_sales_trend_chart(e.control.value)
            page.update()

        period_selector = ft.RadioGroup(
            content=ft.Row([
                ft.Radio(value="daily", label="Daily"),
                ft.Radio(value="weekly", label="Weekly"),
                ft.Radio(value="monthly", label="Monthly"),
            ], spacing=10),
            value="daily",
            on_change=update_sales_chart
        )

        status_panel = _panel(create_status_chart(), is_desktop)
        menu_panel = _panel(create_menu_chart(), is_desktop)
        horizontal = 20 if is_desktop else 10
        charts_content = ft.Column([
            ft.Container(content=summary_cards, padding=ft.padding.symmetric(horizontal=horizontal, vertical=10)),
            ft.Container(
                content=ft.Column([period_selector, sales_chart_container], spacing=8),
                border=ft.border.all(1, "grey300"), border_radius=8, padding=12, bgcolor="white",
                margin=ft.margin.symmetric(horizontal=horizontal)
            ),
            ft.Row([status_panel, menu_panel], spacing=12) if is_desktop else ft.Column([status_panel, menu_panel]),
            ft.Container(
                content=ft.Column([
                    ft.Text("Contact Messages", size=16, weight="bold"),
                    create_message_summary(),
                    ft.Divider(height=1),
                    ft.Text("Recent Admin Actions", size=16, weight="bold"),
                    create_recent_actions(),
                ], spacing=8),
                border=ft.border.all(1, "grey300"), border_radius=8, padding=12, bgcolor="white",
                margin=ft.margin.symmetric(horizontal=horizontal, vertical=8)
            ),
            ft.Container(height=20)
        ], spacing=12, scroll=ft.ScrollMode.AUTO)

        main_container.content = ft.Column([
            header(),
            ft.Container(content=charts_content, expand=True, padding=0)
        ], expand=True, spacing=0)
        page.update()
        logger.info("Analytics loaded")

    threading.Thread(target=load_analytics, daemon=True).start()
