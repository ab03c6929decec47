"""
Orders Management Tab for Admin Panel
"""
import flet as ft

from core.errors import AdminError
from core.logger import log_action
from core.order_lifecycle import ACTION_LABELS, OrderAction, OrderLifecycle, OrderStatus
from core.resource_sync import ResourceSynchronizer
from core.resources import ORDERS
from core.views import ALL, ViewFilters, derive_view
from ui.admin_constants import ORDER_STATUS_COLORS
from ui.admin_utils import (
    build_grid, build_pagination, close_dialog, filter_dropdown, open_dialog,
    search_field, show_error, show_snack, status_badge, tab_header
)

ACTION_COLORS = {
    OrderAction.ACCEPT: "green500",
    OrderAction.REJECT: "red500",
    OrderAction.START_PREPARING: "blue700",
    OrderAction.MARK_READY: "teal700",
    OrderAction.MARK_DELIVERED: "green700",
}


def build_orders_tab(page: ft.Page, api, syncs: list, is_desktop: bool):
    """
    Build the Orders management tab

    Args:
        page: Flet page object
        api: Authenticated ApiClient
        syncs: Open synchronizers, closed by the caller when the screen goes away
        is_desktop: True if desktop layout, False if mobile

    Returns:
        ft.Tab: Complete orders tab with all functionality
    """
    sync = ResourceSynchronizer(api, ORDERS, audit=log_action)
    syncs.append(sync)
    lifecycle = OrderLifecycle(sync)

    state = {"search": "", "status": ALL, "page": 1}

    grid = build_grid(is_desktop, aspect_ratio=3.2)
    pagination = ft.Container()

    # ===================== CARD BUILDER =====================

    def build_order_card(payload):
        order = lifecycle.order(payload["id"])
        number = payload.get("order_number") or payload["id"]
        customer = payload.get("user_name") or payload.get("user_email") or "Customer"
        amount = float(payload.get("final_amount") or payload.get("total_amount") or 0)
        status = str(order.status)

        buttons = [
            ft.ElevatedButton(
                "View",
                on_click=lambda e, p=payload: show_order_details(p),
                style=ft.ButtonStyle(padding=8, color="black", bgcolor="grey200"),
                height=35,
            )
        ]
        for action in order.available_actions:
            buttons.append(
                ft.ElevatedButton(
                    ACTION_LABELS[action],
                    on_click=lambda e, oid=payload["id"], a=action: update_order_status(e.control, oid, a),
                    style=ft.ButtonStyle(padding=8, color=ACTION_COLORS[action], bgcolor="grey200"),
                    height=35,
                )
            )

        return ft.Card(
            content=ft.Container(
                content=ft.Column([
                    ft.Row([
                        ft.Text(f"Order #{number}", weight="bold", size=14, color="black"),
                        status_badge(status.capitalize(), ORDER_STATUS_COLORS.get(status, "grey")),
                    ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                    ft.Text(f"by {customer}  •  {payload.get('item_count') or 0} items", size=12, color="grey700"),
                    ft.Row([
                        ft.Text(f"Total: ₹{amount:.2f}", size=14, weight="bold", color="green"),
                        ft.Row(buttons, spacing=5, wrap=True),
                    ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN, wrap=True),
                ], spacing=3),
                padding=10,
                bgcolor="white",
                border_radius=12,
            )
        )

    # ===================== VIEW =====================

    def refresh_view():
        view = derive_view(
            sync.items,
            ViewFilters(
                search=state["search"],
                search_fields=ORDERS.search_fields,
                field_filters={ORDERS.status_field: state["status"]},
            ),
            state["page"],
        )
        state["page"] = view.page
        grid.controls = [build_order_card(o) for o in view.items] or [ft.Text("No orders found", color="grey700")]
        pagination.content = build_pagination(view, go_to_page)
        page.update()

    def go_to_page(number):
        state["page"] = number
        refresh_view()

    def set_filter(key):
        def handler(e):
            state[key] = e.control.value
            state["page"] = 1
            refresh_view()
        return handler

    def load_orders(e=None):
        try:
            sync.fetch_all()
        except AdminError as ex:
            show_error(page, ex)
        refresh_view()

    # ===================== UPDATE ORDER STATUS =====================

    def update_order_status(button, order_id, action):
        # Disabled while pending; the card is rebuilt once the server answers
        button.disabled = True
        page.update()
        try:
            order = lifecycle.apply_transition(order_id, action)
        except AdminError as ex:
            button.disabled = False
            show_error(page, ex)
            return
        refresh_view()
        if order is not None:
            show_snack(page, f"✅ Order #{order.data.get('order_number') or order_id} → {order.status}")

    # ===================== DETAILS =====================

    def show_order_details(payload):
        rows = [
            ("Order", payload.get("order_number") or payload.get("id")),
            ("Customer", payload.get("user_name") or "-"),
            ("Email", payload.get("user_email") or "-"),
            ("Items", payload.get("item_count") or 0),
            ("Amount", f"₹{float(payload.get('final_amount') or payload.get('total_amount') or 0):.2f}"),
            ("Status", str(payload.get(ORDERS.status_field, "")).capitalize()),
            ("Placed", (payload.get("created_at") or "")[:10]),
        ]
        dialog = ft.AlertDialog(
            title=ft.Text("Order Details", size=16, weight="bold"),
            content=ft.Column(
                [ft.Row([ft.Text(f"{label}:", weight="bold", width=90), ft.Text(str(value))]) for label, value in rows],
                tight=True,
                spacing=6,
            ),
            actions=[ft.TextButton("Close", on_click=lambda e: close_dialog(page, dialog))],
        )
        open_dialog(page, dialog)

    # ===================== BUILD TAB =====================

    load_orders()

    return ft.Tab(
        text="Orders",
        icon=ft.Icons.SHOPPING_BAG,
        content=ft.Column([
            tab_header(
                "Manage Orders",
                extra=[
                    search_field(set_filter("search"), "Search orders..."),
                    filter_dropdown("Status", [ALL] + [s.value for s in OrderStatus], set_filter("status")),
                    ft.IconButton(icon=ft.Icons.REFRESH, tooltip="Reload", on_click=load_orders),
                ],
            ),
            ft.Container(content=grid, expand=True, padding=10),
            pagination,
        ], expand=True, spacing=0),
    )
