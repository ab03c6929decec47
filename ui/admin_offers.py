"""
Offers Management Tab for Admin Panel

Offer banners travel as base64 data URIs inside the JSON body.
"""
import flet as ft

from core.errors import AdminError
from core.logger import log_action
from core.resource_sync import ResourceSynchronizer
from core.resources import DISCOUNT_TYPES, OFFER_STATUS_ACTIONS, OFFER_STATUSES, OFFERS
from core.views import ALL, ViewFilters, derive_view
from ui.admin_constants import OFFER_STATUS_COLORS
from ui.admin_utils import (
    build_grid, build_image_picker, build_pagination, close_dialog,
    confirm_delete, filter_dropdown, form_dialog, image_box, search_field,
    show_error, show_snack, status_badge, submit, tab_header
)


def _discount_text(offer):
    value = offer.get("discount_value") or 0
    kind = offer.get("discount_type")
    if kind == "percentage":
        return f"{value}% OFF"
    if kind == "fixed":
        return f"₹{value} OFF"
    if kind == "cashback":
        return f"₹{value} Cashback"
    if kind == "bogo":
        return "Buy 1 Get 1"
    return "Free Item" if kind == "free_item" else str(value)


def build_offers_tab(page: ft.Page, api, syncs: list, is_desktop: bool):
    sync = ResourceSynchronizer(api, OFFERS, audit=log_action)
    syncs.append(sync)

    state = {"search": "", "status": ALL, "discount_type": ALL, "page": 1}
    add_form = {"media": None}

    grid = build_grid(is_desktop, aspect_ratio=3.0)
    pagination = ft.Container()

    # ===================== CARD BUILDER =====================

    def build_offer_card(offer):
        status = offer.get("status") or "Upcoming"
        used, limit = offer.get("used_count") or 0, offer.get("usage_limit") or 0
        status_buttons = [
            ft.TextButton(label, on_click=lambda e, o=offer, s=target: change_status(o, s))
            for label, target in OFFER_STATUS_ACTIONS.get(status, [])
        ]
        return ft.Card(
            content=ft.Container(
                content=ft.Row([
                    image_box(offer.get(OFFERS.image_field), icon=ft.Icons.LOCAL_OFFER),
                    ft.Column([
                        ft.Row([
                            ft.Text(offer.get("title") or "", weight="bold", size=15, color="black", expand=True),
                            ft.PopupMenuButton(
                                icon=ft.Icons.MORE_VERT,
                                icon_color="black",
                                items=[
                                    ft.PopupMenuItem(text="Edit", icon=ft.Icons.EDIT,
                                                     on_click=lambda e, o=offer: show_offer_dialog(o)),
                                    ft.PopupMenuItem(text="Delete", icon=ft.Icons.DELETE,
                                                     on_click=lambda e, o=offer: delete_offer(o)),
                                ],
                                icon_size=20,
                                padding=0,
                                bgcolor="white",
                            ),
                        ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                        ft.Row([
                            ft.Text(f"Code: {offer.get('code') or ''}", size=12, weight="bold"),
                            ft.Text(_discount_text(offer), size=12, color="green"),
                            status_badge(status, OFFER_STATUS_COLORS.get(status, "grey")),
                        ], spacing=8, wrap=True),
                        ft.Text(
                            f"{offer.get('valid_from') or '?'} → {offer.get('valid_till') or '?'}"
                            f"  •  used {used}/{limit or '∞'}",
                            size=11, color="grey700",
                        ),
                        ft.Row(status_buttons, spacing=0, wrap=True),
                    ], spacing=3, expand=True),
                ], spacing=10),
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
                search_fields=OFFERS.search_fields,
                field_filters={"status": state["status"], "discount_type": state["discount_type"]},
            ),
            state["page"],
        )
        state["page"] = view.page
        grid.controls = [build_offer_card(o) for o in view.items] or [ft.Text("No offers match the selected filters", color="grey700")]
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

    def load_offers(e=None):
        try:
            sync.fetch_all()
        except AdminError as ex:
            show_error(page, ex)
        refresh_view()

    # ===================== ADD / EDIT DIALOG =====================

    def show_offer_dialog(offer=None):
        editing = offer is not None
        form = {"media": None} if editing else add_form
        offer = offer or {}

        title_field = ft.TextField(label="Offer Title", value=offer.get("title") or "", width=300)
        code_field = ft.TextField(label="Coupon Code", value=offer.get("code") or "", width=300,
                                  capitalization=ft.TextCapitalization.CHARACTERS)
        description_field = ft.TextField(label="Description", value=offer.get("description") or "",
                                         width=300, multiline=True)
        type_dropdown = ft.Dropdown(
            label="Discount Type", width=300, value=offer.get("discount_type") or "percentage",
            options=[ft.dropdown.Option(t) for t in DISCOUNT_TYPES],
        )
        value_field = ft.TextField(label="Discount Value", value=str(offer.get("discount_value") or ""),
                                   width=300, keyboard_type=ft.KeyboardType.NUMBER)
        min_order_field = ft.TextField(label="Minimum Order", value=str(offer.get("min_order") or "0"),
                                       width=300, keyboard_type=ft.KeyboardType.NUMBER)
        from_field = ft.TextField(label="Valid From (YYYY-MM-DD)", value=offer.get("valid_from") or "", width=300)
        till_field = ft.TextField(label="Valid Till (YYYY-MM-DD)", value=offer.get("valid_till") or "", width=300)
        limit_field = ft.TextField(label="Usage Limit (0 = unlimited)", value=str(offer.get("usage_limit") or 0),
                                   width=300, keyboard_type=ft.KeyboardType.NUMBER)
        status_dropdown = ft.Dropdown(
            label="Status", width=300, value=offer.get("status") or "Upcoming",
            options=[ft.dropdown.Option(s) for s in OFFER_STATUSES],
        )
        message = ft.Text("", color="red")
        picker = build_image_picker(page, form, message, current_image=offer.get(OFFERS.image_field),
                                    label="Change Banner" if editing else "Upload Banner")

        def save(dialog, button):
            try:
                discount_value = float(value_field.value or 0)
                min_order = float(min_order_field.value or 0)
                usage_limit = int(limit_field.value or 0)
            except ValueError:
                message.value = "❌ Discount, minimum order and usage limit must be numbers"
                page.update()
                return

            payload = {
                "title": title_field.value,
                "code": (code_field.value or "").upper(),
                "description": description_field.value or "",
                "discount_type": type_dropdown.value,
                "discount_value": discount_value,
                "min_order": min_order,
                "valid_from": from_field.value or None,
                "valid_till": till_field.value or None,
                "usage_limit": usage_limit,
                "status": status_dropdown.value,
            }

            def send():
                if editing:
                    return sync.update(offer["id"], payload, form["media"])
                return sync.create(payload, form["media"])

            def done(result):
                close_dialog(page, dialog)
                if not editing:
                    add_form["media"] = None
                refresh_view()
                show_snack(page, f"✅ Offer {'updated' if editing else 'created'} successfully!")

            submit(page, button, send, done, message)

        form_dialog(
            page,
            f"Edit: {offer.get('title', '')}" if editing else "Create New Offer",
            [
                title_field, code_field, description_field, type_dropdown, value_field,
                min_order_field, from_field, till_field, limit_field, status_dropdown,
                ft.Divider(),
                ft.Text("Banner Image", size=14, weight="bold"),
                picker,
            ],
            "Update" if editing else "Create",
            save,
            message,
            height=600,
        )

    # ===================== STATUS / DELETE =====================

    def change_status(offer, new_status):
        try:
            sync.set_fields(offer["id"], {"status": new_status})
        except AdminError as ex:
            show_error(page, ex)
            return
        refresh_view()
        show_snack(page, f"✅ {offer.get('title')} → {new_status}")

    def delete_offer(offer):
        def confirm(dialog, button):
            def done(_):
                close_dialog(page, dialog)
                refresh_view()
                show_snack(page, f"✅ {offer.get('title')} deleted", ft.Colors.ORANGE)

            submit(page, button, lambda: sync.remove(offer["id"]), done)

        confirm_delete(page, offer.get("title", ""), confirm)

    # ===================== BUILD TAB =====================

    load_offers()

    return ft.Tab(
        text="Offers",
        icon=ft.Icons.LOCAL_OFFER,
        content=ft.Column([
            tab_header(
                "Manage Offers",
                on_add=lambda e: show_offer_dialog(),
                add_label="Create Offer",
                extra=[
                    search_field(set_filter("search"), "Search offers..."),
                    filter_dropdown("Status", [ALL] + OFFER_STATUSES, set_filter("status")),
                    filter_dropdown("Discount", [ALL] + DISCOUNT_TYPES, set_filter("discount_type")),
                    ft.IconButton(icon=ft.Icons.REFRESH, tooltip="Reload", on_click=load_offers),
                ],
            ),
            ft.Container(content=grid, expand=True, padding=10),
            pagination,
        ], expand=True, spacing=0),
    )
