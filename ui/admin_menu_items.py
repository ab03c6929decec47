"""
Menu Items Management Tab for Admin Panel
"""
import flet as ft

from core.errors import AdminError
from core.logger import log_action
from core.resource_sync import ResourceSynchronizer
from core.resources import CATEGORIES, FOOD_TYPES, MENU_ITEMS
from core.views import ALL, ViewFilters, derive_view
from ui.admin_utils import (
    build_grid, build_image_picker, build_pagination, close_dialog,
    confirm_delete, filter_dropdown, form_dialog, image_box, search_field,
    show_error, show_snack, status_badge, submit, tab_header
)


def _split_list(text):
    return [part.strip() for part in (text or "").split(",") if part.strip()]


def _join_list(value):
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return value or ""


def build_menu_items_tab(page: ft.Page, api, syncs: list, is_desktop: bool):
    """
    Build the Menu Items management tab

    Args:
        page: Flet page object
        api: Authenticated ApiClient
        syncs: Open synchronizers, closed by the caller when the screen goes away
        is_desktop: True if desktop layout, False if mobile
    """
    sync = ResourceSynchronizer(api, MENU_ITEMS, audit=log_action)
    # Categories are only read here, for the dropdown and the filter
    categories = ResourceSynchronizer(api, CATEGORIES)
    syncs.extend([sync, categories])

    state = {"search": "", "category": ALL, "availability": ALL, "page": 1}
    add_form = {"media": None}

    grid = build_grid(is_desktop, aspect_ratio=3.6)
    pagination = ft.Container()
    stats_row = ft.Row(spacing=20, wrap=True)

    def category_name(item):
        if item.get("category_name"):
            return item["category_name"]
        found = categories.get(item.get("category_id"))
        return found.get("name") if found else "Uncategorized"

    # ===================== CARD BUILDER =====================

    def build_item_card(item):
        available = bool(item.get("is_available"))
        return ft.Card(
            content=ft.Container(
                content=ft.Row([
                    image_box(item.get("image")),
                    ft.Column([
                        ft.Row([
                            ft.Text(item.get("name", ""), weight="bold", size=16, color="black", expand=True),
                            ft.PopupMenuButton(
                                icon=ft.Icons.MORE_VERT,
                                icon_color="black",
                                items=[
                                    ft.PopupMenuItem(text="Edit", icon=ft.Icons.EDIT,
                                                     on_click=lambda e, i=item: show_item_dialog(i)),
                                    ft.PopupMenuItem(
                                        text="Deactivate" if available else "Activate",
                                        icon=ft.Icons.TOGGLE_ON if available else ft.Icons.TOGGLE_OFF,
                                        on_click=lambda e, i=item: toggle_availability(i),
                                    ),
                                    ft.PopupMenuItem(text="Delete", icon=ft.Icons.DELETE,
                                                     on_click=lambda e, i=item: delete_item(i)),
                                ],
                                icon_size=20,
                                padding=0,
                                bgcolor="white",
                                menu_position=ft.PopupMenuPosition.OVER,
                            ),
                        ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN, spacing=5),
                        ft.Text(f"Category: {category_name(item)}  •  {item.get('type', 'veg')}", size=12, color="grey700"),
                        ft.Row([
                            ft.Text(f"₹{float(item.get('price') or 0):.2f}", color="green", weight="bold"),
                            status_badge("Active" if available else "Inactive", "green" if available else "grey"),
                        ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                    ], spacing=5, expand=True),
                ], spacing=10, vertical_alignment=ft.CrossAxisAlignment.CENTER),
                padding=10,
                bgcolor="white",
                border_radius=12,
            )
        )

    # ===================== VIEW =====================

    def refresh_view():
        items = sync.items
        wanted_category = state["category"]
        wanted_availability = state["availability"]
        filters = ViewFilters(
            search=state["search"],
            search_fields=MENU_ITEMS.search_fields,
            field_filters={
                "category": ALL if wanted_category == ALL
                else (lambda item: category_name(item) == wanted_category),
                "is_available": ALL if wanted_availability == ALL
                else (lambda item: bool(item.get("is_available")) == (wanted_availability == "Active")),
            },
        )
        view = derive_view(items, filters, state["page"])
        state["page"] = view.page
        grid.controls = [build_item_card(i) for i in view.items] or [ft.Text("No menu items found", color="grey700")]
        pagination.content = build_pagination(view, go_to_page)
        stats_row.controls = [
            ft.Text(f"Total: {len(items)}", weight="bold"),
            ft.Text(f"Active: {sum(1 for i in items if i.get('is_available'))}"),
            ft.Text(f"Veg: {sum(1 for i in items if i.get('type') == 'veg')}"),
            ft.Text(f"Non-Veg: {sum(1 for i in items if i.get('type') == 'non-veg')}"),
        ]
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

    category_filter = filter_dropdown("Category", [ALL], set_filter("category"))

    def load_items(e=None):
        try:
            categories.fetch_all()
            sync.fetch_all()
        except AdminError as ex:
            show_error(page, ex)
        category_filter.options = [ft.dropdown.Option(ALL)] + [
            ft.dropdown.Option(c.get("name")) for c in categories.items
        ]
        refresh_view()

    # ===================== ADD / EDIT DIALOG =====================

    def show_item_dialog(item=None):
        editing = item is not None
        form = {"media": None} if editing else add_form
        item = item or {}

        name_field = ft.TextField(label="Item Name", value=item.get("name", ""), width=300)
        description_field = ft.TextField(label="Description", value=item.get("description") or "", width=300, multiline=True)
        price_field = ft.TextField(label="Price", value=str(item.get("price") or ""), width=300,
                                   keyboard_type=ft.KeyboardType.NUMBER)
        original_price_field = ft.TextField(label="Original Price", value=str(item.get("original_price") or ""),
                                            width=300, keyboard_type=ft.KeyboardType.NUMBER)
        category_dropdown = ft.Dropdown(
            label="Category",
            width=300,
            value=str(item.get("category_id")) if item.get("category_id") is not None else None,
            options=[ft.dropdown.Option(key=str(c.get("id")), text=c.get("name")) for c in categories.items],
        )
        type_dropdown = ft.Dropdown(
            label="Type", width=300, value=item.get("type") or "veg",
            options=[ft.dropdown.Option(t) for t in FOOD_TYPES],
        )
        prep_field = ft.TextField(label="Preparation Time", value=item.get("prep_time") or "15 min", width=300)
        tags_field = ft.TextField(label="Tags (comma separated)", value=_join_list(item.get("tags")), width=300)
        ingredients_field = ft.TextField(label="Ingredients (comma separated)",
                                         value=_join_list(item.get("ingredients")), width=300)
        available_switch = ft.Switch(label="Available", value=item.get("is_available", True))
        popular_switch = ft.Switch(label="Popular", value=bool(item.get("is_popular")))
        featured_switch = ft.Switch(label="Featured", value=bool(item.get("is_featured")))
        message = ft.Text("", color="red")
        picker = build_image_picker(page, form, message, current_image=item.get("image"),
                                    label="Change Image" if editing else "Upload Image")

        def save(dialog, button):
            try:
                price = float(price_field.value) if price_field.value else None
                original_price = float(original_price_field.value) if original_price_field.value else price
            except ValueError:
                message.value = "❌ Price must be a number"
                page.update()
                return

            payload = {
                "name": name_field.value,
                "description": description_field.value or "",
                "price": price,
                "original_price": original_price,
                "category_id": category_dropdown.value,
                "type": type_dropdown.value,
                "prep_time": prep_field.value or "15 min",
                "is_available": available_switch.value,
                "is_popular": popular_switch.value,
                "is_featured": featured_switch.value,
                "tags": _split_list(tags_field.value),
                "ingredients": _split_list(ingredients_field.value),
            }
            if editing and form["media"] is None and item.get("image"):
                # Keep the existing image path
                payload["image"] = item["image"]

            def send():
                if editing:
                    return sync.update(item["id"], payload, form["media"])
                return sync.create(payload, form["media"])

            def done(result):
                close_dialog(page, dialog)
                if not editing:
                    add_form["media"] = None
                refresh_view()
                show_snack(page, f"✅ Item {'updated' if editing else 'added'} successfully!")

            submit(page, button, send, done, message)

        form_dialog(
            page,
            f"Edit: {item.get('name', '')}" if editing else "Add New Menu Item",
            [
                name_field, description_field, price_field, original_price_field,
                category_dropdown, type_dropdown, prep_field, tags_field, ingredients_field,
                ft.Row([available_switch, popular_switch], wrap=True), featured_switch,
                ft.Divider(),
                ft.Text("Item Image", size=14, weight="bold"),
                picker,
            ],
            "Update" if editing else "Save",
            save,
            message,
            height=600,
        )

    # ===================== AVAILABILITY / DELETE =====================

    def toggle_availability(item):
        available = not item.get("is_available")
        fields = {
            "name": item.get("name"),
            "description": item.get("description"),
            "price": item.get("price"),
            "is_available": available,
            "is_popular": item.get("is_popular", False),
            "is_featured": item.get("is_featured", False),
        }
        try:
            sync.set_fields(item["id"], fields)
        except AdminError as ex:
            show_error(page, ex)
            return
        refresh_view()
        show_snack(page, f"✅ Item {'activated' if available else 'deactivated'} successfully!")

    def delete_item(item):
        def confirm(dialog, button):
            def done(_):
                close_dialog(page, dialog)
                refresh_view()
                show_snack(page, f"✅ {item.get('name')} deleted", ft.Colors.ORANGE)

            submit(page, button, lambda: sync.remove(item["id"]), done)

        confirm_delete(page, item.get("name", ""), confirm)

    # ===================== BUILD TAB =====================

    load_items()

    return ft.Tab(
        text="Menu",
        icon=ft.Icons.RESTAURANT_MENU,
        content=ft.Column([
            tab_header(
                "Manage Menu",
                on_add=lambda e: show_item_dialog(),
                add_label="Add New Item",
                extra=[
                    search_field(set_filter("search"), "Search menu..."),
                    category_filter,
                    filter_dropdown("Status", [ALL, "Active", "Inactive"], set_filter("availability")),
                    ft.IconButton(icon=ft.Icons.REFRESH, tooltip="Reload", on_click=load_items),
                ],
            ),
            ft.Container(content=stats_row, padding=ft.padding.only(left=10, right=10)),
            ft.Container(content=grid, expand=True, padding=10),
            pagination,
        ], expand=True, spacing=0),
    )
