"""
Categories Management Tab for Admin Panel
"""
import flet as ft

from core.errors import AdminError
from core.logger import log_action
from core.resource_sync import ResourceSynchronizer
from core.resources import CATEGORIES
from core.views import ViewFilters, derive_view
from ui.admin_utils import (
    build_grid, build_image_picker, build_pagination, close_dialog,
    confirm_delete, form_dialog, image_box, search_field, show_error,
    show_snack, submit, tab_header
)


def build_categories_tab(page: ft.Page, api, syncs: list, is_desktop: bool):
    """
    Build the Categories management tab

    Args:
        page: Flet page object
        api: Authenticated ApiClient
        syncs: Open synchronizers, closed by the caller when the screen goes away
        is_desktop: True if desktop layout, False if mobile

    Returns:
        ft.Tab: Complete categories tab with all functionality
    """
    sync = ResourceSynchronizer(api, CATEGORIES, audit=log_action)
    syncs.append(sync)

    state = {"search": "", "page": 1}
    # Image picked in a cancelled "add" dialog stays pending for the next try
    add_form = {"media": None, "name": "", "description": "", "display_order": "0"}

    grid = build_grid(is_desktop, aspect_ratio=4.0)
    pagination = ft.Container()

    # ===================== CARD BUILDER =====================

    def build_category_card(category):
        return ft.Card(
            content=ft.Container(
                content=ft.Row([
                    image_box(category.get("image"), icon=ft.Icons.CATEGORY),
                    ft.Column([
                        ft.Row([
                            ft.Text(category.get("name", ""), weight="bold", size=16, color="black", expand=True),
                            ft.PopupMenuButton(
                                icon=ft.Icons.MORE_VERT,
                                icon_color="black",
                                items=[
                                    ft.PopupMenuItem(
                                        text="Edit",
                                        icon=ft.Icons.EDIT,
                                        on_click=lambda e, c=category: show_category_dialog(c),
                                    ),
                                    ft.PopupMenuItem(
                                        text="Delete",
                                        icon=ft.Icons.DELETE,
                                        on_click=lambda e, c=category: delete_category(c),
                                    ),
                                ],
                                icon_size=20,
                                padding=0,
                                bgcolor="white",
                                menu_position=ft.PopupMenuPosition.OVER,
                            ),
                        ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN, spacing=5),
                        ft.Text(category.get("description") or "", size=12, color="grey700", max_lines=2,
                                overflow=ft.TextOverflow.ELLIPSIS),
                        ft.Text(f"Display order: {category.get('display_order') or 0}", size=12, color="grey700"),
                    ], spacing=5, expand=True),
                ], spacing=10, vertical_alignment=ft.CrossAxisAlignment.CENTER),
                padding=10,
                bgcolor="white",
                border_radius=12,
            )
        )

    # ===================== VIEW =====================

    def refresh_view():
        view = derive_view(
            sync.items,
            ViewFilters(search=state["search"], search_fields=CATEGORIES.search_fields),
            state["page"],
        )
        state["page"] = view.page
        grid.controls = [build_category_card(c) for c in view.items]
        if not view.items:
            grid.controls = [ft.Text("No categories found", color="grey700")]
        pagination.content = build_pagination(view, go_to_page)
        page.update()

    def go_to_page(number):
        state["page"] = number
        refresh_view()

    def on_search(e):
        state["search"] = e.control.value
        state["page"] = 1
        refresh_view()

    def load_categories(e=None):
        try:
            sync.fetch_all()
        except AdminError as ex:
            show_error(page, ex)
        refresh_view()

    # ===================== ADD / EDIT DIALOG =====================

    def show_category_dialog(category=None):
        editing = category is not None
        form = {"media": None} if editing else add_form
        source = category if editing else add_form

        name_field = ft.TextField(label="Category Name", value=source.get("name") or "", width=300)
        description_field = ft.TextField(
            label="Description", value=source.get("description") or "", width=300, multiline=True
        )
        order_field = ft.TextField(
            label="Display Order",
            value=str(source.get("display_order") or 0),
            width=300,
            keyboard_type=ft.KeyboardType.NUMBER,
        )
        message = ft.Text("", color="red")
        picker = build_image_picker(
            page, form, message,
            current_image=category.get("image") if editing else None,
            label="Change Image" if editing else "Upload Image",
        )

        def remember_input(e=None):
            if not editing:
                add_form["name"] = name_field.value
                add_form["description"] = description_field.value
                add_form["display_order"] = order_field.value

        for field in (name_field, description_field, order_field):
            field.on_change = remember_input

        def save(dialog, button):
            try:
                display_order = int(order_field.value or 0)
            except ValueError:
                message.value = "❌ Display order must be a number"
                page.update()
                return
            payload = {
                "name": name_field.value,
                "description": description_field.value,
                "display_order": display_order,
            }

            def send():
                if editing:
                    return sync.update(category["id"], payload, form["media"])
                return sync.create(payload, form["media"])

            def done(result):
                close_dialog(page, dialog)
                if not editing:
                    add_form.update({"media": None, "name": "", "description": "", "display_order": "0"})
                refresh_view()
                show_snack(page, f"✅ Category {'updated' if editing else 'added'} successfully!")

            submit(page, button, send, done, message)

        title = f"Edit: {category.get('name', '')}" if editing else "Add New Category"
        form_dialog(
            page, title,
            [
                name_field,
                description_field,
                order_field,
                ft.Divider(),
                ft.Text("Category Image", size=14, weight="bold"),
                picker,
                ft.Text("Optional. Image will be automatically compressed.", size=11, color="grey700"),
            ],
            "Update" if editing else "Save",
            save,
            message,
        )

    # ===================== DELETE =====================

    def delete_category(category):
        def confirm(dialog, button):
            def done(_):
                close_dialog(page, dialog)
                refresh_view()
                show_snack(page, f"✅ {category.get('name')} deleted", ft.Colors.ORANGE)

            submit(page, button, lambda: sync.remove(category["id"]), done)

        confirm_delete(page, category.get("name", ""), confirm)

    # ===================== BUILD TAB =====================

    load_categories()

    return ft.Tab(
        text="Categories",
        icon=ft.Icons.CATEGORY,
        content=ft.Column([
            tab_header(
                "Manage Categories",
                on_add=lambda e: show_category_dialog(),
                add_label="Add Category",
                extra=[
                    search_field(on_search, "Search categories..."),
                    ft.IconButton(icon=ft.Icons.REFRESH, tooltip="Reload", on_click=load_categories),
                ],
            ),
            ft.Container(content=grid, expand=True, padding=10),
            pagination,
        ], expand=True, spacing=0),
    )
