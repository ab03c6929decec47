"""
Users Management Tab for Admin Panel
"""
import flet as ft

from core.auth_service import is_valid_email
from core.errors import AdminError, ValidationError
from core.logger import log_action
from core.resource_sync import ResourceSynchronizer
from core.resources import USER_ROLES, USERS
from core.views import ALL, ViewFilters, derive_view
from ui.admin_utils import (
    build_grid, build_pagination, close_dialog, confirm_delete,
    filter_dropdown, form_dialog, search_field, show_error, show_snack,
    status_badge, submit, tab_header
)

ROLE_COLORS = {"admin": "blue", "staff": "purple", "user": "green"}


def build_users_tab(page: ft.Page, api, syncs: list, is_desktop: bool):
    """
    Build the Users management tab

    Args:
        page: Flet page object
        api: Authenticated ApiClient
        syncs: Open synchronizers, closed by the caller when the screen goes away
        is_desktop: True if desktop layout, False if mobile
    """
    sync = ResourceSynchronizer(api, USERS, audit=log_action)
    syncs.append(sync)

    state = {"search": "", "status": ALL, "role": ALL, "page": 1}

    grid = build_grid(is_desktop, aspect_ratio=3.4)
    pagination = ft.Container()

    # ===================== CARD BUILDER =====================

    def build_user_card(user):
        role = user.get("role") or "user"
        active = bool(user.get("is_active", True))
        is_self = str(user.get("email")) == str(api.session.email)

        return ft.Card(
            content=ft.Container(
                content=ft.Column([
                    ft.Row([
                        ft.Row([
                            ft.CircleAvatar(content=ft.Text((user.get("name") or "?")[:1].upper()), radius=18),
                            ft.Column([
                                ft.Text(user.get("name") or "", weight="bold", size=14, color="black"),
                                ft.Text(user.get("email") or "", size=12, color="grey700"),
                            ], spacing=0),
                        ], spacing=10, expand=True),
                        ft.PopupMenuButton(
                            icon=ft.Icons.MORE_VERT,
                            icon_color="black",
                            items=[
                                ft.PopupMenuItem(text="Edit", icon=ft.Icons.EDIT,
                                                 on_click=lambda e, u=user: show_user_dialog(u)),
                                ft.PopupMenuItem(
                                    text="Deactivate" if active else "Activate",
                                    icon=ft.Icons.BLOCK if active else ft.Icons.CHECK_CIRCLE,
                                    on_click=lambda e, u=user: toggle_active(u),
                                    disabled=is_self,
                                ),
                                ft.PopupMenuItem(text="Delete", icon=ft.Icons.DELETE,
                                                 on_click=lambda e, u=user: delete_user(u), disabled=is_self),
                            ],
                            icon_size=20,
                            padding=0,
                            bgcolor="white",
                            menu_position=ft.PopupMenuPosition.OVER,
                        ),
                    ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                    ft.Row([
                        status_badge(role.upper(), ROLE_COLORS.get(role, "grey")),
                        status_badge("Active" if active else "Inactive", "green" if active else "grey"),
                        ft.Text(user.get("phone") or "", size=12, color="grey700"),
                    ], spacing=5),
                ], spacing=6),
                padding=10,
                bgcolor="white",
                border_radius=12,
            )
        )

    # ===================== VIEW =====================

    def refresh_view():
        wanted_status = state["status"]
        filters = ViewFilters(
            search=state["search"],
            search_fields=USERS.search_fields,
            field_filters={
                "role": state["role"],
                "is_active": ALL if wanted_status == ALL
                else (lambda u: bool(u.get("is_active", True)) == (wanted_status == "Active")),
            },
        )
        view = derive_view(sync.items, filters, state["page"])
        state["page"] = view.page
        grid.controls = [build_user_card(u) for u in view.items] or [ft.Text("No users found", color="grey700")]
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

    def load_users(e=None):
        try:
            sync.fetch_all()
        except AdminError as ex:
            show_error(page, ex)
        refresh_view()

    # ===================== CREATE / EDIT DIALOG =====================

    def show_user_dialog(user=None):
        editing = user is not None
        user = user or {}

        name_field = ft.TextField(label="Full Name", value=user.get("name") or "", width=300)
        email_field = ft.TextField(label="Email", value=user.get("email") or "", width=300)
        phone_field = ft.TextField(label="Phone", value=user.get("phone") or "", width=300)
        password_field = ft.TextField(label="Password", password=True, can_reveal_password=True, width=300)
        role_dropdown = ft.Dropdown(
            label="Role",
            width=300,
            value=user.get("role") or "user",
            options=[ft.dropdown.Option(r) for r in USER_ROLES],
        )
        message = ft.Text("", color="red")

        def save(dialog, button):
            email = (email_field.value or "").strip()
            if email and not is_valid_email(email):
                message.value = "❌ Invalid email format"
                page.update()
                return

            payload = {
                "name": name_field.value,
                "email": email,
                "phone": phone_field.value or "",
            }

            def send():
                if editing:
                    return sync.update(user["id"], {**payload, "role": role_dropdown.value})
                if not password_field.value or len(password_field.value) < 6:
                    raise ValidationError("Password must be at least 6 characters")
                created = sync.create({**payload, "password": password_field.value})
                # Registration always yields a plain user; promote afterwards
                if role_dropdown.value != "user":
                    created = created or next((u for u in sync.items if u.get("email") == email), None)
                    if created is not None:
                        sync.set_fields(created["id"], {"role": role_dropdown.value}, suffix="role")
                return created

            def done(result):
                close_dialog(page, dialog)
                refresh_view()
                show_snack(page, f"✅ User {'updated' if editing else 'created'} successfully!")

            submit(page, button, send, done, message)

        controls = [name_field, email_field, phone_field]
        if not editing:
            controls.append(password_field)
        controls.append(role_dropdown)

        form_dialog(
            page,
            f"Edit: {user.get('name', '')}" if editing else "Create New User",
            controls,
            "Update" if editing else "Create",
            save,
            message,
            height=380,
        )

    # ===================== STATUS / DELETE =====================

    def toggle_active(user):
        active = not bool(user.get("is_active", True))
        try:
            sync.set_fields(user["id"], {"is_active": active}, suffix="status")
        except AdminError as ex:
            show_error(page, ex)
            return
        refresh_view()
        show_snack(page, f"✅ User {'activated' if active else 'deactivated'}")

    def delete_user(user):
        def confirm(dialog, button):
            def done(_):
                close_dialog(page, dialog)
                refresh_view()
                show_snack(page, f"✅ User {user.get('email')} deleted", ft.Colors.ORANGE)

            submit(page, button, lambda: sync.remove(user["id"]), done)

        confirm_delete(page, user.get("email", ""), confirm)

    # ===================== BUILD TAB =====================

    load_users()

    return ft.Tab(
        text="Users",
        icon=ft.Icons.PEOPLE,
        content=ft.Column([
            tab_header(
                "Manage Users",
                on_add=lambda e: show_user_dialog(),
                add_label="Add User",
                extra=[
                    search_field(set_filter("search"), "Search users..."),
                    filter_dropdown("Status", [ALL, "Active", "Inactive"], set_filter("status")),
                    filter_dropdown("Role", [ALL] + USER_ROLES, set_filter("role")),
                    ft.IconButton(icon=ft.Icons.REFRESH, tooltip="Reload", on_click=load_users),
                ],
            ),
            ft.Container(content=grid, expand=True, padding=10),
            pagination,
        ], expand=True, spacing=0),
    )
