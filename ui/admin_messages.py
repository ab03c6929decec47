"""
Contact Messages Tab for Admin Panel
"""
from urllib.parse import quote

import flet as ft

from core.errors import AdminError, AuthRequired
from core.logger import log_action
from core.resource_sync import ResourceSynchronizer
from core.resources import CONTACT_MESSAGES, MESSAGE_STATUSES
from core.views import ALL, ViewFilters, derive_view
from ui.admin_constants import MESSAGE_STATUS_COLORS
from ui.admin_utils import (
    build_grid, build_pagination, close_dialog, confirm_delete,
    filter_dropdown, open_dialog, search_field, show_error, show_snack,
    status_badge, submit, tab_header
)

ID = CONTACT_MESSAGES.id_field


def build_messages_tab(page: ft.Page, api, syncs: list, is_desktop: bool):
    sync = ResourceSynchronizer(api, CONTACT_MESSAGES, audit=log_action)
    syncs.append(sync)

    state = {"search": "", "status": ALL, "page": 1}

    grid = build_grid(is_desktop, aspect_ratio=3.4)
    pagination = ft.Container()

    def status_of(message):
        return (message.get("status") or "unread").lower()

    def body_of(message):
        return message.get("message") or message.get("message_preview") or ""

    # ===================== CARD BUILDER =====================

    def build_message_card(message):
        status = status_of(message)
        return ft.Card(
            content=ft.Container(
                content=ft.Column([
                    ft.Row([
                        ft.Text(message.get("subject") or "(no subject)", weight="bold", size=14,
                                color="black", expand=True, max_lines=1, overflow=ft.TextOverflow.ELLIPSIS),
                        status_badge(status.capitalize(), MESSAGE_STATUS_COLORS.get(status, "grey")),
                    ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                    ft.Text(f"{message.get('name') or ''} <{message.get('email') or ''}>", size=12, color="grey700"),
                    ft.Text(body_of(message), size=12, max_lines=2, overflow=ft.TextOverflow.ELLIPSIS),
                    ft.Row([
                        ft.TextButton("Open", icon=ft.Icons.MAIL_OUTLINE,
                                      on_click=lambda e, m=message: show_message(m)),
                        ft.TextButton("Delete", icon=ft.Icons.DELETE_OUTLINE,
                                      on_click=lambda e, m=message: delete_message(m)),
                    ], spacing=0),
                ], spacing=3),
                padding=10,
                bgcolor="white" if status != "unread" else "#FFF8E1",
                border_radius=12,
            )
        )

    # ===================== VIEW =====================

    def refresh_view():
        wanted = state["status"]
        view = derive_view(
            sync.items,
            ViewFilters(
                search=state["search"],
                search_fields=CONTACT_MESSAGES.search_fields,
                field_filters={"status": ALL if wanted == ALL else (lambda m: status_of(m) == wanted)},
            ),
            state["page"],
        )
        state["page"] = view.page
        grid.controls = [build_message_card(m) for m in view.items] or [ft.Text("No messages found", color="grey700")]
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

    def load_messages(e=None):
        try:
            sync.fetch_all()
        except AdminError as ex:
            show_error(page, ex)
        refresh_view()

    # ===================== STATUS =====================

    def set_status(message, status):
        sync.set_fields(message[ID], {"status": status}, suffix="status")

    def show_message(message):
        # The list only has a preview; load the full message first
        try:
            message = sync.fetch_one(message[ID]) or message
        except AuthRequired as ex:
            show_error(page, ex)
            return
        except AdminError as ex:
            show_error(page, ex)

        if status_of(message) == "unread":
            try:
                set_status(message, "read")
            except AdminError as ex:
                # Still show the message; it just stays unread
                show_error(page, ex)
            message = sync.get(message[ID]) or message
            refresh_view()

        reply_button = ft.ElevatedButton("Mark as Replied", icon=ft.Icons.REPLY,
                                         disabled=status_of(message) == "replied")

        def reply(e):
            subject = quote(f"Re: {message.get('subject') or ''}")
            page.launch_url(f"mailto:{message.get('email')}?subject={subject}")

        def mark_replied(e):
            def done(_):
                close_dialog(page, dialog)
                refresh_view()
                show_snack(page, "✅ Message marked as replied")

            submit(page, reply_button, lambda: set_status(message, "replied"), done)

        reply_button.on_click = mark_replied
        dialog = ft.AlertDialog(
            title=ft.Text(message.get("subject") or "(no subject)", size=16, weight="bold"),
            content=ft.Container(
                content=ft.Column([
                    ft.Text(f"From: {message.get('name') or ''} <{message.get('email') or ''}>", size=12),
                    ft.Text(f"Phone: {message.get('phone') or '-'}", size=12),
                    ft.Text(f"Received: {(message.get('created_at') or '')[:16].replace('T', ' ')}", size=12),
                    ft.Divider(),
                    ft.Text(body_of(message) or "No message content"),
                ], tight=True, scroll=ft.ScrollMode.AUTO),
                width=360,
            ),
            actions=[
                ft.TextButton("Reply by Email", icon=ft.Icons.EMAIL, on_click=reply),
                reply_button,
                ft.TextButton("Close", on_click=lambda e: close_dialog(page, dialog)),
            ],
        )
        open_dialog(page, dialog)

    def delete_message(message):
        def confirm(dialog, button):
            def done(_):
                close_dialog(page, dialog)
                refresh_view()
                show_snack(page, "✅ Message deleted", ft.Colors.ORANGE)

            submit(page, button, lambda: sync.remove(message[ID]), done)

        confirm_delete(page, message.get("subject") or "this message", confirm)

    # ===================== BUILD TAB =====================

    load_messages()

    return ft.Tab(
        text="Messages",
        icon=ft.Icons.MAIL,
        content=ft.Column([
            tab_header(
                "Contact Messages",
                extra=[
                    search_field(set_filter("search"), "Search messages..."),
                    filter_dropdown("Status", [ALL] + MESSAGE_STATUSES, set_filter("status")),
                    ft.IconButton(icon=ft.Icons.REFRESH, tooltip="Reload", on_click=load_messages),
                ],
            ),
            ft.Container(content=grid, expand=True, padding=10),
            pagination,
        ], expand=True, spacing=0),
    )
