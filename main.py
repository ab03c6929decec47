import logging
import os
import threading
import time

import flet as ft

from core.api_client import ApiClient
from core.auth_service import logout_admin
from core.db import init_models
from core.logger import setup_logging
from core.session import AdminSession
from ui.admin_view import admin_view
from ui.analytics_view import analytics_view
from ui.login_view import login_view

logger = logging.getLogger(__name__)

SESSION_CHECK_INTERVAL = int(os.getenv("SESSION_CHECK_INTERVAL", "10"))
WARNING_TIME = int(os.getenv("SESSION_WARNING_TIME", "60"))

PUBLIC_ROUTES = ["/login", "/logout", "/"]


def main(page: ft.Page):
    page.window.width = 1200
    page.window.height = 800
    page.padding = 0
    page.spacing = 0

    page.title = "Admin Console"
    page.horizontal_alignment = ft.CrossAxisAlignment.CENTER
    page.vertical_alignment = ft.MainAxisAlignment.START

    # One session and client per window; screens receive them explicitly
    session = AdminSession()
    api = ApiClient(session)
    syncs = []

    monitor_active = {"value": False}
    warning_dialog = {"control": None}

    def close_screen_syncs():
        """Late responses for a screen that is gone must not touch its state."""
        for sync in syncs:
            sync.close()
        syncs.clear()

    def close_warning_dialog():
        dialog = warning_dialog["control"]
        if dialog is not None:
            dialog.open = False
            warning_dialog["control"] = None
            page.update()

    def on_user_activity(e=None):
        if warning_dialog["control"] is not None:
            close_warning_dialog()
        session.refresh()

    page.on_keyboard_event = on_user_activity

    def show_warning_dialog(remaining_seconds):
        if warning_dialog["control"] is not None:
            return

        countdown_text = ft.Text(f"{int(remaining_seconds)}s", size=40, weight="bold", color="orange")

        def stay_logged_in(e):
            session.refresh()
            close_warning_dialog()

        dialog = ft.AlertDialog(
            modal=True,
            title=ft.Text("Session Expiring", size=20, weight="bold"),
            content=ft.Container(
                content=ft.Column([
                    ft.Text(
                        "You've been inactive. Your session will expire soon.",
                        size=14,
                        text_align=ft.TextAlign.CENTER
                    ),
                    ft.Container(height=20),
                    countdown_text,
                ], horizontal_alignment=ft.CrossAxisAlignment.CENTER, tight=True),
                width=300,
                padding=20
            ),
            actions=[
                ft.TextButton("Logout Now", on_click=lambda e: force_logout()),
                ft.ElevatedButton(
                    "Stay Logged In",
                    on_click=stay_logged_in,
                    style=ft.ButtonStyle(bgcolor="green", color="white")
                )
            ],
            actions_alignment=ft.MainAxisAlignment.SPACE_BETWEEN
        )
        warning_dialog["control"] = dialog
        page.overlay.append(dialog)
        dialog.open = True
        page.update()

        def update_countdown():
            while warning_dialog["control"] is dialog:
                active, remaining = session.is_active(return_remaining=True)
                if not active:
                    break
                countdown_text.value = f"{int(remaining)}s"
                page.update()
                time.sleep(1)

        threading.Thread(target=update_countdown, daemon=True).start()

    def force_logout():
        logger.info("Session ended for %s", session.email)
        monitor_active["value"] = False
        close_warning_dialog()
        logout_admin(api)
        page.go("/login")

    def start_session_monitor():
        if monitor_active["value"]:
            return
        monitor_active["value"] = True

        def session_monitor():
            logger.debug("Session monitor started")
            while monitor_active["value"]:
                if session.token:
                    active, remaining = session.is_active(return_remaining=True)
                    if not active:
                        logger.info("Session expired, logging out")
                        force_logout()
                        return
                    if remaining <= WARNING_TIME:
                        show_warning_dialog(remaining)
                time.sleep(SESSION_CHECK_INTERVAL)
            logger.debug("Session monitor ended")

        threading.Thread(target=session_monitor, daemon=True).start()

    def stop_session_monitor():
        monitor_active["value"] = False
        close_warning_dialog()

    def route_change(e):
        close_screen_syncs()
        page.clean()

        if page.route not in PUBLIC_ROUTES and not session.is_active():
            stop_session_monitor()
            if session.token:
                logout_admin(api)
            page.snack_bar = ft.SnackBar(ft.Text("Please log in to continue."), open=True)
            page.update()
            page.go("/login")
            return

        if page.route == "/logout":
            stop_session_monitor()
            if session.token:
                logout_admin(api)
            page.snack_bar = ft.SnackBar(ft.Text("You have been logged out."), open=True)
            page.update()
            page.go("/login")
            return

        if page.route in ("/login", "/"):
            stop_session_monitor()
            login_view(page, api)
        elif page.route == "/admin":
            session.refresh()
            start_session_monitor()
            admin_view(page, api, syncs)
        elif page.route == "/analytics":
            session.refresh()
            start_session_monitor()
            analytics_view(page, api, syncs)
        else:
            page.go("/login")

    page.on_route_change = route_change
    page.go("/login")


def run():
    setup_logging()
    init_models()
    ft.app(target=main)


if __name__ == "__main__":
    run()
