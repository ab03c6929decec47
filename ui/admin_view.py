"""
Admin Panel - Main Orchestrator
Imports and coordinates all admin tabs
"""
import flet as ft

from core.auth_service import logout_admin
from ui.admin_categories import build_categories_tab
from ui.admin_constants import ACCENT_RED, BACKGROUND_GRADIENT, BREAKPOINT
from ui.admin_menu_items import build_menu_items_tab
from ui.admin_messages import build_messages_tab
from ui.admin_offers import build_offers_tab
from ui.admin_orders import build_orders_tab
from ui.admin_users import build_users_tab


def admin_view(page: ft.Page, api, syncs: list):
    """
    Main admin panel view - orchestrates all tabs.

    Every tab registers its synchronizers in ``syncs`` so the router can
    close them when the admin leaves this screen.
    """
    page.title = "Admin Panel"

    if not api.session.is_authenticated:
        page.snack_bar = ft.SnackBar(ft.Text("Please log in to continue."), open=True)
        page.go("/login")
        return

    is_desktop = (page.window.width or 400) > BREAKPOINT

    # ===================== BUILD TABS =====================

    tabs = ft.Tabs(
        selected_index=0,
        animation_duration=300,
        scrollable=True,
        tabs=[
            build_orders_tab(page, api, syncs, is_desktop),
            build_menu_items_tab(page, api, syncs, is_desktop),
            build_categories_tab(page, api, syncs, is_desktop),
            build_offers_tab(page, api, syncs, is_desktop),
            build_users_tab(page, api, syncs, is_desktop),
            build_messages_tab(page, api, syncs, is_desktop),
        ],
        expand=True,
        label_color=ACCENT_RED,
        unselected_label_color="black",
        indicator_color=ACCENT_RED,
        indicator_border_radius=0,
        divider_color="grey300"
    )

    # ===================== HEADER & LOGOUT =====================

    def logout_user(e):
        logout_admin(api)
        page.snack_bar = ft.SnackBar(ft.Text("Logged out successfully."), open=True)
        page.go("/logout")

    admin_name = api.session.admin.get("name") or api.session.email or ""

    # ===================== BUILD UI =====================

    page.clean()
    page.add(
        ft.Container(
            content=ft.Column([
                ft.Container(
                    content=ft.Column([
                        ft.Container(
                            content=ft.Row([
                                ft.Column([
                                    ft.Text("Admin Panel", size=20, weight="bold", color="black"),
                                    ft.Text(admin_name, size=11, color="grey700"),
                                ], spacing=0),
                                ft.Row([
                                    ft.IconButton(
                                        icon=ft.Icons.ANALYTICS,
                                        icon_color="black",
                                        tooltip="Analytics",
                                        on_click=lambda e: page.go("/analytics")
                                    ),
                                    ft.IconButton(
                                        icon=ft.Icons.LOGOUT,
                                        icon_color="black",
                                        tooltip="Logout",
                                        on_click=logout_user
                                    )
                                ], spacing=5)
                            ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                            padding=ft.padding.only(top=15, left=15, right=15, bottom=8)
                        ),
                        ft.Divider(height=1, color="grey300", thickness=1)
                    ], spacing=0),
                    bgcolor="white",
                    padding=0
                ),

                ft.Container(
                    content=tabs,
                    expand=True,
                    gradient=ft.LinearGradient(
                        begin=ft.alignment.top_center,
                        end=ft.alignment.bottom_center,
                        colors=BACKGROUND_GRADIENT
                    )
                )
            ], expand=True, spacing=0),
            width=page.window.width if is_desktop else 400,
            expand=True,
            padding=0
        )
    )
    page.update()
