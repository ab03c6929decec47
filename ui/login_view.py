import threading

import flet as ft

from core.auth_service import login_admin, logout_admin
from core.errors import AdminError

# ===== BRAND COLORS =====
ORANGE = "#FF6B35"
LIGHT_GRAY = "#D9D9D9"
DARK_GRAY = "#cdbcbc"
WHITE = "#FFFFFF"


def login_view(page: ft.Page, api):
    page.title = "Login - Admin Console"
    MOBILE_WIDTH = 350

    # ===== INPUT FIELDS =====
    email = ft.TextField(
        label="Email Address",
        label_style=ft.TextStyle(color="#000000"),
        hint_text="Enter your Email",
        hint_style=ft.TextStyle(color="#000000"),
        color="#000000",
        width=MOBILE_WIDTH,
        border_radius=12,
        filled=True,
        bgcolor=LIGHT_GRAY,
        border_color="transparent",
        focused_border_color=ORANGE,
        prefix_icon=ft.Icons.EMAIL_OUTLINED,
        text_size=14,
        height=55
    )

    password = ft.TextField(
        label="Password",
        label_style=ft.TextStyle(color="#000000"),
        hint_text="Enter your Password",
        hint_style=ft.TextStyle(color="#000000"),
        color="#000000",
        password=True,
        can_reveal_password=True,
        width=MOBILE_WIDTH,
        border_radius=12,
        filled=True,
        bgcolor=LIGHT_GRAY,
        border_color="transparent",
        focused_border_color=ORANGE,
        prefix_icon=ft.Icons.LOCK_OUTLINE,
        text_size=14,
        height=55
    )

    message = ft.Text(value="", color="red", size=12, text_align=ft.TextAlign.CENTER)
    progress = ft.ProgressRing(width=20, height=20, stroke_width=2, color=ORANGE, visible=False)

    def set_busy(busy):
        login_btn.disabled = busy
        progress.visible = busy
        page.update()

    def complete_login(admin):
        if admin.get("role") not in (None, "admin"):
            logout_admin(api)
            message.value = "Access denied. Admins only."
            message.color = "red"
            page.update()
            return
        page.snack_bar = ft.SnackBar(
            ft.Text(f"Welcome, {admin.get('name') or admin.get('email')}!"),
            bgcolor=ft.Colors.GREEN
        )
        page.snack_bar.open = True
        page.update()
        page.go("/admin")

    def handle_login(e):
        message.value = ""
        set_busy(True)

        # The backend can take a while to wake up; keep the UI responsive
        def login_thread():
            try:
                admin = login_admin(api, email.value, password.value)
            except AdminError as ex:
                message.value = ex.message
                message.color = "red"
                set_busy(False)
                return
            set_busy(False)
            complete_login(admin)

        threading.Thread(target=login_thread, daemon=True).start()

    password.on_submit = handle_login

    # ===== UI COMPONENTS =====
    welcome_text = ft.Text(
        "Welcome back!!!",
        size=22,
        weight="bold",
        color="#000000"
    )
    subtitle_text = ft.Text(
        "Sign in to the Admin Console",
        size=12,
        color=DARK_GRAY
    )
    login_btn = ft.Container(
        content=ft.Text("Sign In", size=18, weight="bold", color=WHITE),
        width=MOBILE_WIDTH,
        height=50,
        bgcolor="#FEB23F",
        border_radius=12,
        alignment=ft.alignment.center,
        on_click=handle_login,
        ink=True,
        animate=ft.Animation(200, "easeOut")
    )

    page.clean()
    page.add(
        ft.Container(
            content=ft.Column([
                ft.Container(height=40),
                ft.Icon(ft.Icons.ADMIN_PANEL_SETTINGS, size=60, color="#FEB23F"),
                ft.Container(height=8),
                welcome_text,
                subtitle_text,
                ft.Container(height=25),
                email,
                ft.Container(height=8),
                password,
                ft.Container(height=20),
                login_btn,
                ft.Container(height=8),
                progress,
                message,
            ],
            horizontal_alignment=ft.CrossAxisAlignment.CENTER,
            scroll=ft.ScrollMode.AUTO,
            spacing=0
            ),
            width=400,
            expand=True,
            padding=ft.padding.symmetric(horizontal=25),
            bgcolor=WHITE,
            alignment=ft.alignment.center
        )
    )
    page.update()
