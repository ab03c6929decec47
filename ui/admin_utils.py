"""
Shared utility functions for admin panel
"""
import flet as ft

from core.config import API_BASE_URL
from core.errors import AdminError, AuthRequired
from core.image_pipeline import load_upload
from core.views import ViewSlice
from ui.admin_constants import (
    ACCENT, ALLOWED_IMAGE_EXTENSIONS, DESKTOP_COLUMNS,
    GRID_RUN_SPACING, GRID_SPACING, PREVIEW_HEIGHT, PREVIEW_WIDTH
)


def close_dialog(page, dialog):
    """Close a dialog and update the page"""
    dialog.open = False
    page.update()


def open_dialog(page, dialog):
    page.overlay.append(dialog)
    dialog.open = True
    page.update()


def show_snack(page, text, color=ft.Colors.GREEN):
    page.snack_bar = ft.SnackBar(ft.Text(text), bgcolor=color, open=True)
    page.overlay.append(page.snack_bar)
    page.update()


def show_error(page, ex, message: ft.Text = None):
    """
    Surface an error: inline in the dialog when a message control is given,
    otherwise as a SnackBar. Expired sessions go back to the login screen.
    """
    if isinstance(ex, AuthRequired):
        show_snack(page, f"❌ {ex.message}", ft.Colors.RED)
        page.go("/login")
        return
    text = ex.message if isinstance(ex, AdminError) else str(ex)
    if message is not None:
        message.value = f"❌ {text}"
        message.color = "red"
        page.update()
    else:
        show_snack(page, f"❌ {text}", ft.Colors.RED)


def submit(page, button, action, on_success, message: ft.Text = None):
    """
    Run a request with its button disabled, so it can't be sent twice.
    On failure the dialog stays open with whatever the admin typed.
    """
    button.disabled = True
    page.update()
    try:
        result = action()
    except AdminError as ex:
        show_error(page, ex, message)
        return
    finally:
        button.disabled = False
        page.update()
    on_success(result)


# ===================== IMAGES =====================

def image_kwargs(image):
    """ft.Image source for a data URI, absolute URL or backend-relative path."""
    if not image or image in ("null", "undefined"):
        return None
    if image.startswith("data:image"):
        return {"src_base64": image.split(",", 1)[1]}
    if image.startswith("http"):
        return {"src": image}
    if image.startswith("/"):
        return {"src": f"{API_BASE_URL}{image}"}
    # Bare base64 payloads from older records
    if len(image) > 1000 and " " not in image:
        return {"src_base64": image}
    return None


def image_box(image, width=80, height=80, icon=ft.Icons.RESTAURANT):
    source = image_kwargs(image)
    if source:
        return ft.Image(width=width, height=height, fit=ft.ImageFit.COVER, border_radius=8, **source)
    return ft.Container(
        width=width,
        height=height,
        bgcolor="grey300",
        border_radius=8,
        alignment=ft.alignment.center,
        content=ft.Icon(icon, size=30, color="grey600"),
    )


def build_image_picker(page, state: dict, message: ft.Text, current_image=None, label="Upload Image"):
    """
    Image preview + upload button for a form dialog.

    The picked file is size-checked and compressed immediately; the resulting
    MediaAsset is kept in ``state["media"]`` until the form is saved.
    """
    preview = ft.Container(
        content=image_box(current_image, PREVIEW_WIDTH, PREVIEW_HEIGHT) if current_image
        else ft.Text("No image selected", size=12, color="grey"),
        width=PREVIEW_WIDTH,
        height=PREVIEW_HEIGHT,
        bgcolor="grey200",
        border_radius=8,
        alignment=ft.alignment.center,
        border=ft.border.all(1, "grey300"),
    )
    if state.get("media") is not None:
        preview.content = image_box(state["media"].preview_data_uri, PREVIEW_WIDTH, PREVIEW_HEIGHT)

    size_note = ft.Text("", size=11, color="grey700")

    def on_file_pick(e: ft.FilePickerResultEvent):
        if not e.files:
            return
        try:
            asset = load_upload(e.files[0].path)
        except AdminError as ex:
            show_error(page, ex, message)
            return
        state["media"] = asset
        preview.content = image_box(asset.preview_data_uri, PREVIEW_WIDTH, PREVIEW_HEIGHT)
        if asset.compressed:
            size_note.value = f"Compressed to {asset.size // 1024} KB ({asset.width}x{asset.height})"
        else:
            size_note.value = "Could not compress, the original file will be uploaded"
        message.value = ""
        page.update()

    file_picker = ft.FilePicker(on_result=on_file_pick)
    page.overlay.append(file_picker)
    page.update()

    button = ft.ElevatedButton(
        label,
        icon=ft.Icons.UPLOAD_FILE,
        on_click=lambda e: file_picker.pick_files(
            allowed_extensions=ALLOWED_IMAGE_EXTENSIONS,
            allow_multiple=False,
        ),
        width=PREVIEW_WIDTH,
        bgcolor=ACCENT,
        color="white",
    )
    return ft.Column([preview, size_note, button], spacing=5, horizontal_alignment=ft.CrossAxisAlignment.CENTER)


# ===================== SMALL WIDGETS =====================

def status_badge(text, color):
    return ft.Container(
        content=ft.Text(text, color="white", size=12),
        bgcolor=color,
        padding=5,
        border_radius=5,
    )


def confirm_delete(page, name, on_confirm):
    """Ask before deleting; ``on_confirm(dialog, button)`` runs the request."""
    delete_button = ft.ElevatedButton("Delete", style=ft.ButtonStyle(bgcolor="red", color="white"))
    dialog = ft.AlertDialog(
        title=ft.Text("Confirm Delete"),
        content=ft.Text(f"Are you sure you want to delete '{name}'? This action cannot be undone."),
        actions=[
            ft.TextButton("Cancel", on_click=lambda e: close_dialog(page, dialog)),
            delete_button,
        ],
    )
    delete_button.on_click = lambda e: on_confirm(dialog, delete_button)
    open_dialog(page, dialog)


def build_pagination(view: ViewSlice, on_page):
    """Prev / page links / Next row; empty when everything fits on one page."""
    if view.total_pages <= 1:
        return ft.Container()
    controls = [
        ft.IconButton(
            icon=ft.Icons.CHEVRON_LEFT,
            disabled=not view.has_previous,
            on_click=lambda e: on_page(view.page - 1),
        )
    ]
    for number in view.page_numbers:
        controls.append(
            ft.TextButton(
                str(number),
                on_click=lambda e, n=number: on_page(n),
                style=ft.ButtonStyle(color=ACCENT if number == view.page else "black"),
            )
        )
    controls.append(
        ft.IconButton(
            icon=ft.Icons.CHEVRON_RIGHT,
            disabled=not view.has_next,
            on_click=lambda e: on_page(view.page + 1),
        )
    )
    controls.append(ft.Text(f"Page {view.page} of {view.total_pages} ({view.total_items} items)", size=12))
    return ft.Row(controls, alignment=ft.MainAxisAlignment.CENTER, wrap=True)


def build_grid(is_desktop: bool, aspect_ratio: float = 4.0):
    """Desktop: 3-column GridView. Mobile: single-column list."""
    if is_desktop:
        return ft.GridView(
            runs_count=DESKTOP_COLUMNS,
            max_extent=500,
            child_aspect_ratio=aspect_ratio,
            spacing=GRID_SPACING,
            run_spacing=GRID_RUN_SPACING,
            expand=True,
        )
    return ft.Column(spacing=10, scroll=ft.ScrollMode.AUTO, expand=True)


def form_dialog(page, title, controls, save_label, on_save, message: ft.Text, height=520):
    """
    Standard add/edit dialog. ``on_save(dialog, save_button)`` sends the
    request; errors land in ``message`` and the dialog stays open.
    """
    save_button = ft.ElevatedButton(save_label, bgcolor=ACCENT, color="white")
    shown_title = f"{title[:30]}..." if len(title) > 30 else title
    dialog = ft.AlertDialog(
        title=ft.Container(
            content=ft.Text(shown_title, size=16, weight="bold", overflow=ft.TextOverflow.ELLIPSIS, max_lines=1),
            alignment=ft.alignment.center_left,
            width=320,
            padding=ft.padding.only(left=10),
        ),
        content=ft.Container(
            content=ft.Column(
                controls + [message],
                tight=True,
                scroll=ft.ScrollMode.AUTO,
                horizontal_alignment=ft.CrossAxisAlignment.CENTER,
            ),
            width=320,
            height=height,
            alignment=ft.alignment.top_center,
        ),
        actions=[
            ft.TextButton("Cancel", on_click=lambda e: close_dialog(page, dialog)),
            save_button,
        ],
    )
    save_button.on_click = lambda e: on_save(dialog, save_button)
    open_dialog(page, dialog)
    return dialog


def tab_header(title, on_add=None, add_label="Add New", extra=None):
    """Title row with an optional add button and extra controls (search, filters)."""
    row = [ft.Text(title, size=20, weight="bold", color="black")]
    if on_add is not None:
        row.append(ft.ElevatedButton(add_label, icon=ft.Icons.ADD, on_click=on_add, bgcolor=ACCENT, color="white"))
    column = [ft.Row(row, alignment=ft.MainAxisAlignment.SPACE_BETWEEN)]
    if extra:
        column.append(ft.Row(extra, wrap=True, spacing=10))
    return ft.Container(content=ft.Column(column, spacing=8), padding=10)


def search_field(on_change, hint="Search..."):
    return ft.TextField(
        hint_text=hint,
        prefix_icon=ft.Icons.SEARCH,
        on_change=on_change,
        width=260,
        height=45,
        bgcolor="white",
        border_radius=8,
    )


def filter_dropdown(label, options, on_change, value="All"):
    return ft.Dropdown(
        label=label,
        value=value,
        width=160,
        options=[ft.dropdown.Option(o) for o in options],
        on_change=on_change,
        bgcolor="white",
    )
