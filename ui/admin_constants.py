"""
Shared constants for admin panel components
"""

# ===== RESPONSIVE LAYOUT CONSTANTS =====
BREAKPOINT = 800  # Mobile vs Desktop threshold (px)

# Grid settings for desktop
DESKTOP_COLUMNS = 3  # 3 columns for all grids

# Grid spacing
GRID_SPACING = 10
GRID_RUN_SPACING = 10

# ===== BRAND COLORS =====
ACCENT = "#FEB23F"
ACCENT_RED = "#E9190A"
BACKGROUND_GRADIENT = ["#FFF6F6", "#F7C171", "#D49535"]

# Image preview box inside dialogs
PREVIEW_WIDTH = 300
PREVIEW_HEIGHT = 120

ALLOWED_IMAGE_EXTENSIONS = ["png", "jpg", "jpeg", "webp"]

# Status badge colors
ORDER_STATUS_COLORS = {
    "pending": "orange",
    "confirmed": "blue",
    "preparing": "purple",
    "ready": "teal",
    "delivered": "green",
    "cancelled": "red",
}
OFFER_STATUS_COLORS = {
    "Active": "green",
    "Upcoming": "blue",
    "Expired": "grey",
    "Suspended": "red",
}
MESSAGE_STATUS_COLORS = {
    "unread": "orange",
    "read": "blue",
    "replied": "green",
}
