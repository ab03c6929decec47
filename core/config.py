# core/config.py
import os
from dotenv import load_dotenv

load_dotenv()

API_BASE_URL = os.getenv("API_BASE_URL", "https://backend-hotel-management.onrender.com").rstrip("/")
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///admin_console.db")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "30"))

# Image uploads
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))
IMAGE_MAX_WIDTH = int(os.getenv("IMAGE_MAX_WIDTH", "800"))
IMAGE_QUALITY = float(os.getenv("IMAGE_QUALITY", "0.7"))

ITEMS_PER_PAGE = int(os.getenv("ITEMS_PER_PAGE", "10"))
SESSION_TIMEOUT = int(os.getenv("SESSION_TIMEOUT", "1800"))
