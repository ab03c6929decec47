"""
Per-resource configuration for the management screens.

Each backend collection differs in its endpoints, id field, sort rule and
how it accepts images (multipart part or base64 data URI in a JSON body).
"""
from dataclasses import dataclass
from typing import Optional, Tuple

MULTIPART = "multipart"
BASE64 = "base64"


@dataclass(frozen=True)
class ResourceSpec:
    name: str
    endpoint: str
    id_field: str = "id"
    sort_field: str = "created_at"
    descending: bool = True
    sort_default: object = ""
    image_mode: Optional[str] = None
    image_field: str = "image"
    search_fields: Tuple[str, ...] = ()
    required_fields: Tuple[str, ...] = ()
    write_endpoint: Optional[str] = None
    create_endpoint: Optional[str] = None
    status_field: str = "status"
    label: str = ""

    def item_path(self, resource_id, suffix: str = None) -> str:
        path = f"{self.write_endpoint or self.endpoint}/{resource_id}"
        return f"{path}/{suffix.strip('/')}" if suffix else path

    def detail_path(self, resource_id) -> str:
        return f"{self.endpoint}/{resource_id}"

    def collection_path(self) -> str:
        return self.create_endpoint or self.write_endpoint or self.endpoint

    def sort_key(self, item: dict):
        value = item.get(self.sort_field)
        return self.sort_default if value is None else value


CATEGORIES = ResourceSpec(
    name="categories",
    label="Category",
    endpoint="/api/categories",
    sort_field="display_order",
    sort_default=0,
    image_mode=MULTIPART,
    search_fields=("name", "description"),
    required_fields=("name", "description"),
)

MENU_ITEMS = ResourceSpec(
    name="products",
    label="Menu item",
    endpoint="/api/products",
    write_endpoint="/api/admin/products",
    create_endpoint="/api/products",
    image_mode=MULTIPART,
    search_fields=("name", "category_name", "description", "tags"),
    required_fields=("name", "price", "category_id"),
)

USERS = ResourceSpec(
    name="users",
    label="User",
    endpoint="/api/admin/users",
    create_endpoint="/api/auth/register",
    search_fields=("name", "email", "phone"),
    required_fields=("name", "email"),
)

OFFERS = ResourceSpec(
    name="offers",
    label="Offer",
    endpoint="/api/offers",
    image_mode=BASE64,
    image_field="banner_image",
    search_fields=("title", "code", "description"),
    required_fields=("title", "code"),
)

CONTACT_MESSAGES = ResourceSpec(
    name="contact_messages",
    label="Message",
    endpoint="/api/contact/messages",
    # The list only carries the first 100 characters; the body comes from the detail endpoint
    search_fields=("name", "email", "subject", "message_preview", "message"),
)

ORDERS = ResourceSpec(
    name="orders",
    label="Order",
    endpoint="/api/orders",
    status_field="order_status",
    search_fields=("order_number", "user_name", "user_email"),
)

ALL_RESOURCES = (CATEGORIES, MENU_ITEMS, USERS, OFFERS, CONTACT_MESSAGES, ORDERS)

# Dropdown values used by the screens
FOOD_TYPES = ["veg", "non-veg"]
USER_ROLES = ["user", "admin", "staff"]
OFFER_STATUSES = ["Active", "Upcoming", "Expired", "Suspended"]
DISCOUNT_TYPES = ["percentage", "fixed", "cashback", "free_item", "bogo"]
MESSAGE_STATUSES = ["unread", "read", "replied"]

# Offer status -> [(button label, next status)]
OFFER_STATUS_ACTIONS = {
    "Active": [("Suspend", "Suspended"), ("Expire", "Expired")],
    "Upcoming": [("Activate", "Active"), ("Cancel", "Suspended")],
    "Suspended": [("Activate", "Active"), ("Expire", "Expired")],
    "Expired": [("Reactivate", "Active")],
}
