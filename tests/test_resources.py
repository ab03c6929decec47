from core.resources import CATEGORIES, CONTACT_MESSAGES, MENU_ITEMS, OFFER_STATUS_ACTIONS, OFFER_STATUSES, ORDERS, USERS


def test_paths():
    assert CATEGORIES.collection_path() == "/api/categories"
    assert CATEGORIES.item_path(3) == "/api/categories/3"
    assert MENU_ITEMS.collection_path() == "/api/products"
    assert MENU_ITEMS.item_path(3) == "/api/admin/products/3"
    assert USERS.collection_path() == "/api/auth/register"
    assert USERS.item_path(3, "/role") == "/api/admin/users/3/role"
    assert ORDERS.item_path("abc", "status") == "/api/orders/abc/status"
    assert CONTACT_MESSAGES.id_field == "id"
    assert CONTACT_MESSAGES.detail_path(41) == "/api/contact/messages/41"
    assert MENU_ITEMS.detail_path(3) == "/api/products/3"


def test_sort_key_defaults_missing_values():
    assert CATEGORIES.sort_key({"id": 1}) == 0
    assert CATEGORIES.sort_key({"id": 1, "display_order": 4}) == 4
    assert ORDERS.sort_key({"id": 1}) == ""


def test_offer_status_actions_only_target_known_statuses():
    for status, actions in OFFER_STATUS_ACTIONS.items():
        assert status in OFFER_STATUSES
        assert all(target in OFFER_STATUSES and target != status for _, target in actions)
