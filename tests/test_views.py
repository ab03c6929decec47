import copy

import pytest

from core.views import ALL, ViewFilters, derive_view, page_window, paginate

ITEMS = [
    {"id": i, "name": f"Dish {i}", "type": "veg" if i % 2 else "non-veg", "tags": ["spicy"] if i % 3 == 0 else []}
    for i in range(1, 26)
]


def test_default_view_is_first_page_of_ten():
    view = derive_view(ITEMS)

    assert [item["id"] for item in view.items] == list(range(1, 11))
    assert view.page == 1
    assert view.total_pages == 3
    assert view.total_items == 25
    assert not view.has_previous
    assert view.has_next


def test_last_page_is_partial():
    view = derive_view(ITEMS, page=3)

    assert [item["id"] for item in view.items] == list(range(21, 26))
    assert not view.has_next


@pytest.mark.parametrize("requested, expected", [(0, 1), (-4, 1), (99, 3), (None, 1)])
def test_page_is_clamped(requested, expected):
    assert derive_view(ITEMS, page=requested).page == expected


def test_search_is_case_insensitive_substring():
    view = derive_view(ITEMS, ViewFilters(search="DISH 2", search_fields=("name",)))

    assert [item["id"] for item in view.items] == [2, 20, 21, 22, 23, 24, 25]


def test_search_matches_list_fields():
    view = derive_view(ITEMS, ViewFilters(search="spic", search_fields=("tags",)), per_page=100)

    assert [item["id"] for item in view.items] == [3, 6, 9, 12, 15, 18, 21, 24]


def test_field_filters_combine_with_search():
    filters = ViewFilters(
        search="dish 1",
        search_fields=("name",),
        field_filters={"type": "veg", "id": lambda item: item["id"] > 10},
    )

    view = derive_view(ITEMS, filters)

    assert [item["id"] for item in view.items] == [11, 13, 15, 17, 19]


def test_all_and_none_disable_a_filter():
    view = derive_view(ITEMS, ViewFilters(field_filters={"type": ALL, "name": None}), per_page=100)

    assert view.total_items == 25


def test_empty_result_still_has_one_page():
    view = derive_view(ITEMS, ViewFilters(search="pizza", search_fields=("name",)), page=4)

    assert view.items == []
    assert view.page == 1
    assert view.total_pages == 1
    assert view.page_numbers == [1]


def test_input_is_not_mutated():
    items = copy.deepcopy(ITEMS)

    derive_view(items, ViewFilters(search="dish", search_fields=("name",)), page=2)

    assert items == ITEMS


@pytest.mark.parametrize("page, total, expected", [
    (1, 3, [1, 2, 3]),
    (1, 10, [1, 2, 3, 4, 5]),
    (3, 10, [1, 2, 3, 4, 5]),
    (6, 10, [4, 5, 6, 7, 8]),
    (9, 10, [6, 7, 8, 9, 10]),
    (10, 10, [6, 7, 8, 9, 10]),
])
def test_page_window(page, total, expected):
    assert page_window(page, total) == expected


def test_per_page_must_be_positive():
    with pytest.raises(ValueError):
        paginate(ITEMS, 1, per_page=0)
