"""
Integration tests for pagination, search and CRUD against LocalStack.

DynamoDB scan order is hash order, so the native-path tests only assert that
every item is seen exactly once, never a specific order.
"""

import pytest

from dynapage import CursorCodec
from tests.helpers.entities import Product, make_products


def walk(repo, limit, **kwargs):
    pages = [repo.get_all_paginated(limit=limit, **kwargs)]
    while pages[-1].next_cursor is not None:
        pages.append(repo.get_all_paginated(limit=limit, cursor=pages[-1].next_cursor, **kwargs))
        assert len(pages) < 50, "pagination did not terminate"
    return pages


@pytest.fixture
def stocked_repository(integration_repository):
    integration_repository.save_all(make_products(25))
    return integration_repository


@pytest.mark.integration
class TestCrudIntegration:
    def test_save_and_get(self, integration_repository):
        saved = integration_repository.save(Product(id="p1", name="Lamp", price=19.99))

        fetched = integration_repository.get_by_id("p1")

        assert fetched == saved
        assert fetched.created_at is not None

    def test_update_keeps_created_at(self, integration_repository):
        first = integration_repository.save(Product(id="p1", name="Lamp"))
        second = integration_repository.update(first.model_copy(update={"name": "Desk lamp"}))

        fetched = integration_repository.get_by_id("p1")
        assert fetched.name == "Desk lamp"
        assert fetched.created_at == first.created_at
        assert fetched.updated_at == second.updated_at

    def test_delete(self, integration_repository):
        integration_repository.save_all([Product(id="p1"), Product(id="p2")])

        integration_repository.delete_all(["p1"])

        assert integration_repository.exists_by_id("p1") is False
        assert [p.id for p in integration_repository.get_all_by_id(["p1", "p2"])] == ["p2"]


@pytest.mark.integration
class TestNativePaginationIntegration:
    def test_every_item_once(self, stocked_repository):
        pages = walk(stocked_repository, 7)
        seen = [item.id for page in pages for item in page.items]

        assert sorted(seen, key=int) == [str(n) for n in range(1, 26)]
        assert all(page.item_count <= 7 for page in pages)

    def test_cursor_is_native(self, stocked_repository):
        page = stocked_repository.get_all_paginated(limit=5)

        assert page.next_cursor is not None
        assert CursorCodec().is_native(page.next_cursor)


@pytest.mark.integration
class TestSortedPaginationIntegration:
    def test_created_at_ascending(self, stocked_repository):
        pages = walk(stocked_repository, 10, sort_by="createdAt")

        assert [[item.id for item in page.items] for page in pages] == [
            [str(n) for n in range(1, 11)],
            [str(n) for n in range(11, 21)],
            [str(n) for n in range(21, 26)],
        ]

    def test_price_descending(self, stocked_repository):
        pages = walk(stocked_repository, 10, sort_by="price", sort_order="desc")
        seen = [item.price for page in pages for item in page.items]

        assert seen == sorted(seen, reverse=True)
        assert len(seen) == 25


@pytest.mark.integration
class TestSearchIntegration:
    def test_property_lookup(self, integration_repository):
        integration_repository.save_all(
            [Product(id="1"), Product(id="2", status="PENDING"), Product(id="3", status="PENDING")]
        )

        pending = integration_repository.get_all_by_property("status", "PENDING")

        assert sorted(product.id for product in pending) == ["2", "3"]

    def test_filtered_pages(self, stocked_repository):
        expensive = lambda product: product.price > 20  # noqa: E731

        first = stocked_repository.scan_with_filter_paginated(3, None, expensive)
        second = stocked_repository.scan_with_filter_paginated(3, first.next_cursor, expensive)

        assert first.total_items == 5
        assert first.item_count == 3
        assert second.item_count == 2
        assert second.next_cursor is None
        seen = {item.id for item in first.items + second.items}
        assert seen == {"21", "22", "23", "24", "25"}
