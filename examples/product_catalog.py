"""
Product Catalog Example

Pages through a product table three ways: in native scan order, sorted by a
custom field, and filtered by a predicate.
"""

from dynapage import DynamoEntity, DynamoRepository, FieldSortStrategy, PageQuery


class Product(DynamoEntity):
    name: str
    price: float
    category: str = "misc"


class ProductRepository(DynamoRepository[Product]):
    class Meta:
        table_name = "Products"
        entity = Product

    sort_strategy = FieldSortStrategy(
        extra_fields={
            "price": lambda product: product.price,
            "name": lambda product: product.name.lower(),
        }
    )


repo = ProductRepository()

repo.save_all(
    [
        Product(id="p-1", name="Desk lamp", price=39.0, category="lighting"),
        Product(id="p-2", name="Office chair", price=189.0, category="furniture"),
        Product(id="p-3", name="Notebook", price=4.5),
        Product(id="p-4", name="Standing desk", price=420.0, category="furniture"),
        Product(id="p-5", name="Cable tray", price=24.0),
    ]
)

# Native scan order: cheap, reads only one page per call
page = repo.get_all_paginated(limit=2)
print(f"First page: {[p.name for p in page.items]} (about {page.total_items} items)")
while page.has_next_page:
    page = repo.get_all_paginated(limit=2, cursor=page.next_cursor)
    print(f"Next page: {[p.name for p in page.items]}")

# Sorted by price, most expensive first (reads the whole table on every call)
query = PageQuery(limit=2, sort_by="price", sort_order="desc")
page = repo.paginate(query)
print(f"\nMost expensive: {[(p.name, p.price) for p in page.items]}")
page = repo.paginate(query.model_copy(update={"cursor": page.next_cursor}))
print(f"Then: {[(p.name, p.price) for p in page.items]}")

# Property lookup and predicate filter
furniture = repo.get_all_by_property("category", "furniture")
print(f"\nFurniture: {[p.name for p in furniture]}")

cheap = repo.scan_with_filter_paginated(10, None, lambda p: p.price < 50)
print(f"Under 50: {cheap.total_items} products")

# Cleanup
repo.delete_all(["p-1", "p-2", "p-3", "p-4", "p-5"])
