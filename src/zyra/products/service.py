"""Product catalogue service, including the bulk optimize pass."""

from typing import Any

from zyra.common.exceptions import NotFoundError
from zyra.common.logging import get_logger
from zyra.products.catalog import defaults_for
from zyra.store.base import RecordStore
from zyra.store.records import Product

logger = get_logger("products")

_REQUIRED_FIELDS = ("name", "price", "category", "stock")


def capitalize_words(name: str) -> str:
    """Upper-case the first letter of each word; leave the rest alone."""
    return " ".join(w[:1].upper() + w[1:] for w in name.split())


def dedupe_key(product: Product) -> tuple[str, str]:
    return " ".join(product.name.split()).lower(), product.category.strip().lower()


class ProductService:
    """Per-user product CRUD."""

    def __init__(self, store: RecordStore):
        self.store = store

    async def list_products(self, user_id: str) -> list[Product]:
        return await self.store.list_products(user_id)

    async def get_product(self, user_id: str, product_id: str) -> Product:
        product = await self.store.get_product(user_id, product_id)
        if product is None:
            raise NotFoundError("Product not found")
        return product

    async def create_product(self, user_id: str, **fields: Any) -> Product:
        product = Product(user_id=user_id, **fields)
        return await self.store.create_product(product)

    async def update_product(self, user_id: str, product_id: str, **changes: Any) -> Product:
        changes = {
            k: v for k, v in changes.items()
            if not (k in _REQUIRED_FIELDS and v is None)
        }
        product = await self.store.update_product(user_id, product_id, **changes)
        if product is None:
            raise NotFoundError("Product not found")
        return product

    async def delete_product(self, user_id: str, product_id: str) -> None:
        if not await self.store.delete_product(user_id, product_id):
            raise NotFoundError("Product not found")

    async def optimize_all(self, user_id: str) -> dict:
        """Normalize every product and drop case-insensitive duplicates.

        The oldest product of each (name, category) group survives. All
        survivor updates are written before any duplicate is deleted, so a
        failed update leaves every product in place.
        """
        products = sorted(
            await self.store.list_products(user_id), key=lambda p: p.created_at,
        )

        survivors: dict[tuple[str, str], Product] = {}
        duplicates: list[tuple[Product, Product]] = []
        for product in products:
            key = dedupe_key(product)
            if key in survivors:
                duplicates.append((product, survivors[key]))
            else:
                survivors[key] = product

        details = []
        for product in survivors.values():
            defaults = defaults_for(product.category)
            name = capitalize_words(product.name)
            changes: dict[str, Any] = {"name": name, "is_optimized": True}
            if not (product.description or "").strip():
                changes["description"] = defaults.description.format(name=name)
            if not (product.tags or "").strip():
                changes["tags"] = defaults.tags
            await self.store.update_product(user_id, product.id, **changes)
            details.append({"product_id": product.id, "name": name, "action": "optimized"})

        for duplicate, kept in duplicates:
            await self.store.delete_product(user_id, duplicate.id)
            details.append({
                "product_id": duplicate.id,
                "name": duplicate.name,
                "action": "removed_duplicate",
                "duplicate_of": kept.id,
            })

        logger.info(
            "Optimized %d products, removed %d duplicates",
            len(survivors), len(duplicates),
            extra={"user_id": user_id, "operation": "optimize_all"},
        )
        return {
            "optimized_count": len(survivors),
            "duplicates_removed": len(duplicates),
            "details": details,
        }
