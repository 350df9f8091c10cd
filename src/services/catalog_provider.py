from __future__ import annotations

from sqlalchemy.orm import Session

from models import Product
from services.product_matching import CatalogProduct


class SqlProductCatalogProvider:
    """Reads a company's live (not soft-deleted) products from the database."""

    def __init__(self, db: Session):
        self.db = db

    def list_products(self, company_id: str) -> list[CatalogProduct]:
        rows = (
            self.db.query(Product)
            .filter(Product.company_id == company_id, Product.deleted_at.is_(None))
            .order_by(Product.created_at, Product.id)
            .all()
        )
        return [_to_catalog_product(row) for row in rows]


def _to_catalog_product(row: Product) -> CatalogProduct:
    return CatalogProduct(
        id=row.id,
        name=row.name,
        sku_code=row.sku_code,
        ean_code=row.ean_code,
        dun_code=row.dun_code,
    )
