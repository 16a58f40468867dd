"""Storage access for product listings.

Pure row storage: no ownership rules live here. Concurrent replaces of the
same row are last-write-wins.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from ..clients import SqliteClient
from ..models import Product

logger = logging.getLogger(__name__)

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS products (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    description TEXT NOT NULL,
    price REAL NOT NULL,
    image TEXT NOT NULL,
    user_id INTEGER NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

CREATE_INDEX_SQL = """
CREATE INDEX IF NOT EXISTS idx_products_user_id ON products(user_id)
"""

_SELECT_COLUMNS = "id, title, description, price, image, user_id, created_at, updated_at"


def _row_to_product(row) -> Product:
    return Product(
        id=row[0],
        title=row[1],
        description=row[2],
        price=row[3],
        image=row[4],
        owner_id=row[5],
        created_at=datetime.fromisoformat(row[6]),
        updated_at=datetime.fromisoformat(row[7]),
    )


class ProductRepository:
    """CRUD access to the products table."""

    def __init__(self, sqlite_client: SqliteClient):
        self._sqlite_client = sqlite_client
        self._ensure_table_exists()

    def _ensure_table_exists(self) -> None:
        """Create the products table if it doesn't exist."""
        self._sqlite_client.execute_query(CREATE_TABLE_SQL)
        self._sqlite_client.execute_query(CREATE_INDEX_SQL)
        logger.debug("Products table initialized")

    def find_by_id(self, product_id: int) -> Optional[Product]:
        """Get a product by its ID.

        Returns:
            Product if found, None otherwise.
        """
        result = self._sqlite_client.execute_query(
            f"SELECT {_SELECT_COLUMNS} FROM products WHERE id = ?",
            (product_id,),
        )
        if not result:
            return None
        return _row_to_product(result[0])

    def list_by_owner(self, owner_id: int) -> list[Product]:
        """List every product owned by a user, oldest first."""
        rows = self._sqlite_client.execute_query(
            f"SELECT {_SELECT_COLUMNS} FROM products WHERE user_id = ? ORDER BY id",
            (owner_id,),
        )
        return [_row_to_product(row) for row in rows]

    def insert(
        self,
        owner_id: int,
        title: str,
        description: str,
        price: float,
        image: str,
    ) -> Product:
        """Insert a new product and return it with its assigned ID."""
        now = datetime.now(timezone.utc)

        product_id, _ = self._sqlite_client.execute_write(
            """INSERT INTO products
               (title, description, price, image, user_id, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (title, description, price, image, owner_id, now.isoformat(), now.isoformat()),
        )

        logger.info(f"Inserted product {product_id} for user {owner_id}")

        return Product(
            id=product_id,
            title=title,
            description=description,
            price=price,
            image=image,
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
        )

    def replace(
        self,
        product_id: int,
        title: str,
        description: str,
        price: float,
        image: str,
    ) -> Optional[Product]:
        """Replace a product's editable fields.

        The owner and creation timestamp are never touched.

        Returns:
            The updated Product, or None if no product has this ID.
        """
        now = datetime.now(timezone.utc)

        _, rowcount = self._sqlite_client.execute_write(
            """UPDATE products
               SET title = ?, description = ?, price = ?, image = ?, updated_at = ?
               WHERE id = ?""",
            (title, description, price, image, now.isoformat(), product_id),
        )
        if rowcount == 0:
            return None

        logger.info(f"Replaced product {product_id}")
        return self.find_by_id(product_id)

    def remove(self, product_id: int) -> bool:
        """Delete a product row.

        Returns:
            True if the product was deleted, False if not found.
        """
        _, rowcount = self._sqlite_client.execute_write(
            "DELETE FROM products WHERE id = ?",
            (product_id,),
        )
        if rowcount == 0:
            return False

        logger.info(f"Removed product {product_id}")
        return True
