"""
Storage SQLite para produtos monitorados e histórico de preços.
Cada operação abre sua própria conexão.
"""

import math
from datetime import datetime
from pathlib import Path
from typing import Any, Optional
from uuid import UUID

import aiosqlite

from pricewatch.core.exceptions import DatabaseError, DuplicateProductError
from pricewatch.core.models import PriceHistoryEntry, Product, ProductRef
from pricewatch.core.types import PriceStatus
from pricewatch.storage.base import BaseStorage, StorageType


# Campos de produto que record_check pode atualizar
_UPDATABLE_FIELDS = (
    "current_price",
    "highest_price",
    "lowest_price",
    "average_price",
    "last_checked_at",
)


def _to_db(value: Any) -> Any:
    """Converte valores Python para colunas SQLite."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, float) and math.isinf(value):
        # Menor preço ainda não definido
        return None
    if isinstance(value, UUID):
        return str(value)
    return value


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class SQLiteStorage(BaseStorage):
    """
    Storage usando SQLite.
    Tabelas: products e price_history (somente-inserção).
    """

    def __init__(self, base_path: Path, db_name: str = "pricewatch.db"):
        """
        Inicializa o storage SQLite.

        Args:
            base_path: Diretório base
            db_name: Nome do arquivo do banco
        """
        super().__init__(base_path)
        self.db_path = self.base_path / db_name
        self._initialized = False

    @property
    def storage_type(self) -> StorageType:
        return StorageType.SQLITE

    async def _ensure_initialized(self) -> None:
        """Garante que as tabelas existem."""
        if self._initialized:
            return

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("""
                CREATE TABLE IF NOT EXISTS products (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    url TEXT NOT NULL UNIQUE,
                    current_price REAL NOT NULL DEFAULT 0,
                    highest_price REAL NOT NULL DEFAULT 0,
                    lowest_price REAL,
                    average_price REAL NOT NULL DEFAULT 0,
                    currency TEXT NOT NULL DEFAULT 'INR',
                    source TEXT NOT NULL,
                    total_checks INTEGER NOT NULL DEFAULT 0,
                    last_checked_at TIMESTAMP,
                    is_active INTEGER NOT NULL DEFAULT 1,
                    created_at TIMESTAMP NOT NULL,
                    updated_at TIMESTAMP NOT NULL
                )
            """)

            await db.execute("""
                CREATE TABLE IF NOT EXISTS price_history (
                    id TEXT PRIMARY KEY,
                    product_id TEXT NOT NULL REFERENCES products(id),
                    price REAL NOT NULL,
                    previous_price REAL,
                    currency TEXT NOT NULL,
                    status TEXT NOT NULL,
                    price_difference REAL NOT NULL DEFAULT 0,
                    percentage_change REAL NOT NULL DEFAULT 0,
                    source TEXT,
                    checked_at TIMESTAMP NOT NULL
                )
            """)

            # Índices para queries frequentes
            await db.execute("""
                CREATE INDEX IF NOT EXISTS idx_history_product_checked
                ON price_history(product_id, checked_at DESC)
            """)
            await db.execute("""
                CREATE INDEX IF NOT EXISTS idx_products_active
                ON products(is_active)
            """)

            await db.commit()

        self._initialized = True
        self.logger.debug("SQLite inicializado", db_path=str(self.db_path))

    # =========================================================================
    # PRODUTOS
    # =========================================================================

    async def list_active_products(self) -> list[ProductRef]:
        await self._ensure_initialized()

        refs = []
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute("""
                SELECT id, name, url, source, current_price
                FROM products
                WHERE is_active = 1
                ORDER BY created_at, rowid
            """) as cursor:
                async for row in cursor:
                    refs.append(ProductRef(
                        id=UUID(row["id"]),
                        name=row["name"],
                        url=row["url"],
                        source=row["source"],
                        current_price=row["current_price"],
                    ))

        return refs

    async def get_product(self, product_id: UUID) -> Optional[Product]:
        await self._ensure_initialized()

        async with aiosqlite.connect(self.db_path) as db:
            return await self._fetch_product(db, "id = ?", str(product_id))

    async def get_product_by_url(self, url: str) -> Optional[Product]:
        await self._ensure_initialized()

        async with aiosqlite.connect(self.db_path) as db:
            return await self._fetch_product(db, "url = ?", url)

    async def create_product(self, product: Product) -> Product:
        await self._ensure_initialized()

        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute("""
                    INSERT INTO products
                    (id, name, url, current_price, highest_price, lowest_price,
                     average_price, currency, source, total_checks,
                     last_checked_at, is_active, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    str(product.id),
                    product.name,
                    product.url,
                    product.current_price,
                    product.highest_price,
                    _to_db(product.lowest_price),
                    product.average_price,
                    product.currency,
                    product.source,
                    product.total_checks,
                    _to_db(product.last_checked_at),
                    int(product.is_active),
                    product.created_at.isoformat(),
                    product.updated_at.isoformat(),
                ))
                await db.commit()
        except aiosqlite.IntegrityError as e:
            raise DuplicateProductError(product.url, cause=e) from e

        self.logger.info(
            "Produto cadastrado",
            product_id=str(product.id),
            source=product.source,
        )
        return product

    async def list_products(
        self,
        page: int = 1,
        limit: int = 20,
        is_active: Optional[bool] = None,
    ) -> list[Product]:
        await self._ensure_initialized()

        query = "SELECT * FROM products"
        params: list[Any] = []

        if is_active is not None:
            query += " WHERE is_active = ?"
            params.append(int(is_active))

        query += " ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?"
        params.extend([limit, (max(page, 1) - 1) * limit])

        products = []
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(query, params) as cursor:
                async for row in cursor:
                    products.append(self._row_to_product(dict(row)))

        return products

    async def count_products(self, is_active: Optional[bool] = None) -> int:
        await self._ensure_initialized()

        query = "SELECT COUNT(*) FROM products"
        params: list[Any] = []
        if is_active is not None:
            query += " WHERE is_active = ?"
            params.append(int(is_active))

        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute(query, params) as cursor:
                row = await cursor.fetchone()
                return row[0]

    async def set_active(self, product_id: UUID, is_active: bool) -> Optional[Product]:
        await self._ensure_initialized()

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "UPDATE products SET is_active = ?, updated_at = ? WHERE id = ?",
                (int(is_active), datetime.now().isoformat(), str(product_id)),
            )
            await db.commit()
            return await self._fetch_product(db, "id = ?", str(product_id))

    # =========================================================================
    # HISTÓRICO
    # =========================================================================

    async def record_check(
        self,
        entry: PriceHistoryEntry,
        updates: dict[str, Any],
    ) -> Product:
        await self._ensure_initialized()

        unknown = set(updates) - set(_UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Campos não atualizáveis: {sorted(unknown)}")

        assignments = ", ".join(f"{name} = ?" for name in updates)
        params = [_to_db(value) for value in updates.values()]

        async with aiosqlite.connect(self.db_path) as db:
            try:
                await db.execute("""
                    INSERT INTO price_history
                    (id, product_id, price, previous_price, currency, status,
                     price_difference, percentage_change, source, checked_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    str(entry.id),
                    str(entry.product_id),
                    entry.price,
                    entry.previous_price,
                    entry.currency,
                    entry.status.value,
                    entry.price_difference,
                    entry.percentage_change,
                    entry.source,
                    entry.checked_at.isoformat(),
                ))

                prefix = f"{assignments}, " if assignments else ""
                cursor = await db.execute(
                    f"UPDATE products SET {prefix}total_checks = total_checks + 1, "
                    "updated_at = ? WHERE id = ?",
                    [*params, datetime.now().isoformat(), str(entry.product_id)],
                )
                if cursor.rowcount != 1:
                    raise DatabaseError(
                        "Produto não encontrado ao registrar verificação",
                        storage_type=self.storage_type.value,
                        path=str(self.db_path),
                    )

                await db.commit()
            except Exception:
                await db.rollback()
                raise

            product = await self._fetch_product(db, "id = ?", str(entry.product_id))

        self.logger.debug(
            "Verificação registrada",
            product_id=str(entry.product_id),
            status=entry.status.value,
            price=entry.price,
        )
        return product

    async def get_history(
        self,
        product_id: UUID,
        page: int = 1,
        limit: int = 20,
    ) -> list[PriceHistoryEntry]:
        await self._ensure_initialized()
        return await self._fetch_history(
            product_id,
            limit=limit,
            offset=(max(page, 1) - 1) * limit,
        )

    async def count_history(self, product_id: UUID) -> int:
        await self._ensure_initialized()

        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute(
                "SELECT COUNT(*) FROM price_history WHERE product_id = ?",
                (str(product_id),),
            ) as cursor:
                row = await cursor.fetchone()
                return row[0]

    async def get_recent_history(
        self,
        product_id: UUID,
        limit: int = 2,
    ) -> list[PriceHistoryEntry]:
        await self._ensure_initialized()
        return await self._fetch_history(product_id, limit=limit, offset=0)

    async def count_history_by_status(self, product_id: UUID) -> dict[PriceStatus, int]:
        await self._ensure_initialized()

        breakdown = {status: 0 for status in PriceStatus}
        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute("""
                SELECT status, COUNT(*)
                FROM price_history
                WHERE product_id = ?
                GROUP BY status
            """, (str(product_id),)) as cursor:
                async for row in cursor:
                    breakdown[PriceStatus(row[0])] = row[1]

        return breakdown

    # =========================================================================
    # CONVERSÃO
    # =========================================================================

    async def _fetch_product(
        self,
        db: aiosqlite.Connection,
        where: str,
        value: str,
    ) -> Optional[Product]:
        db.row_factory = aiosqlite.Row
        async with db.execute(f"SELECT * FROM products WHERE {where}", (value,)) as cursor:
            row = await cursor.fetchone()
        return self._row_to_product(dict(row)) if row else None

    async def _fetch_history(
        self,
        product_id: UUID,
        limit: int,
        offset: int,
    ) -> list[PriceHistoryEntry]:
        entries = []
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute("""
                SELECT * FROM price_history
                WHERE product_id = ?
                ORDER BY checked_at DESC, rowid DESC
                LIMIT ? OFFSET ?
            """, (str(product_id), limit, offset)) as cursor:
                async for row in cursor:
                    entries.append(self._row_to_entry(dict(row)))
        return entries

    def _row_to_product(self, row: dict) -> Product:
        """Converte row do SQLite para Product."""
        lowest = row["lowest_price"]
        return Product(
            id=UUID(row["id"]),
            name=row["name"],
            url=row["url"],
            current_price=row["current_price"],
            highest_price=row["highest_price"],
            lowest_price=math.inf if lowest is None else lowest,
            average_price=row["average_price"],
            currency=row["currency"],
            source=row["source"],
            total_checks=row["total_checks"],
            last_checked_at=_parse_dt(row["last_checked_at"]),
            is_active=bool(row["is_active"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _row_to_entry(self, row: dict) -> PriceHistoryEntry:
        """Converte row do SQLite para PriceHistoryEntry."""
        return PriceHistoryEntry(
            id=UUID(row["id"]),
            product_id=UUID(row["product_id"]),
            price=row["price"],
            previous_price=row["previous_price"],
            currency=row["currency"],
            status=PriceStatus(row["status"]),
            price_difference=row["price_difference"],
            percentage_change=row["percentage_change"],
            source=row["source"],
            checked_at=datetime.fromisoformat(row["checked_at"]),
        )
