"""
Serviço de produtos: cadastro, listagem paginada e histórico de preços.
"""

import asyncio
from typing import Any, Iterable, Optional, Union
from urllib.parse import urlparse
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError

from config.logging_config import LoggerMixin
from pricewatch.core.exceptions import (
    DuplicateProductError,
    InvalidURLError,
    NotFoundError,
    PriceWatchError,
    ValidationError,
)
from pricewatch.core.models import (
    BulkAddResult,
    HistoryPage,
    Pagination,
    Product,
    ProductPage,
)
from pricewatch.pipeline.cleaners import extract_source
from pricewatch.storage.base import BaseStorage


MAX_NAME_LENGTH = 500

# Item de cadastro em lote: URL simples ou (URL, nome)
BulkItem = Union[str, tuple[str, Optional[str]], dict[str, Any]]


def validate_url(url: str) -> str:
    """
    Valida e normaliza uma URL de produto.

    Raises:
        InvalidURLError: Sem esquema http(s) ou sem hostname
    """
    candidate = (url or "").strip()
    try:
        parsed = urlparse(candidate)
    except ValueError as e:
        raise InvalidURLError(url, cause=e) from e

    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise InvalidURLError(url)

    # urlparse já devolve o esquema em minúsculas ("HTTPS://" -> "https://")
    return parsed.geturl()


class ProductService(LoggerMixin):
    """Operações de cadastro e consulta de produtos monitorados."""

    def __init__(self, storage: BaseStorage):
        self.storage = storage

    async def add_product(self, url: str, name: Optional[str] = None) -> Product:
        """
        Cadastra uma URL para monitoramento.

        Args:
            url: URL da página de produto
            name: Nome amigável (padrão: hostname da URL)

        Raises:
            InvalidURLError: URL inválida
            ValidationError: Nome maior que MAX_NAME_LENGTH ou produto inválido
            DuplicateProductError: URL já monitorada
        """
        url = validate_url(url)

        name = (name or "").strip()
        if len(name) > MAX_NAME_LENGTH:
            raise ValidationError(
                f"Nome excede {MAX_NAME_LENGTH} caracteres",
                field="name",
                value=name[:50],
            )

        if await self.storage.get_product_by_url(url) is not None:
            raise DuplicateProductError(url)

        source = extract_source(url)
        try:
            product = Product(
                name=name or source,
                url=url,
                source=source,
            )
        except PydanticValidationError as e:
            raise ValidationError(
                f"Produto inválido: {e.errors()[0]['msg']}",
                value=url,
                cause=e,
            ) from e

        return await self.storage.create_product(product)

    async def bulk_add_products(self, items: Iterable[BulkItem]) -> BulkAddResult:
        """
        Cadastra várias URLs; falhas individuais são reportadas sem abortar.

        Args:
            items: URLs, tuplas (url, nome) ou dicts {"url", "name"}
        """
        result = BulkAddResult()

        for item in items:
            url, name = self._unpack_item(item)
            try:
                product = await self.add_product(url, name)
                result.added.append(product)
            except PriceWatchError as e:
                result.failed.append({"url": url, "error": e.message})

        self.logger.info(
            "Cadastro em lote concluído",
            added=len(result.added),
            failed=len(result.failed),
        )
        return result

    @staticmethod
    def _unpack_item(item: BulkItem) -> tuple[str, Optional[str]]:
        if isinstance(item, dict):
            return item.get("url", ""), item.get("name")
        if isinstance(item, (tuple, list)):
            url = item[0] if item else ""
            name = item[1] if len(item) > 1 else None
            return url, name
        return item, None

    async def list_products(
        self,
        page: int = 1,
        limit: int = 10,
        is_active: Optional[bool] = None,
    ) -> ProductPage:
        """Lista produtos (mais recentes primeiro) com paginação."""
        page = max(page, 1)
        products, total = await asyncio.gather(
            self.storage.list_products(page=page, limit=limit, is_active=is_active),
            self.storage.count_products(is_active=is_active),
        )

        return ProductPage(
            products=products,
            pagination=Pagination(total=total, page=page, limit=limit),
        )

    async def get_price_history(
        self,
        product_id: UUID,
        page: int = 1,
        limit: int = 20,
    ) -> HistoryPage:
        """
        Histórico de preços do produto, mais recente primeiro.

        Raises:
            NotFoundError: Produto inexistente
        """
        product = await self.storage.get_product(product_id)
        if product is None:
            raise NotFoundError(entity_id=str(product_id))

        page = max(page, 1)
        history, total = await asyncio.gather(
            self.storage.get_history(product_id, page=page, limit=limit),
            self.storage.count_history(product_id),
        )

        return HistoryPage(
            product=product,
            history=history,
            pagination=Pagination(total=total, page=page, limit=limit),
        )

    async def set_active(self, product_id: UUID, is_active: bool) -> Product:
        """
        Ativa ou desativa o monitoramento de um produto.

        Raises:
            NotFoundError: Produto inexistente
        """
        product = await self.storage.set_active(product_id, is_active)
        if product is None:
            raise NotFoundError(entity_id=str(product_id))

        self.logger.info(
            "Monitoramento alterado",
            product_id=str(product_id),
            is_active=is_active,
        )
        return product
