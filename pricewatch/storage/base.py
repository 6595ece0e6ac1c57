"""
Classe base abstrata para storage.
Define o contrato de persistência de produtos e histórico de preços.
"""

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Any, Optional
from uuid import UUID

from config.logging_config import LoggerMixin
from pricewatch.core.models import PriceHistoryEntry, Product, ProductRef
from pricewatch.core.types import PriceStatus


class StorageType(str, Enum):
    """Tipos de storage disponíveis."""
    SQLITE = "sqlite"


class BaseStorage(ABC, LoggerMixin):
    """
    Classe base abstrata para backends de storage.
    Histórico de preços é somente-inserção.
    """

    def __init__(self, base_path: Path):
        """
        Inicializa o storage.

        Args:
            base_path: Diretório base para armazenamento
        """
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    @property
    @abstractmethod
    def storage_type(self) -> StorageType:
        """Retorna o tipo de storage."""
        pass

    # PRODUTOS

    @abstractmethod
    async def list_active_products(self) -> list[ProductRef]:
        """Projeção dos produtos ativos (id, nome, url, origem, preço atual)."""
        pass

    @abstractmethod
    async def get_product(self, product_id: UUID) -> Optional[Product]:
        """Busca produto pelo id; None se não existir."""
        pass

    @abstractmethod
    async def get_product_by_url(self, url: str) -> Optional[Product]:
        """Busca produto pela URL; None se não existir."""
        pass

    @abstractmethod
    async def create_product(self, product: Product) -> Product:
        """
        Insere novo produto.

        Raises:
            DuplicateProductError: URL já cadastrada
        """
        pass

    @abstractmethod
    async def list_products(
        self,
        page: int = 1,
        limit: int = 20,
        is_active: Optional[bool] = None,
    ) -> list[Product]:
        """Lista produtos, mais recentes primeiro."""
        pass

    @abstractmethod
    async def count_products(self, is_active: Optional[bool] = None) -> int:
        pass

    @abstractmethod
    async def set_active(self, product_id: UUID, is_active: bool) -> Optional[Product]:
        """Ativa ou desativa monitoramento; None se o produto não existir."""
        pass

    # HISTÓRICO

    @abstractmethod
    async def record_check(
        self,
        entry: PriceHistoryEntry,
        updates: dict[str, Any],
    ) -> Product:
        """
        Registra uma verificação de preço em uma única transação:
        insere o histórico, aplica as atualizações no produto e
        incrementa total_checks.

        Args:
            entry: Nova entrada de histórico
            updates: Campos do produto a atualizar

        Returns:
            Produto atualizado
        """
        pass

    @abstractmethod
    async def get_history(
        self,
        product_id: UUID,
        page: int = 1,
        limit: int = 20,
    ) -> list[PriceHistoryEntry]:
        """Histórico do produto, mais recente primeiro."""
        pass

    @abstractmethod
    async def count_history(self, product_id: UUID) -> int:
        pass

    @abstractmethod
    async def get_recent_history(
        self,
        product_id: UUID,
        limit: int = 2,
    ) -> list[PriceHistoryEntry]:
        """Últimas entradas do histórico, mais recente primeiro."""
        pass

    @abstractmethod
    async def count_history_by_status(self, product_id: UUID) -> dict[PriceStatus, int]:
        """Contagem de entradas por status."""
        pass
