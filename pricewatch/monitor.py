"""
PriceMonitor: ponto de entrada do sistema.
Monta storage, scrapers, watchdog, runner e agendador a partir das configurações.
"""

from typing import Any, Iterable, Optional
from uuid import UUID

from config.logging_config import LoggerMixin, setup_logging
from config.settings import Settings, get_settings
from config.sites import get_site_config
from pricewatch.core.exceptions import NotFoundError
from pricewatch.core.models import (
    BulkAddResult,
    GuardStatus,
    HistoryPage,
    JobRunReport,
    Product,
    ProductPage,
    ProductRef,
    ProductResult,
    WatchdogResult,
    WatchdogSummary,
)
from pricewatch.core.types import RunTrigger
from pricewatch.jobs import BatchJobRunner, ScheduleGuard
from pricewatch.scrapers import ScraperResolver
from pricewatch.services import ProductService, WatchdogService
from pricewatch.services.products import BulkItem
from pricewatch.storage import BaseStorage, SQLiteStorage


class PriceMonitor(LoggerMixin):
    """
    Orquestrador principal do monitoramento de preços.

    Responsabilidades:
    - Cadastro e consulta de produtos
    - Verificação manual de preço (watchdog)
    - Execução do job em lote e agendamento cron
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        storage: Optional[BaseStorage] = None,
        resolver: Optional[ScraperResolver] = None,
        configure_logging: bool = True,
    ):
        """
        Inicializa o monitor.

        Args:
            settings: Configurações (None = get_settings())
            storage: Backend de persistência (None = SQLite em data_path)
            resolver: Resolver de scrapers (None = registro padrão)
            configure_logging: Se deve configurar structlog
        """
        self.settings = settings or get_settings()

        if configure_logging:
            setup_logging(
                level=self.settings.log_level,
                log_path=self.settings.log_path,
                json_format=self.settings.log_json,
            )

        self.storage = storage or SQLiteStorage(
            base_path=self.settings.data_path,
            db_name=self.settings.db_name,
        )
        self.resolver = resolver or ScraperResolver()
        self.watchdog = WatchdogService(self.storage)
        self.products = ProductService(self.storage)
        self.runner = BatchJobRunner(
            storage=self.storage,
            resolver=self.resolver,
            watchdog=self.watchdog,
            settings=self.settings,
        )
        self.guard = ScheduleGuard(self.runner, settings=self.settings)

        self.logger.debug(
            "PriceMonitor inicializado",
            storage_type=self.storage.storage_type.value,
            data_path=str(self.settings.data_path),
        )

    # PRODUTOS

    async def add_product(self, url: str, name: Optional[str] = None) -> Product:
        return await self.products.add_product(url, name)

    async def bulk_add_products(self, items: Iterable[BulkItem]) -> BulkAddResult:
        return await self.products.bulk_add_products(items)

    async def list_products(
        self,
        page: int = 1,
        limit: int = 10,
        is_active: Optional[bool] = None,
    ) -> ProductPage:
        return await self.products.list_products(page, limit, is_active)

    async def get_price_history(
        self,
        product_id: UUID,
        page: int = 1,
        limit: int = 20,
    ) -> HistoryPage:
        return await self.products.get_price_history(product_id, page, limit)

    async def set_active(self, product_id: UUID, is_active: bool) -> Product:
        return await self.products.set_active(product_id, is_active)

    # WATCHDOG

    async def check_price(self, product_id: UUID, new_price: float) -> WatchdogResult:
        """Registra manualmente um preço observado."""
        return await self.watchdog.analyze_price(product_id, new_price)

    async def get_summary(self, product_id: UUID) -> WatchdogSummary:
        return await self.watchdog.get_summary(product_id)

    async def scrape_product(self, product_id: UUID) -> ProductResult:
        """
        Verifica um único produto agora: scrape com retry, limpeza e watchdog.

        Raises:
            NotFoundError: Produto inexistente
        """
        product = await self.storage.get_product(product_id)
        if product is None:
            raise NotFoundError(entity_id=str(product_id))

        ref = ProductRef(
            id=product.id,
            name=product.name,
            url=product.url,
            source=product.source,
            current_price=product.current_price,
        )
        return await self.runner.process_product(
            ref,
            max_retries=self.settings.max_retries,
            retry_base_delay=self.settings.retry_base_delay,
        )

    # JOB E AGENDAMENTO

    async def run_job(self, **overrides: Any) -> Optional[JobRunReport]:
        """Executa o job uma vez, respeitando o agendador."""
        return await self.guard.run_once(RunTrigger.MANUAL, **overrides)

    def trigger_job(self, **overrides: Any) -> bool:
        return self.guard.trigger(**overrides)

    def start_schedule(self, schedule: Optional[str] = None) -> str:
        return self.guard.start(schedule)

    def stop_schedule(self) -> None:
        self.guard.stop()

    def get_status(self) -> GuardStatus:
        return self.guard.status()

    def get_supported_sites(self) -> list[dict]:
        """Sites suportados, na ordem de resolução."""
        sites = []
        for keyword in self.resolver.supported_sites():
            config = get_site_config(keyword)
            sites.append({
                "id": keyword,
                "name": config.display_name if config else keyword,
                "base_url": config.base_url if config else None,
                "status": config.status.value if config else None,
            })
        return sites
