"""
Job de verificação de preços em lote.

Busca os produtos ativos, divide em lotes, processa cada lote em paralelo
(scrape com retry + limpeza + watchdog) e agrega o relatório final.
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from config.logging_config import LoggerMixin
from config.settings import Settings, get_settings
from pricewatch.core.exceptions import PriceWatchError, ScrapeError, ZeroPriceSkip
from pricewatch.core.models import (
    JobRunReport,
    JobSummary,
    ProductRef,
    ProductResult,
)
from pricewatch.core.types import ProductRunStatus
from pricewatch.pipeline.cleaners import clean_availability, clean_price, clean_title
from pricewatch.scrapers.resolver import ScraperResolver
from pricewatch.services.watchdog import WatchdogService
from pricewatch.storage.base import BaseStorage

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[None]]


# =============================================================================
# UTILITÁRIOS
# =============================================================================

def chunk(items: Sequence[T], size: int) -> list[list[T]]:
    """Divide uma sequência em lotes ordenados de até `size` itens."""
    if size < 1:
        raise ValueError("size deve ser >= 1")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def format_duration(seconds: float) -> str:
    """
    Formata duração para leitura humana.

    Exemplos:
        0.25 -> "250ms"
        12.34 -> "12.3s"
        125 -> "2m 5s"
    """
    ms = int(round(seconds * 1000))
    if ms < 1000:
        return f"{ms}ms"
    if ms < 60000:
        return f"{ms / 1000:.1f}s"
    mins, rest = divmod(ms, 60000)
    return f"{mins}m {round(rest / 1000)}s"


# =============================================================================
# RUNNER
# =============================================================================

class BatchJobRunner(LoggerMixin):
    """
    Orquestra "verificar todos os produtos ativos".

    Cada produto passa por resolver -> scraper -> limpeza -> watchdog.
    Falhas por produto nunca interrompem o lote nem o job.
    """

    def __init__(
        self,
        storage: BaseStorage,
        resolver: ScraperResolver,
        watchdog: WatchdogService,
        settings: Optional[Settings] = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        """
        Args:
            storage: Backend de persistência
            resolver: Resolução URL -> scraper
            watchdog: Motor de comparação de preços
            settings: Configurações (padrão: get_settings())
            sleep: Função de espera usada no backoff e entre lotes
        """
        self.storage = storage
        self.resolver = resolver
        self.watchdog = watchdog
        self.settings = settings or get_settings()
        self._sleep = sleep

    async def run_job(
        self,
        batch_size: Optional[int] = None,
        batch_delay: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_base_delay: Optional[float] = None,
    ) -> JobRunReport:
        """
        Executa o job completo.

        Argumentos None usam os valores das configurações.

        Args:
            batch_size: Produtos por lote (= paralelismo)
            batch_delay: Pausa entre lotes em segundos
            max_retries: Tentativas de scrape por produto
            retry_base_delay: Espera base do backoff exponencial

        Returns:
            JobRunReport com resultados por produto e resumo
        """
        batch_size = batch_size or self.settings.batch_size
        batch_delay = self.settings.batch_delay if batch_delay is None else batch_delay
        max_retries = max_retries or self.settings.max_retries
        retry_base_delay = (
            self.settings.retry_base_delay if retry_base_delay is None else retry_base_delay
        )

        log = self.log_operation("run_job")
        report = JobRunReport()
        job_start = time.monotonic()

        log.info(
            "Job iniciado",
            batch_size=batch_size,
            batch_delay=batch_delay,
            max_retries=max_retries,
        )

        products = await self.storage.list_active_products()

        if not products:
            log.info("Nenhum produto ativo para verificar")
            report.mark_finished()
            return report

        report.total_products = len(products)
        batches = chunk(products, batch_size)
        total = len(products)
        processed = 0

        log.info("Produtos encontrados", total=total, batches=len(batches))

        for index, batch in enumerate(batches, start=1):
            batch_start = time.monotonic()

            log.info("Lote iniciado", batch=index, of=len(batches), size=len(batch))

            batch_results = await asyncio.gather(*[
                self.process_product(product, max_retries, retry_base_delay)
                for product in batch
            ])

            report.results.extend(batch_results)
            processed += len(batch)

            batch_summary = JobSummary.from_results(batch_results)
            elapsed = time.monotonic() - job_start
            eta = elapsed / processed * (total - processed)

            log.info(
                "Lote concluído",
                batch=index,
                success=batch_summary.success,
                failed=batch_summary.failed,
                skipped=batch_summary.skipped,
                retried=batch_summary.retried,
                duration=format_duration(time.monotonic() - batch_start),
            )
            log.info(
                "Progresso",
                processed=processed,
                total=total,
                percent=round(processed / total * 100, 1),
                eta=format_duration(eta),
            )

            if index < len(batches):
                log.debug("Pausa entre lotes", seconds=batch_delay)
                await self._sleep(batch_delay)

        report.summary = JobSummary.from_results(report.results)
        report.mark_finished()

        total_duration = time.monotonic() - job_start
        log.info(
            "Job concluído",
            total=total,
            success=report.summary.success,
            failed=report.summary.failed,
            skipped=report.summary.skipped,
            retried=report.summary.retried,
            duration=format_duration(total_duration),
            avg_per_item=format_duration(total_duration / total),
        )

        return report

    async def process_product(
        self,
        product: ProductRef,
        max_retries: int,
        retry_base_delay: float,
    ) -> ProductResult:
        """
        Processa um produto: scrape com retry, limpeza e watchdog.

        Apenas ScrapeError é repetido; URL inválida ou site não suportado
        falham na primeira tentativa. Nunca levanta exceção.
        """
        start = time.monotonic()
        attempts = 0

        def result(status: ProductRunStatus, **fields) -> ProductResult:
            return ProductResult(
                product_id=product.id,
                name=product.name,
                status=status,
                attempts=attempts,
                duration_seconds=time.monotonic() - start,
                **fields,
            )

        try:
            retrying = AsyncRetrying(
                stop=stop_after_attempt(max_retries),
                wait=wait_exponential(multiplier=retry_base_delay),
                retry=retry_if_exception_type(ScrapeError),
                sleep=self._sleep,
                reraise=True,
            )
            async for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    if attempts > 1:
                        self.logger.debug(
                            "Nova tentativa de scrape",
                            product_id=str(product.id),
                            attempt=attempts,
                        )
                    raw = await self.resolver.scrape(product.url)

            price = clean_price(raw.price)
            title = clean_title(raw.title)
            available = clean_availability(raw.availability)

            if price == 0:
                raise ZeroPriceSkip()

            outcome = await self.watchdog.analyze_price(product.id, price)

        except ZeroPriceSkip as e:
            self.logger.warning("Produto ignorado", product_id=str(product.id), reason=e.message)
            return result(ProductRunStatus.SKIPPED, title=title, reason=e.message)

        except Exception as e:
            message = e.message if isinstance(e, PriceWatchError) else str(e)
            self.logger.warning(
                "Falha ao processar produto",
                product_id=str(product.id),
                attempts=attempts,
                error_type=type(e).__name__,
                error=message,
            )
            return result(ProductRunStatus.FAILED, error=message or "Unknown error")

        return result(
            ProductRunStatus.SUCCESS,
            title=title,
            available=available,
            price_status=outcome.status,
            previous_price=outcome.previous_price,
            new_price=outcome.new_price,
            price_difference=outcome.price_difference,
            percentage_change=outcome.percentage_change,
        )
