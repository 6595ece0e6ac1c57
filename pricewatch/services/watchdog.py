"""
Watchdog: compara o preço recém-extraído com o estado salvo do produto,
classifica a variação, atualiza as estatísticas e grava o histórico.
"""

import asyncio
import math
from collections import Counter
from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, AsyncIterator, Optional
from uuid import UUID

from config.logging_config import LoggerMixin
from pricewatch.core.exceptions import NotFoundError, ValidationError
from pricewatch.core.models import (
    PriceHistoryEntry,
    Product,
    WatchdogResult,
    WatchdogStats,
    WatchdogSummary,
)
from pricewatch.core.types import PriceStatus
from pricewatch.storage.base import BaseStorage


# =============================================================================
# CÁLCULOS
# =============================================================================

def round_money(value: float, places: int = 2) -> float:
    """Arredonda com ROUND_HALF_UP (1.005 -> 1.01)."""
    quantize_exp = Decimal(10) ** -places
    return float(Decimal(str(value)).quantize(quantize_exp, rounding=ROUND_HALF_UP))


def compare_price(
    new_price: float,
    previous_price: Optional[float],
    has_previous: bool = True,
) -> PriceStatus:
    """
    Classifica a variação de preço.

    Sem preço anterior (primeira verificação) o status é sempre SAME.

    Args:
        new_price: Preço recém-extraído
        previous_price: Preço salvo antes desta verificação
        has_previous: False na primeira verificação do produto
    """
    if not has_previous or previous_price is None:
        return PriceStatus.SAME
    if new_price < previous_price:
        return PriceStatus.CHEAPER
    if new_price > previous_price:
        return PriceStatus.COSTLY
    return PriceStatus.SAME


def calc_percentage_change(new_price: float, previous_price: Optional[float]) -> float:
    """
    Variação percentual. -12.5 significa 12.5% mais barato.
    Sem preço anterior (ou anterior 0) retorna 0.
    """
    if not previous_price:
        return 0.0
    return round_money((new_price - previous_price) / previous_price * 100)


def calc_running_average(current_avg: float, total_checks: int, new_price: float) -> float:
    """
    Média incremental: ((média * n) + novo) / (n + 1).

    Args:
        current_avg: Média antes desta verificação
        total_checks: Número de verificações ANTES desta
        new_price: Preço desta verificação
    """
    if total_checks == 0:
        return new_price
    return round_money((current_avg * total_checks + new_price) / (total_checks + 1))


# =============================================================================
# SERVIÇO
# =============================================================================

class WatchdogService(LoggerMixin):
    """
    Motor de comparação de preços.

    A leitura-modificação-escrita de cada produto roda sob um lock por produto,
    então execuções sobrepostas nunca quebram o encadeamento de previous_price.
    """

    def __init__(self, storage: BaseStorage):
        """
        Args:
            storage: Backend de persistência
        """
        self.storage = storage
        self._locks: dict[UUID, asyncio.Lock] = {}
        self._lock_users: Counter[UUID] = Counter()

    @asynccontextmanager
    async def _product_lock(self, product_id: UUID) -> AsyncIterator[None]:
        """Lock do produto; removido quando nenhuma tarefa o segura ou espera."""
        lock = self._locks.setdefault(product_id, asyncio.Lock())
        self._lock_users[product_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[product_id] -= 1
            if self._lock_users[product_id] <= 0:
                del self._lock_users[product_id]
                del self._locks[product_id]

    async def analyze_price(self, product_id: UUID, new_price: float) -> WatchdogResult:
        """
        Analisa uma verificação de preço de um produto.

        Args:
            product_id: ID do produto
            new_price: Preço já limpo

        Returns:
            WatchdogResult com status, diferença, histórico e produto atualizado

        Raises:
            ValidationError: Preço negativo, infinito ou NaN
            NotFoundError: Produto inexistente
        """
        if not math.isfinite(new_price) or new_price < 0:
            raise ValidationError(
                "Preço deve ser um número finito e não negativo",
                field="new_price",
                value=new_price,
            )

        async with self._product_lock(product_id):
            product = await self.storage.get_product(product_id)
            if product is None:
                raise NotFoundError(entity_id=str(product_id))

            return await self._record(product, new_price)

    async def _record(self, product: Product, new_price: float) -> WatchdogResult:
        has_previous = product.total_checks > 0
        previous_price = product.current_price

        status = compare_price(new_price, previous_price, has_previous)
        price_difference = round_money(new_price - previous_price)
        percentage_change = (
            calc_percentage_change(new_price, previous_price) if has_previous else 0.0
        )

        now = datetime.now()

        entry = PriceHistoryEntry(
            product_id=product.id,
            price=new_price,
            previous_price=previous_price if has_previous else None,
            currency=product.currency,
            status=status,
            price_difference=price_difference,
            percentage_change=percentage_change,
            source=product.source,
            checked_at=now,
        )

        updates = {
            "current_price": new_price,
            "highest_price": max(product.highest_price, new_price),
            "lowest_price": min(product.lowest_price, new_price),
            "average_price": calc_running_average(
                product.average_price,
                product.total_checks,
                new_price,
            ),
            "last_checked_at": now,
        }

        updated = await self.storage.record_check(entry, updates)

        self.logger.info(
            "Preço analisado",
            product_id=str(product.id),
            status=status.value,
            previous_price=previous_price,
            new_price=new_price,
            percentage_change=percentage_change,
        )

        return WatchdogResult(
            status=status,
            previous_price=previous_price,
            new_price=new_price,
            price_difference=price_difference,
            percentage_change=percentage_change,
            history_entry=entry,
            updated_product=updated,
        )

    async def analyze_bulk(self, checks: list[tuple[UUID, float]]) -> list[dict[str, Any]]:
        """
        Analisa várias verificações em sequência.
        Falha em um produto não interrompe os demais.

        Args:
            checks: Pares (product_id, new_price)

        Returns:
            Lista de {product_id, success, result | error}
        """
        results = []

        for product_id, new_price in checks:
            try:
                result = await self.analyze_price(product_id, new_price)
                results.append({
                    "product_id": product_id,
                    "success": True,
                    "result": result,
                })
            except Exception as e:
                self.logger.warning(
                    "Falha na análise em lote",
                    product_id=str(product_id),
                    error=str(e),
                )
                results.append({
                    "product_id": product_id,
                    "success": False,
                    "error": getattr(e, "message", None) or str(e) or "Unknown error",
                })

        return results

    async def get_summary(self, product_id: UUID) -> WatchdogSummary:
        """
        Resumo somente-leitura: produto, duas últimas verificações e
        contagem por status.

        Raises:
            NotFoundError: Produto inexistente
        """
        product = await self.storage.get_product(product_id)
        if product is None:
            raise NotFoundError(entity_id=str(product_id))

        recent = await self.storage.get_recent_history(product_id, limit=2)
        breakdown = await self.storage.count_history_by_status(product_id)

        stats = WatchdogStats(
            total_checks=product.total_checks,
            current_price=product.current_price,
            highest_price=product.highest_price,
            lowest_price=product.lowest_price,
            average_price=product.average_price,
            status_breakdown=breakdown,
        )

        return WatchdogSummary(
            product=product,
            last_check=recent[0] if recent else None,
            previous_check=recent[1] if len(recent) > 1 else None,
            stats=stats,
        )
