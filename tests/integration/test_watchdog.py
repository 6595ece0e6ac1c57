"""
Testes de integração para o WatchdogService.
"""

import asyncio
import math
from uuid import uuid4

import pytest
import pytest_asyncio

from pricewatch.core.exceptions import NotFoundError, ValidationError
from pricewatch.core.types import PriceStatus


@pytest_asyncio.fixture
async def product(product_service):
    return await product_service.add_product("https://www.flipkart.com/phone/p/itm1", "Phone")


class TestAnalyzePrice:
    """Testes para analyze_price."""

    @pytest.mark.asyncio
    async def test_primeira_verificacao(self, watchdog, product):
        result = await watchdog.analyze_price(product.id, 1000.0)

        assert result.status == PriceStatus.SAME
        assert result.percentage_change == 0
        assert result.previous_price == 0
        assert result.history_entry.previous_price is None

        updated = result.updated_product
        assert updated.current_price == 1000.0
        assert updated.highest_price == 1000.0
        assert updated.lowest_price == 1000.0
        assert updated.average_price == 1000.0
        assert updated.total_checks == 1
        assert updated.last_checked_at is not None

    @pytest.mark.asyncio
    async def test_queda_de_preco(self, watchdog, product):
        await watchdog.analyze_price(product.id, 1000.0)

        result = await watchdog.analyze_price(product.id, 875.0)

        assert result.status == PriceStatus.CHEAPER
        assert result.previous_price == 1000.0
        assert result.price_difference == -125.0
        assert result.percentage_change == -12.5
        assert result.history_entry.previous_price == 1000.0
        assert result.updated_product.lowest_price == 875.0
        assert result.updated_product.highest_price == 1000.0

    @pytest.mark.asyncio
    async def test_alta_de_preco(self, watchdog, product):
        await watchdog.analyze_price(product.id, 100.0)

        result = await watchdog.analyze_price(product.id, 110.55)

        assert result.status == PriceStatus.COSTLY
        assert result.price_difference == 10.55
        assert result.percentage_change == 10.55

    @pytest.mark.asyncio
    async def test_mesmo_preco_duas_vezes_e_same(self, watchdog, product):
        await watchdog.analyze_price(product.id, 300.0)
        await watchdog.analyze_price(product.id, 450.0)

        result = await watchdog.analyze_price(product.id, 450.0)

        assert result.status == PriceStatus.SAME
        assert result.price_difference == 0

    @pytest.mark.asyncio
    async def test_media_e_total_checks(self, watchdog, product):
        prices = [100.0, 250.0, 175.0, 90.0, 135.0]

        for price in prices:
            result = await watchdog.analyze_price(product.id, price)

        updated = result.updated_product
        assert updated.average_price == round(sum(prices) / len(prices), 2)
        assert updated.total_checks == len(prices)
        assert updated.lowest_price <= updated.current_price <= updated.highest_price

    @pytest.mark.asyncio
    async def test_previous_price_encadeado(self, watchdog, storage, product):
        prices = [500.0, 450.0, 480.0, 480.0]
        for price in prices:
            await watchdog.analyze_price(product.id, price)

        history = list(reversed(await storage.get_history(product.id, limit=10)))

        assert [e.price for e in history] == prices
        assert [e.previous_price for e in history] == [None, 500.0, 450.0, 480.0]
        assert [e.status for e in history] == [
            PriceStatus.SAME, PriceStatus.CHEAPER, PriceStatus.COSTLY, PriceStatus.SAME,
        ]

    @pytest.mark.asyncio
    async def test_zero_real_apos_verificacoes(self, watchdog, storage, product):
        """Preço 0 gravado depois da primeira verificação é comparado normalmente."""
        await watchdog.analyze_price(product.id, 100.0)
        await watchdog.analyze_price(product.id, 0.0)

        result = await watchdog.analyze_price(product.id, 50.0)

        assert result.status == PriceStatus.COSTLY
        assert result.percentage_change == 0
        assert result.history_entry.previous_price == 0.0

    @pytest.mark.asyncio
    async def test_produto_inexistente(self, watchdog):
        with pytest.raises(NotFoundError):
            await watchdog.analyze_price(uuid4(), 100.0)

    @pytest.mark.asyncio
    async def test_verificacoes_concorrentes_do_mesmo_produto(self, watchdog, storage, product):
        """O lock por produto mantém o encadeamento de previous_price."""
        prices = [100.0, 200.0, 300.0, 400.0, 500.0]

        await asyncio.gather(*[watchdog.analyze_price(product.id, p) for p in prices])

        history = list(reversed(await storage.get_history(product.id, limit=10)))
        updated = await storage.get_product(product.id)

        assert updated.total_checks == 5
        assert history[0].previous_price is None
        for before, after in zip(history, history[1:]):
            assert after.previous_price == before.price

    @pytest.mark.asyncio
    @pytest.mark.parametrize("price", [math.inf, math.nan, -1.0])
    async def test_preco_invalido_rejeitado(self, watchdog, storage, product, price):
        with pytest.raises(ValidationError) as exc_info:
            await watchdog.analyze_price(product.id, price)

        assert exc_info.value.details["field"] == "new_price"
        assert await storage.count_history(product.id) == 0
        assert (await storage.get_product(product.id)).total_checks == 0

    @pytest.mark.asyncio
    async def test_locks_liberados_apos_analise(self, watchdog, product):
        await watchdog.analyze_price(product.id, 100.0)
        await asyncio.gather(*[watchdog.analyze_price(product.id, p) for p in (110.0, 120.0, 130.0)])

        assert watchdog._locks == {}
        assert not watchdog._lock_users

    @pytest.mark.asyncio
    async def test_lock_liberado_apos_erro(self, watchdog):
        with pytest.raises(NotFoundError):
            await watchdog.analyze_price(uuid4(), 100.0)

        assert watchdog._locks == {}


class TestAnalyzeBulk:
    """Testes para analyze_bulk."""

    @pytest.mark.asyncio
    async def test_falha_isolada(self, watchdog, product):
        missing = uuid4()

        results = await watchdog.analyze_bulk([
            (product.id, 100.0),
            (missing, 50.0),
            (product.id, 80.0),
        ])

        assert [r["success"] for r in results] == [True, False, True]
        assert results[1]["product_id"] == missing
        assert results[1]["error"] == "Product not found"
        assert results[2]["result"].status == PriceStatus.CHEAPER


class TestGetSummary:
    """Testes para get_summary."""

    @pytest.mark.asyncio
    async def test_resumo(self, watchdog, product):
        for price in (100.0, 90.0, 95.0, 95.0):
            await watchdog.analyze_price(product.id, price)

        summary = await watchdog.get_summary(product.id)

        assert summary.product.id == product.id
        assert summary.last_check.price == 95.0
        assert summary.previous_check.price == 95.0
        assert summary.stats.total_checks == 4
        assert summary.stats.lowest_price == 90.0
        assert summary.stats.highest_price == 100.0
        assert summary.stats.status_breakdown == {
            PriceStatus.SAME: 2,
            PriceStatus.CHEAPER: 1,
            PriceStatus.COSTLY: 1,
        }

    @pytest.mark.asyncio
    async def test_resumo_sem_historico(self, watchdog, product):
        summary = await watchdog.get_summary(product.id)

        assert summary.last_check is None
        assert summary.previous_check is None
        assert summary.stats.total_checks == 0

    @pytest.mark.asyncio
    async def test_resumo_nao_altera_produto(self, watchdog, storage, product):
        await watchdog.analyze_price(product.id, 100.0)
        before = await storage.get_product(product.id)

        await watchdog.get_summary(product.id)

        assert await storage.get_product(product.id) == before

    @pytest.mark.asyncio
    async def test_resumo_produto_inexistente(self, watchdog):
        with pytest.raises(NotFoundError):
            await watchdog.get_summary(uuid4())
