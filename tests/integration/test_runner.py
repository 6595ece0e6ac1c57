"""
Testes de integração para o BatchJobRunner.
Usam scrapers falsos: nenhum browser é aberto.
"""

import asyncio
from uuid import uuid4

import pytest
import pytest_asyncio

from pricewatch.core.exceptions import BlockedError, NetworkError
from pricewatch.core.models import Product, ProductRef, ScrapedData
from pricewatch.core.types import PriceStatus, ProductRunStatus
from pricewatch.jobs.runner import BatchJobRunner
from pricewatch.scrapers.resolver import ScraperResolver


@pytest.fixture
def runner(storage, resolver, watchdog, settings, sleep_recorder) -> BatchJobRunner:
    return BatchJobRunner(
        storage=storage,
        resolver=resolver,
        watchdog=watchdog,
        settings=settings,
        sleep=sleep_recorder,
    )


@pytest_asyncio.fixture
async def products(product_service):
    """Cinco produtos atendidos pelo scraper falso."""
    return [
        await product_service.add_product(f"https://shop.example/p/{n}", f"Produto {n}")
        for n in range(1, 6)
    ]


def offer(price="₹ 1,299", title="Produto", availability="In stock") -> ScrapedData:
    return ScrapedData(title=title, price=price, availability=availability)


class TestRunJob:
    """Testes para run_job."""

    @pytest.mark.asyncio
    async def test_sem_produtos_ativos(self, runner, fake_scraper):
        report = await runner.run_job()

        assert report.total_products == 0
        assert report.results == []
        assert report.summary.model_dump() == {"success": 0, "failed": 0, "skipped": 0, "retried": 0}
        assert report.finished_at is not None
        assert fake_scraper.calls == []

    @pytest.mark.asyncio
    async def test_todos_com_sucesso(self, runner, storage, products):
        report = await runner.run_job()

        assert report.total_products == 5
        assert report.summary.success == 5
        assert all(r.status == ProductRunStatus.SUCCESS for r in report.results)
        assert all(r.price_status == PriceStatus.SAME for r in report.results)

        for product in products:
            updated = await storage.get_product(product.id)
            assert updated.current_price == 100.0
            assert updated.total_checks == 1

    @pytest.mark.asyncio
    async def test_falha_isolada_nao_aborta(self, runner, products, fake_scraper):
        broken = products[2]
        fake_scraper.set(broken.url, NetworkError("connection reset"))

        report = await runner.run_job()

        assert report.summary.failed == 1
        assert report.summary.success == 4
        assert len(report.results) == 5

        failed = next(r for r in report.results if r.status == ProductRunStatus.FAILED)
        assert failed.product_id == broken.id
        assert failed.attempts == 3
        assert failed.error == "connection reset"
        assert fake_scraper.calls_for(broken.url) == 3

    @pytest.mark.asyncio
    async def test_inativos_ignorados(self, runner, products, product_service, fake_scraper):
        await product_service.set_active(products[0].id, False)

        report = await runner.run_job()

        assert report.total_products == 4
        assert fake_scraper.calls_for(products[0].url) == 0

    @pytest.mark.asyncio
    async def test_lotes_com_pausa_entre_eles(self, runner, products, sleep_recorder):
        report = await runner.run_job(batch_size=2, batch_delay=1.5)

        assert report.summary.success == 5
        # 3 lotes: pausa entre eles, nunca depois do último
        assert sleep_recorder.calls == [1.5, 1.5]

    @pytest.mark.asyncio
    async def test_um_lote_sem_pausa(self, runner, products, sleep_recorder):
        await runner.run_job(batch_size=10, batch_delay=5)
        assert sleep_recorder.calls == []

    @pytest.mark.asyncio
    async def test_resultados_na_ordem_dos_produtos(self, runner, products):
        report = await runner.run_job(batch_size=2)
        assert [r.product_id for r in report.results] == [p.id for p in products]

    @pytest.mark.asyncio
    async def test_usa_configuracoes_quando_sem_argumentos(
        self, storage, watchdog, settings, products, sleep_recorder,
    ):
        settings.batch_size = 2
        settings.batch_delay = 0.5
        resolver = ScraperResolver(registry=[(["shop"], lambda: _StaticScraper())])
        runner = BatchJobRunner(storage, resolver, watchdog, settings, sleep=sleep_recorder)

        await runner.run_job()

        assert sleep_recorder.calls == [0.5, 0.5]


class _StaticScraper:
    async def scrape(self, url):
        return offer(price=50)


class _ConcurrencyProbe:
    """Scraper que mede quantas chamadas ficam em andamento ao mesmo tempo."""

    def __init__(self):
        self.in_flight = 0
        self.max_in_flight = 0

    async def scrape(self, url):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(0.01)
        self.in_flight -= 1
        return offer()


class TestBatchParallelism:
    """O paralelismo é limitado ao tamanho do lote."""

    @pytest.mark.asyncio
    async def test_paralelismo_igual_ao_lote(self, storage, watchdog, settings, products, sleep_recorder):
        probe = _ConcurrencyProbe()
        resolver = ScraperResolver(registry=[(["shop"], lambda: probe)])
        runner = BatchJobRunner(storage, resolver, watchdog, settings, sleep=sleep_recorder)

        report = await runner.run_job(batch_size=2)

        assert report.summary.success == 5
        assert probe.max_in_flight == 2


class TestProcessProduct:
    """Testes para process_product (retry, limpeza e classificação)."""

    @pytest_asyncio.fixture
    async def ref(self, storage, products):
        refs = await storage.list_active_products()
        return refs[0]

    @pytest.mark.asyncio
    async def test_limpa_dados_e_chama_watchdog(self, runner, ref, fake_scraper, storage):
        fake_scraper.set(ref.url, offer(price="MRP: ₹1,299", title="  Nice \n Phone ", availability="Sold Out"))

        result = await runner.process_product(ref, max_retries=3, retry_base_delay=0)

        assert result.status == ProductRunStatus.SUCCESS
        assert result.new_price == 1299.0
        assert result.title == "Nice Phone"
        assert result.available is False
        assert result.attempts == 1
        assert result.retried is False
        assert (await storage.get_product(ref.id)).current_price == 1299.0

    @pytest.mark.asyncio
    async def test_retry_com_backoff_exponencial(self, runner, ref, fake_scraper, sleep_recorder):
        fake_scraper.set(
            ref.url,
            NetworkError("timeout"),
            BlockedError("captcha"),
            offer(price=999),
        )

        result = await runner.process_product(ref, max_retries=3, retry_base_delay=1.0)

        assert result.status == ProductRunStatus.SUCCESS
        assert result.attempts == 3
        assert result.retried is True
        assert sleep_recorder.calls == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_tentativas_esgotadas(self, runner, ref, fake_scraper, sleep_recorder):
        fake_scraper.set(ref.url, NetworkError("HTTP 503", status_code=503))

        result = await runner.process_product(ref, max_retries=4, retry_base_delay=0.5)

        assert result.status == ProductRunStatus.FAILED
        assert result.attempts == 4
        assert result.error == "HTTP 503"
        # Sem espera depois da última tentativa
        assert sleep_recorder.calls == [0.5, 1.0, 2.0]

    @pytest.mark.asyncio
    async def test_preco_zero_e_ignorado(self, runner, ref, fake_scraper, storage):
        fake_scraper.set(ref.url, offer(price="Currently unavailable"))

        result = await runner.process_product(ref, max_retries=3, retry_base_delay=0)

        assert result.status == ProductRunStatus.SKIPPED
        assert result.reason == "scraped price was 0"
        assert result.attempts == 1
        assert fake_scraper.calls_for(ref.url) == 1

        product = await storage.get_product(ref.id)
        assert product.total_checks == 0
        assert await storage.count_history(ref.id) == 0

    @pytest.mark.asyncio
    async def test_site_nao_suportado_sem_retry(self, runner, storage, sleep_recorder):
        product = await storage.create_product(
            Product(name="Outro", url="https://other.example/p/1", source="other.example")
        )
        ref = next(r for r in await storage.list_active_products() if r.id == product.id)

        result = await runner.process_product(ref, max_retries=3, retry_base_delay=1.0)

        assert result.status == ProductRunStatus.FAILED
        assert result.attempts == 1
        assert "shop" in result.error
        assert sleep_recorder.calls == []

    @pytest.mark.asyncio
    async def test_url_invalida_sem_retry(self, runner, sleep_recorder):
        ref = ProductRef(id=uuid4(), name="Quebrado", url="nao-e-url", source="unknown")

        result = await runner.process_product(ref, max_retries=3, retry_base_delay=1.0)

        assert result.status == ProductRunStatus.FAILED
        assert result.attempts == 1
        assert sleep_recorder.calls == []

    @pytest.mark.asyncio
    async def test_erro_inesperado_nao_e_repetido(self, runner, ref, fake_scraper):
        fake_scraper.set(ref.url, RuntimeError("bug no scraper"))

        result = await runner.process_product(ref, max_retries=3, retry_base_delay=0)

        assert result.status == ProductRunStatus.FAILED
        assert result.attempts == 1
        assert result.error == "bug no scraper"

    @pytest.mark.asyncio
    async def test_produto_removido_vira_falha(self, runner, ref, storage, watchdog, monkeypatch):
        async def missing(product_id):
            return None

        monkeypatch.setattr(storage, "get_product", missing)

        result = await runner.process_product(ref, max_retries=3, retry_base_delay=0)

        assert result.status == ProductRunStatus.FAILED
        assert result.error == "Product not found"
