"""
Testes unitários para o ScraperResolver.
"""

import pytest

from pricewatch.core.exceptions import InvalidURLError, UnsupportedSiteError
from pricewatch.core.models import ScrapedData
from pricewatch.scrapers import (
    SCRAPER_REGISTRY,
    AjioScraper,
    AmazonScraper,
    FlipkartScraper,
    MeeshoScraper,
    MyntraScraper,
    NykaaScraper,
    ScraperResolver,
    SnapdealScraper,
)


class StubScraper:
    """Scraper mínimo que devolve sempre o mesmo resultado."""

    def __init__(self, label: str):
        self.label = label

    async def scrape(self, url: str) -> ScrapedData:
        return ScrapedData(title=self.label, price="₹ 10", availability=True)


class TestDefaultRegistry:
    """Testes com o registro padrão (sem abrir browser)."""

    @pytest.fixture
    def resolver(self) -> ScraperResolver:
        return ScraperResolver()

    @pytest.mark.parametrize("url,expected", [
        ("https://www.amazon.in/dp/B0CHX1W1XY", AmazonScraper),
        ("https://amazon.com/gp/product/123", AmazonScraper),
        ("https://www.flipkart.com/apple-iphone/p/itm123", FlipkartScraper),
        ("https://dl.flipkart.com/s/abc", FlipkartScraper),
        ("https://www.myntra.com/shirts/roadster/123/buy", MyntraScraper),
        ("https://www.ajio.com/p/469", AjioScraper),
        ("https://www.meesho.com/saree/p/2x", MeeshoScraper),
        ("https://www.nykaa.com/lakme/p/123", NykaaScraper),
        ("https://www.snapdeal.com/product/x/123", SnapdealScraper),
        ("HTTPS://WWW.AMAZON.IN/dp/X", AmazonScraper),
    ])
    def test_resolve_por_hostname(self, resolver, url, expected):
        assert isinstance(resolver.resolve(url), expected)

    def test_supported_sites_na_ordem_do_registro(self, resolver):
        assert resolver.supported_sites() == [
            "amazon", "flipkart", "myntra", "ajio", "meesho", "nykaa", "snapdeal",
        ]

    def test_registro_padrao_tem_sete_sites(self):
        assert len(SCRAPER_REGISTRY) == 7

    def test_instancia_reaproveitada(self, resolver):
        first = resolver.resolve("https://www.amazon.in/dp/1")
        second = resolver.resolve("https://www.amazon.in/dp/2")
        assert first is second

    def test_site_nao_suportado(self, resolver):
        with pytest.raises(UnsupportedSiteError) as exc_info:
            resolver.resolve("https://www.example.com/product/1")

        error = exc_info.value
        assert error.hostname == "www.example.com"
        assert error.supported_sites == resolver.supported_sites()
        for site in resolver.supported_sites():
            assert site in error.message

    @pytest.mark.parametrize("url", ["", "not a url", "amazon.in/dp/123", "https://", None])
    def test_url_invalida(self, resolver, url):
        with pytest.raises(InvalidURLError):
            resolver.resolve(url)


class TestCustomRegistry:
    """Testes com registro injetado."""

    def test_primeira_entrada_vence(self):
        resolver = ScraperResolver(registry=[
            (["shop"], lambda: StubScraper("primeiro")),
            (["shopping", "shop"], lambda: StubScraper("segundo")),
        ])

        scraper = resolver.resolve("https://www.shopping.example/item")
        assert scraper.label == "primeiro"

    def test_criacao_sob_demanda(self):
        created = []

        def factory():
            created.append(1)
            return StubScraper("lazy")

        resolver = ScraperResolver(registry=[(["shop"], factory)])
        assert created == []

        resolver.resolve("https://shop.example/1")
        resolver.resolve("https://shop.example/2")
        assert created == [1]

    def test_mensagem_lista_todas_as_palavras_chave(self):
        resolver = ScraperResolver(registry=[
            (["shop", "store"], lambda: StubScraper("a")),
            (["market"], lambda: StubScraper("b")),
        ])

        with pytest.raises(UnsupportedSiteError) as exc_info:
            resolver.resolve("https://example.org/")

        assert exc_info.value.supported_sites == ["shop", "store", "market"]
        assert "shop, store, market" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_scrape_delega_ao_scraper(self):
        resolver = ScraperResolver(registry=[(["shop"], lambda: StubScraper("delegado"))])

        data = await resolver.scrape("https://shop.example/item")

        assert data.title == "delegado"
        assert data.price == "₹ 10"
