"""
Configurações e fixtures compartilhadas para pytest.
"""

from pathlib import Path
from typing import Callable, Union

import pytest
import pytest_asyncio

from config.settings import Settings
from pricewatch.core.exceptions import NetworkError
from pricewatch.core.models import ScrapedData
from pricewatch.scrapers.resolver import ScraperResolver
from pricewatch.services import ProductService, WatchdogService
from pricewatch.storage import SQLiteStorage


# FIXTURES DE DIRETÓRIOS

@pytest.fixture
def temp_data_dir(tmp_path) -> Path:
    """Cria diretório temporário para dados de teste."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def temp_log_dir(tmp_path) -> Path:
    """Cria diretório temporário para logs de teste."""
    log_dir = tmp_path / "logs"
    log_dir.mkdir()
    return log_dir


# FIXTURES DE CONFIGURAÇÃO

@pytest.fixture
def settings(temp_data_dir, temp_log_dir) -> Settings:
    """Configurações de teste: sem esperas reais entre lotes e tentativas."""
    return Settings(
        env="testing",
        data_path=temp_data_dir,
        log_path=temp_log_dir,
        batch_size=50,
        batch_delay=0,
        manual_batch_size=5,
        manual_batch_delay=0,
        max_retries=3,
        retry_base_delay=0,
    )


# FIXTURES DE STORAGE E SERVIÇOS

@pytest_asyncio.fixture
async def storage(temp_data_dir) -> SQLiteStorage:
    """Instância do storage SQLite em diretório temporário."""
    return SQLiteStorage(temp_data_dir, db_name="test.db")


@pytest.fixture
def watchdog(storage) -> WatchdogService:
    return WatchdogService(storage)


@pytest.fixture
def product_service(storage) -> ProductService:
    return ProductService(storage)


# SCRAPERS FALSOS

Outcome = Union[ScrapedData, Exception]


class FakeScraper:
    """
    Scraper sem browser.

    Cada URL tem uma sequência de resultados (ScrapedData ou exceção);
    o último resultado se repete quando a sequência acaba.
    """

    def __init__(self, outcomes: dict[str, list[Outcome]] = None, default: Outcome = None):
        self.outcomes = outcomes or {}
        self.default = default or ScrapedData(title="Produto", price="₹ 100", availability="In stock")
        self.calls: list[str] = []

    def set(self, url: str, *outcomes: Outcome) -> None:
        self.outcomes[url] = list(outcomes)

    async def scrape(self, url: str) -> ScrapedData:
        self.calls.append(url)
        sequence = self.outcomes.get(url)
        if not sequence:
            outcome = self.default
        elif len(sequence) > 1:
            outcome = sequence.pop(0)
        else:
            outcome = sequence[0]

        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def calls_for(self, url: str) -> int:
        return self.calls.count(url)


@pytest.fixture
def fake_scraper() -> FakeScraper:
    return FakeScraper()


@pytest.fixture
def resolver(fake_scraper) -> ScraperResolver:
    """Resolver que atende "shop" e "store" com o scraper falso."""
    return ScraperResolver(registry=[
        (["shop", "store"], lambda: fake_scraper),
    ])


@pytest.fixture
def network_error() -> Callable[[], NetworkError]:
    return lambda: NetworkError("connection reset", site="Shop")


# FIXTURES DE ESPERA

class SleepRecorder:
    """Substitui asyncio.sleep registrando as esperas pedidas."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()
