"""
Resolução de URL para scraper.
Percorre o registro ordenado de (palavras-chave -> scraper) procurando
a primeira palavra-chave contida no hostname.
"""

from typing import Callable, Optional, Sequence
from urllib.parse import urlparse

from config.logging_config import LoggerMixin
from pricewatch.core.exceptions import InvalidURLError, UnsupportedSiteError
from pricewatch.core.models import ScrapedData
from pricewatch.scrapers.base import BaseScraper

# Entrada do registro: palavras-chave e fábrica do scraper
RegistryEntry = tuple[Sequence[str], Callable[[], BaseScraper]]


class ScraperResolver(LoggerMixin):
    """
    Escolhe o scraper de uma URL pelo hostname.

    Instâncias de scraper são criadas sob demanda e reaproveitadas
    durante a vida do resolver.
    """

    def __init__(self, registry: Optional[Sequence[RegistryEntry]] = None):
        """
        Args:
            registry: Registro ordenado; padrão é SCRAPER_REGISTRY
        """
        if registry is None:
            from pricewatch.scrapers import SCRAPER_REGISTRY
            registry = SCRAPER_REGISTRY
        self._registry = list(registry)
        self._scrapers: dict[int, BaseScraper] = {}

    def supported_sites(self) -> list[str]:
        """Primeira palavra-chave de cada entrada, na ordem do registro."""
        return [keywords[0] for keywords, _ in self._registry if keywords]

    def _all_keywords(self) -> list[str]:
        return [kw for keywords, _ in self._registry for kw in keywords]

    def resolve(self, url: str) -> BaseScraper:
        """
        Retorna o scraper responsável pela URL.

        Raises:
            InvalidURLError: URL sem hostname ou impossível de interpretar
            UnsupportedSiteError: Nenhuma palavra-chave contida no hostname
        """
        try:
            hostname = urlparse((url or "").strip()).hostname
        except ValueError as e:
            raise InvalidURLError(url, cause=e) from e

        if not hostname:
            raise InvalidURLError(url)

        hostname = hostname.lower()

        for index, (keywords, factory) in enumerate(self._registry):
            if any(kw in hostname for kw in keywords):
                if index not in self._scrapers:
                    self._scrapers[index] = factory()
                return self._scrapers[index]

        self.logger.debug("Site não suportado", hostname=hostname)
        raise UnsupportedSiteError(hostname, self._all_keywords())

    async def scrape(self, url: str) -> ScrapedData:
        """Resolve e executa o scraper da URL."""
        return await self.resolve(url).scrape(url)
