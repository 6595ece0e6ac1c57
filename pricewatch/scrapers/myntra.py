"""
Scraper para Myntra.
https://www.myntra.com

Estrutura da página:
- Marca: <h1 class="pdp-title">
- Nome: <h1 class="pdp-name">
- Preço: <span class="pdp-price"><strong>₹1299</strong></span>
"""

from playwright.async_api import Page

from config.sites import MYNTRA_CONFIG
from pricewatch.scrapers.base import BaseScraper


class MyntraScraper(BaseScraper):
    """Scraper para Myntra. Título = marca + nome do produto."""

    def __init__(self, config=None):
        super().__init__(config or MYNTRA_CONFIG)

    async def extract_title(self, page: Page) -> str:
        brand = await self._safe_get_text(page, ".pdp-title")
        name = await self._safe_get_text(page, ".pdp-name")
        return f"{brand} {name}".strip()
