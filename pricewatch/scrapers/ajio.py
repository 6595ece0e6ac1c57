"""
Scraper para Ajio.
https://www.ajio.com

Estrutura da página:
- Marca: <h2 class="brand-name"> ou <div class="prod-name">
- Descrição: <h1 class="prod-name"> / <div class="prod-desc">
- Preço: <div class="prod-sp">₹899</div>
"""

from playwright.async_api import Page

from config.sites import AJIO_CONFIG
from pricewatch.scrapers.base import BaseScraper


class AjioScraper(BaseScraper):
    """Scraper para Ajio."""

    def __init__(self, config=None):
        super().__init__(config or AJIO_CONFIG)

    async def extract_title(self, page: Page) -> str:
        brand = await self._safe_get_text(page, ".prod-name")
        desc = await self._safe_get_text(page, ".prod-desc")
        title = f"{brand} {desc}".strip()
        if title:
            return title
        return await self._safe_get_text(page, "h1")
