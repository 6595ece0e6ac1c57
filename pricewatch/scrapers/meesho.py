"""
Scraper para Meesho.
https://www.meesho.com

A página não tem classes estáveis para o preço: ele é o primeiro <h4>
curto que começa com "₹".
"""

from playwright.async_api import Page

from config.sites import MEESHO_CONFIG
from pricewatch.pipeline.cleaners import clean_price
from pricewatch.scrapers.base import BaseScraper


class MeeshoScraper(BaseScraper):
    """Scraper para Meesho."""

    # Textos maiores que isso não são um preço isolado
    MAX_PRICE_TEXT_LENGTH = 20

    def __init__(self, config=None):
        super().__init__(config or MEESHO_CONFIG)

    async def extract_price(self, page: Page) -> float:
        for text in await self._safe_get_all_texts(page, self.selectors.price):
            if text.startswith("₹") and len(text) < self.MAX_PRICE_TEXT_LENGTH:
                return clean_price(text)
        return 0.0
