"""
Scraper para Amazon India.
https://www.amazon.in

Estrutura da página:
- Título: <span id="productTitle">
- Preço: <span class="a-price-whole">1,999</span><span class="a-price-fraction">00</span>
- Disponibilidade: <div id="availability"><span>In stock</span></div>
"""

from playwright.async_api import Page

from config.sites import AMAZON_CONFIG
from pricewatch.pipeline.cleaners import clean_price
from pricewatch.scrapers.base import BaseScraper


class AmazonScraper(BaseScraper):
    """Scraper para Amazon. Preço montado a partir das partes inteira e decimal."""

    def __init__(self, config=None):
        super().__init__(config or AMAZON_CONFIG)

    async def extract_price(self, page: Page) -> float:
        whole = await self._safe_get_text(page, ".a-price .a-price-whole")
        if whole:
            digits = "".join(ch for ch in whole if ch.isdigit())
            fraction = await self._safe_get_text(page, ".a-price .a-price-fraction")
            fraction = "".join(ch for ch in fraction if ch.isdigit())
            if digits:
                return clean_price(f"{digits}.{fraction or '0'}")

        return await super().extract_price(page)
