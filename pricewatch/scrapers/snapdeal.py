"""
Scraper para Snapdeal.
https://www.snapdeal.com

O aviso <div class="sold-out-err"> existe em todas as páginas de produto,
escondido quando há estoque: só conta como esgotado se estiver visível.
"""

from playwright.async_api import Page

from config.sites import SNAPDEAL_CONFIG
from pricewatch.scrapers.base import BaseScraper


class SnapdealScraper(BaseScraper):
    """Scraper para Snapdeal."""

    def __init__(self, config=None):
        super().__init__(config or SNAPDEAL_CONFIG)

    async def extract_availability(self, page: Page, content: str) -> bool:
        marker = await self._safe_query(page, self.selectors.sold_out)
        if marker is not None and await marker.is_visible():
            return False
        return True
