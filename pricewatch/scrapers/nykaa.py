"""
Scraper para Nykaa.
https://www.nykaa.com

Nykaa publica JSON-LD Product completo; os seletores são só fallback.
"""

from config.sites import NYKAA_CONFIG
from pricewatch.scrapers.base import BaseScraper


class NykaaScraper(BaseScraper):
    """Scraper para Nykaa."""

    def __init__(self, config=None):
        super().__init__(config or NYKAA_CONFIG)
