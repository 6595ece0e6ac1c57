"""
Scraper para Flipkart.
https://www.flipkart.com

Os nomes de classe do Flipkart são gerados e mudam com frequência;
quando nenhum seletor de título funciona, usa o <title> da página
("Nome do Produto - Buy ... Online at Best Price").
"""

from config.sites import FLIPKART_CONFIG
from pricewatch.scrapers.base import BaseScraper


class FlipkartScraper(BaseScraper):
    """Scraper para Flipkart."""

    def __init__(self, config=None):
        super().__init__(config or FLIPKART_CONFIG)

    def fallback_title(self, page_title: str) -> str:
        return (page_title or "").split("-")[0].strip()
