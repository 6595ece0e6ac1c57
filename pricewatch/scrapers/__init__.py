"""
Módulo de scrapers: extração de título, preço e disponibilidade.
Arquitetura em plugins - cada site tem seu scraper.
"""

from config.sites import (
    AJIO_CONFIG,
    AMAZON_CONFIG,
    FLIPKART_CONFIG,
    MEESHO_CONFIG,
    MYNTRA_CONFIG,
    NYKAA_CONFIG,
    SNAPDEAL_CONFIG,
)
from pricewatch.scrapers.base import BaseScraper
from pricewatch.scrapers.amazon import AmazonScraper
from pricewatch.scrapers.flipkart import FlipkartScraper
from pricewatch.scrapers.myntra import MyntraScraper
from pricewatch.scrapers.ajio import AjioScraper
from pricewatch.scrapers.meesho import MeeshoScraper
from pricewatch.scrapers.nykaa import NykaaScraper
from pricewatch.scrapers.snapdeal import SnapdealScraper
from pricewatch.scrapers.resolver import RegistryEntry, ScraperResolver

# Registro ordenado: a primeira entrada cujo keyword está no hostname vence
SCRAPER_REGISTRY: list[RegistryEntry] = [
    (AMAZON_CONFIG.keywords, AmazonScraper),
    (FLIPKART_CONFIG.keywords, FlipkartScraper),
    (MYNTRA_CONFIG.keywords, MyntraScraper),
    (AJIO_CONFIG.keywords, AjioScraper),
    (MEESHO_CONFIG.keywords, MeeshoScraper),
    (NYKAA_CONFIG.keywords, NykaaScraper),
    (SNAPDEAL_CONFIG.keywords, SnapdealScraper),
]

__all__ = [
    "BaseScraper",
    "ScraperResolver",
    "AmazonScraper",
    "FlipkartScraper",
    "MyntraScraper",
    "AjioScraper",
    "MeeshoScraper",
    "NykaaScraper",
    "SnapdealScraper",
    "SCRAPER_REGISTRY",
]
