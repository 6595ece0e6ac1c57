"""
Módulo de pipeline: limpeza dos dados brutos extraídos pelos scrapers.
"""

from pricewatch.pipeline.cleaners import (
    clean_price,
    detect_currency,
    clean_availability,
    clean_availability_detailed,
    clean_title,
    extract_source,
    truncate,
)

__all__ = [
    "clean_price",
    "detect_currency",
    "clean_availability",
    "clean_availability_detailed",
    "clean_title",
    "extract_source",
    "truncate",
]
