"""
Módulo de serviços: watchdog de preços e cadastro de produtos.
"""

from pricewatch.services.watchdog import (
    WatchdogService,
    calc_percentage_change,
    calc_running_average,
    compare_price,
    round_money,
)
from pricewatch.services.products import ProductService, validate_url

__all__ = [
    "WatchdogService",
    "ProductService",
    "compare_price",
    "calc_percentage_change",
    "calc_running_average",
    "round_money",
    "validate_url",
]
