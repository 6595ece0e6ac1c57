"""
Módulo core: modelos de dados, exceções, tipos e constantes.
"""

from pricewatch.core.models import (
    Product,
    PriceHistoryEntry,
    ScrapedData,
    WatchdogResult,
    WatchdogSummary,
    ProductResult,
    JobSummary,
    JobRunReport,
    RunRecord,
    GuardStatus,
)
from pricewatch.core.exceptions import (
    PriceWatchError,
    InvalidURLError,
    UnsupportedSiteError,
    ScrapeError,
    NetworkError,
    ScrapeTimeoutError,
    BlockedError,
    ZeroPriceSkip,
    NotFoundError,
    DuplicateProductError,
    StorageError,
)
from pricewatch.core.types import (
    PriceStatus,
    ProductRunStatus,
    RunTrigger,
)

__all__ = [
    # Models
    "Product",
    "PriceHistoryEntry",
    "ScrapedData",
    "WatchdogResult",
    "WatchdogSummary",
    "ProductResult",
    "JobSummary",
    "JobRunReport",
    "RunRecord",
    "GuardStatus",
    # Exceptions
    "PriceWatchError",
    "InvalidURLError",
    "UnsupportedSiteError",
    "ScrapeError",
    "NetworkError",
    "ScrapeTimeoutError",
    "BlockedError",
    "ZeroPriceSkip",
    "NotFoundError",
    "DuplicateProductError",
    "StorageError",
    # Types
    "PriceStatus",
    "ProductRunStatus",
    "RunTrigger",
]
