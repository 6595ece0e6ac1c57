"""
Constantes e padrões regex para limpeza de dados extraídos.
"""

import re
from typing import Final

# =============================================================================
# PREÇO
# =============================================================================

# Símbolos e rótulos removidos do texto de preço.
# Rótulos mais longos vêm antes para que "Our Price" não vire "Our ".
CURRENCY_LABELS: Final[list[str]] = [
    "Our Price",
    "Deal Price",
    "Price",
    "MRP",
    "INR",
    "USD",
    "Rs.",
    "Rs",
    "₹",
    "$",
    "€",
    "£",
    "¥",
]

CURRENCY_LABEL_PATTERN: Final[re.Pattern] = re.compile(
    "|".join(re.escape(label) for label in CURRENCY_LABELS),
    re.IGNORECASE,
)

# Marcador "/-" no fim de preços indianos (ex: "999/-")
TRAILING_DASH_PATTERN: Final[re.Pattern] = re.compile(r"/-\s*$")

# Primeiro número decimal do texto
PRICE_NUMBER_PATTERN: Final[re.Pattern] = re.compile(r"(\d+\.?\d*)")

# Moeda detectada por símbolo ou código
CURRENCY_MARKERS: Final[list[tuple[tuple[str, ...], str]]] = [
    (("$", "USD"), "USD"),
    (("€", "EUR"), "EUR"),
    (("£", "GBP"), "GBP"),
    (("¥", "JPY"), "JPY"),
]

DEFAULT_CURRENCY: Final[str] = "INR"


# =============================================================================
# DISPONIBILIDADE
# =============================================================================

# Verificadas primeiro: têm prioridade sobre as frases de disponível
UNAVAILABLE_PHRASES: Final[list[str]] = [
    "out of stock",
    "sold out",
    "currently unavailable",
    "temporarily unavailable",
    "not available",
    "unavailable",
    "coming soon",
    "notify me",
    "notify when available",
    "no longer available",
    "discontinued",
    "pre-order",
    "preorder",
    "out of print",
    "check availability",
]

AVAILABLE_PHRASES: Final[list[str]] = [
    "in stock",
    "available",
    "add to cart",
    "add to bag",
    "buy now",
    "left in stock",
    "ships from",
    "delivered by",
    "dispatch",
    "ready to ship",
]


# =============================================================================
# TEXTO
# =============================================================================

WHITESPACE_PATTERN: Final[re.Pattern] = re.compile(r"\s+")

TITLE_PLACEHOLDER: Final[str] = "N/A"

UNKNOWN_SOURCE: Final[str] = "unknown"
