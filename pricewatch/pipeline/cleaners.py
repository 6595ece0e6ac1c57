"""
Funções de limpeza dos dados extraídos pelos scrapers.
Convertem texto livre de preço, disponibilidade e título em tipos canônicos.

Todas são puras e totais: nunca levantam exceção para entradas inesperadas.
"""

import math
from typing import Any, Optional
from urllib.parse import urlparse

from pricewatch.core.constants import (
    AVAILABLE_PHRASES,
    CURRENCY_LABEL_PATTERN,
    CURRENCY_MARKERS,
    DEFAULT_CURRENCY,
    PRICE_NUMBER_PATTERN,
    TITLE_PLACEHOLDER,
    TRAILING_DASH_PATTERN,
    UNAVAILABLE_PHRASES,
    UNKNOWN_SOURCE,
    WHITESPACE_PATTERN,
)


# =============================================================================
# PREÇO
# =============================================================================

def _strip_currency_labels(raw: str) -> str:
    """Remove símbolos de moeda, rótulos, o marcador "/-" e dois-pontos."""
    cleaned = CURRENCY_LABEL_PATTERN.sub("", raw)
    cleaned = TRAILING_DASH_PATTERN.sub("", cleaned)
    return cleaned.replace(":", "").strip()


def clean_price(raw: Any) -> float:
    """
    Converte qualquer representação de preço em número.

    Exemplos:
        "₹ 1,999"          -> 1999.0
        "Rs. 12,34,999.50" -> 1234999.5
        "MRP: ₹1,299"      -> 1299.0
        "Price: 999/-"     -> 999.0
        29.99              -> 29.99
        inf / nan          -> 0.0
        "" / None          -> 0.0

    Args:
        raw: Número ou texto extraído da página

    Returns:
        Preço numérico, ou 0.0 se não for possível interpretar
    """
    if isinstance(raw, bool):
        return 0.0

    if isinstance(raw, (int, float)):
        return float(raw) if math.isfinite(raw) else 0.0

    if not raw or not isinstance(raw, str):
        return 0.0

    cleaned = raw.strip()
    if not cleaned:
        return 0.0

    cleaned = _strip_currency_labels(cleaned)

    # Vírgulas são só separadores de agrupamento (12,34,999 ou 123,999)
    cleaned = cleaned.replace(",", "")

    match = PRICE_NUMBER_PATTERN.search(cleaned)
    if not match:
        return 0.0

    try:
        return float(match.group(1))
    except ValueError:
        return 0.0


def detect_currency(raw: Any) -> str:
    """
    Detecta o código da moeda a partir do texto de preço.
    ₹, Rs, INR ou ausência de símbolo resultam em INR.
    """
    if not raw or not isinstance(raw, str):
        return DEFAULT_CURRENCY

    text = raw.strip().upper()

    for markers, code in CURRENCY_MARKERS:
        if any(marker in text for marker in markers):
            return code

    return DEFAULT_CURRENCY


# =============================================================================
# DISPONIBILIDADE
# =============================================================================

def clean_availability(raw: Any) -> bool:
    """
    Converte texto de disponibilidade em booleano.

    Frases de indisponibilidade são verificadas antes das de disponibilidade.
    Texto não reconhecido resulta em True: o scraper obteve algum conteúdo.

    Args:
        raw: Booleano ou texto extraído da página

    Returns:
        True se o produto parece disponível
    """
    if isinstance(raw, bool):
        return raw

    if not raw or not isinstance(raw, str):
        return False

    text = raw.strip().lower()
    if not text:
        return False

    for phrase in UNAVAILABLE_PHRASES:
        if phrase in text:
            return False

    for phrase in AVAILABLE_PHRASES:
        if phrase in text:
            return True

    return True


def clean_availability_detailed(raw: Any) -> dict[str, Any]:
    """
    Versão detalhada de clean_availability.

    Returns:
        Dicionário com available, label ("In Stock"/"Out of Stock")
        e original_text (texto de entrada ou "Unknown")
    """
    available = clean_availability(raw)

    original_text = "Unknown"
    if isinstance(raw, str) and raw.strip():
        original_text = raw.strip()
    elif isinstance(raw, bool):
        original_text = "In Stock" if raw else "Out of Stock"

    return {
        "available": available,
        "label": "In Stock" if available else "Out of Stock",
        "original_text": original_text,
    }


# =============================================================================
# TEXTO
# =============================================================================

def clean_title(raw: Any) -> str:
    """Colapsa espaços (incluindo tabs e quebras de linha) e remove bordas."""
    if not raw or not isinstance(raw, str):
        return TITLE_PLACEHOLDER

    cleaned = WHITESPACE_PATTERN.sub(" ", raw).strip()
    return cleaned or TITLE_PLACEHOLDER


def extract_source(url: Optional[str]) -> str:
    """Extrai o hostname da URL sem o prefixo www."""
    if not url:
        return UNKNOWN_SOURCE

    try:
        hostname = urlparse(url.strip()).hostname
    except ValueError:
        return UNKNOWN_SOURCE

    if not hostname:
        return UNKNOWN_SOURCE

    hostname = hostname.lower()
    if hostname.startswith("www."):
        hostname = hostname[4:]
    return hostname


def truncate(text: Optional[str], max_length: int = 200) -> str:
    """Trunca texto adicionando reticências quando necessário."""
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return text[:max_length].strip() + "…"
