"""
Configuração dos sites suportados.
Define palavras-chave de hostname, seletores CSS e marcadores de bloqueio de cada site.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class SiteStatus(str, Enum):
    """Status de um site."""
    ACTIVE = "active"
    DEVELOPMENT = "development"
    DISABLED = "disabled"


@dataclass
class SiteSelectors:
    """
    Seletores CSS para extração de dados da página de produto.
    Múltiplos seletores separados por vírgula são tentados em ordem.
    """

    # Seletor aguardado após a navegação
    wait_for: str = ""

    # Dados do produto
    title: str = ""
    price: str = ""

    # Disponibilidade: texto do elemento passa por clean_availability
    availability: str = ""
    # Presença do elemento já indica produto esgotado
    sold_out: str = ""


@dataclass
class SiteConfig:
    """Configuração completa de um site."""

    id: str
    display_name: str
    base_url: str

    # Palavras-chave procuradas no hostname (a primeira identifica o site)
    keywords: list[str] = field(default_factory=list)

    status: SiteStatus = SiteStatus.ACTIVE

    # Seletores CSS
    selectors: SiteSelectors = field(default_factory=SiteSelectors)

    # Trechos do <title> que indicam página de bloqueio
    block_title_markers: list[str] = field(default_factory=list)

    # Procura "sold out" no texto inteiro da página
    scan_body_for_sold_out: bool = False

    # Header Referer enviado na navegação
    referer: Optional[str] = None

    currency: str = "INR"


# =============================================================================
# AMAZON
# =============================================================================

AMAZON_CONFIG = SiteConfig(
    id="amazon",
    display_name="Amazon",
    base_url="https://www.amazon.in",
    keywords=["amazon"],
    selectors=SiteSelectors(
        wait_for="#corePriceDisplay_desktop_feature_div, #corePrice_feature_div, .a-price",
        title="#productTitle",
        price=".a-price .a-offscreen, #priceblock_dealprice, #priceblock_ourprice",
        availability="#availability",
    ),
    block_title_markers=["Robot Check", "CAPTCHA"],
    referer="https://www.amazon.in/",
)


# =============================================================================
# FLIPKART
# =============================================================================

FLIPKART_CONFIG = SiteConfig(
    id="flipkart",
    display_name="Flipkart",
    base_url="https://www.flipkart.com",
    keywords=["flipkart"],
    selectors=SiteSelectors(
        wait_for="div.Nx9bqj.CxhGGd, div._30jeq3._16Jk6d, div._30jeq3",
        title="span.VU-ZEz, h1.yhB1nd span",
        price="div.Nx9bqj.CxhGGd, div._30jeq3._16Jk6d, div._30jeq3",
        availability="div._16FRp0, .sold-out-err-text",
    ),
    block_title_markers=["Something is wrong", "reCAPTCHA", "Login"],
    referer="https://www.google.com/",
)


# =============================================================================
# MYNTRA
# =============================================================================

MYNTRA_CONFIG = SiteConfig(
    id="myntra",
    display_name="Myntra",
    base_url="https://www.myntra.com",
    keywords=["myntra"],
    selectors=SiteSelectors(
        wait_for=".pdp-price",
        title=".pdp-title",
        price=".pdp-price strong, .pdp-price",
        sold_out=".pdp-add-to-bag.pdp-out-of-stock",
    ),
    scan_body_for_sold_out=True,
    block_title_markers=["Access Denied"],
)


# =============================================================================
# AJIO
# =============================================================================

AJIO_CONFIG = SiteConfig(
    id="ajio",
    display_name="Ajio",
    base_url="https://www.ajio.com",
    keywords=["ajio"],
    selectors=SiteSelectors(
        wait_for=".prod-price-section",
        title=".prod-name",
        price=".prod-sp, .prod-price-section span",
        sold_out=".btn-gold[disabled]",
    ),
    scan_body_for_sold_out=True,
    block_title_markers=["Access Denied"],
)


# =============================================================================
# MEESHO
# =============================================================================

MEESHO_CONFIG = SiteConfig(
    id="meesho",
    display_name="Meesho",
    base_url="https://www.meesho.com",
    keywords=["meesho"],
    selectors=SiteSelectors(
        wait_for="div[class*='ProductDescription']",
        title="h4[class*='ProductListingTitle'], h1",
        price="h4",
        availability="button",
    ),
    block_title_markers=["Access Denied"],
)


# =============================================================================
# NYKAA
# =============================================================================

NYKAA_CONFIG = SiteConfig(
    id="nykaa",
    display_name="Nykaa",
    base_url="https://www.nykaa.com",
    keywords=["nykaa"],
    selectors=SiteSelectors(
        wait_for="h1",
        title="h1",
        price="span.css-1jczs19, .css-1e492kkw",
        availability="button",
    ),
    block_title_markers=["Access Denied"],
)


# =============================================================================
# SNAPDEAL
# =============================================================================

SNAPDEAL_CONFIG = SiteConfig(
    id="snapdeal",
    display_name="Snapdeal",
    base_url="https://www.snapdeal.com",
    keywords=["snapdeal"],
    selectors=SiteSelectors(
        wait_for=".pdp-e-i-PAY-r",
        title="h1.pdp-e-i-head",
        price=".payBlkBig, .pdp-e-i-PAY-r",
        sold_out=".sold-out-err",
    ),
    block_title_markers=["Access Denied"],
)


# =============================================================================
# REGISTRO
# =============================================================================

# A ordem define o desempate na resolução por hostname
SITES_CONFIG: dict[str, SiteConfig] = {
    "amazon": AMAZON_CONFIG,
    "flipkart": FLIPKART_CONFIG,
    "myntra": MYNTRA_CONFIG,
    "ajio": AJIO_CONFIG,
    "meesho": MEESHO_CONFIG,
    "nykaa": NYKAA_CONFIG,
    "snapdeal": SNAPDEAL_CONFIG,
}


def get_site_config(site_id: str) -> Optional[SiteConfig]:
    """Retorna configuração de um site."""
    return SITES_CONFIG.get(site_id)
