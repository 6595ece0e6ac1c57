"""
Classe base para scrapers de páginas de produto.
Cada chamada de scrape abre e fecha seu próprio browser, permitindo
chamadas concorrentes sobre a mesma instância.
"""

import asyncio
import random
from abc import ABC
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from playwright.async_api import (
    async_playwright,
    Error as PlaywrightError,
    Page,
    Route,
    TimeoutError as PlaywrightTimeout,
)

from config.logging_config import LoggerMixin
from config.settings import get_settings
from config.sites import SiteConfig, SiteSelectors
from pricewatch.core.exceptions import (
    BlockedError,
    NetworkError,
    ScrapeError,
    ScrapeTimeoutError,
)
from pricewatch.core.models import ScrapedData
from pricewatch.pipeline.cleaners import clean_availability, clean_price, clean_title
from pricewatch.scrapers.structured import (
    StructuredProduct,
    merge_structured,
    parse_json_ld,
    parse_meta_tags,
)


class BaseScraper(ABC, LoggerMixin):
    """
    Classe base abstrata para todos os scrapers de sites.

    Contrato: scrape(url) -> ScrapedData(title, price, availability).
    Conteúdo "não encontrado" resulta em preço 0; falhas de rede, timeout,
    bloqueio ou resposta inválida levantam ScrapeError. Não há retry aqui.
    """

    # User agents reais para rotação
    USER_AGENTS = [
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    ]

    # Indicadores de bloqueio no corpo da página
    BLOCK_INDICATORS = {
        "captcha": ["captcha", "recaptcha", "hcaptcha"],
        "cloudflare_challenge": ["checking your browser", "ddos protection by"],
        "access_denied": ["access denied", "403 forbidden"],
        "rate_limit": ["too many requests"],
        "bot_detection": ["are you a robot", "bot detected", "unusual traffic"],
    }

    # Recursos pesados bloqueados durante a navegação
    BLOCKED_RESOURCE_TYPES = frozenset({"image", "stylesheet", "font", "media"})

    def __init__(self, config: SiteConfig):
        """
        Inicializa o scraper.

        Args:
            config: Configuração do site
        """
        self.config = config
        self.settings = get_settings()

    @property
    def site_id(self) -> str:
        """ID do site."""
        return self.config.id

    @property
    def name(self) -> str:
        """Nome de exibição do site."""
        return self.config.display_name

    @property
    def selectors(self) -> SiteSelectors:
        """Seletores CSS do site."""
        return self.config.selectors

    @property
    def keywords(self) -> list[str]:
        """Palavras-chave de hostname atendidas por este scraper."""
        return self.config.keywords

    # MÉTODO PRINCIPAL

    async def scrape(self, url: str) -> ScrapedData:
        """
        Extrai título, preço e disponibilidade de uma página de produto.

        Args:
            url: URL da página de produto

        Returns:
            ScrapedData com os valores encontrados

        Raises:
            ScrapeError: Falha de rede, timeout, bloqueio ou resposta inválida
        """
        self.logger.debug("Iniciando scraping", site=self.site_id, url=url)

        total_timeout = self.settings.scrape_timeout + self.settings.selector_timeout

        try:
            async with self._open_page() as page:
                data = await asyncio.wait_for(
                    self._scrape_page(page, url),
                    timeout=total_timeout,
                )

        except ScrapeError:
            raise

        except (PlaywrightTimeout, asyncio.TimeoutError) as e:
            raise ScrapeTimeoutError(
                f"[{self.name}] Tempo limite excedido",
                site=self.name,
                url=url,
                timeout_seconds=total_timeout,
                cause=e,
            ) from e

        except PlaywrightError as e:
            raise NetworkError(
                f"[{self.name}] Falha ao carregar página",
                site=self.name,
                url=url,
                cause=e,
            ) from e

        except Exception as e:
            raise ScrapeError(
                f"[{self.name}] Failed to scrape: {e}",
                site=self.name,
                url=url,
                cause=e,
            ) from e

        self.logger.debug(
            "Scraping concluído",
            site=self.site_id,
            price=data.price,
            available=data.availability,
        )

        return data

    async def _scrape_page(self, page: Page, url: str) -> ScrapedData:
        """Navega até a URL, valida a resposta e extrai os dados."""
        response = await page.goto(
            url,
            wait_until="domcontentloaded",
            timeout=self.settings.scrape_timeout * 1000,
        )

        if response is None:
            raise ScrapeError(
                f"[{self.name}] Navegação sem resposta",
                site=self.name,
                url=url,
            )

        if response.status >= 400:
            if response.status == 429:
                raise BlockedError(
                    f"[{self.name}] Rate limit excedido",
                    block_type="rate_limit",
                    site=self.name,
                    url=url,
                )
            raise NetworkError(
                f"[{self.name}] Status {response.status}",
                status_code=response.status,
                site=self.name,
                url=url,
            )

        page_title = await page.title()
        self._check_block_title(page_title, url)

        await self._wait_for_content(page)

        content = await page.content()
        self._check_for_blocks(content, url)

        structured = await self._read_structured_data(page)

        title = structured.title or await self.extract_title(page)
        price = structured.price or await self.extract_price(page)
        if structured.availability is not None:
            availability = structured.availability
        else:
            availability = await self.extract_availability(page, content)

        return ScrapedData(
            title=clean_title(title or self.fallback_title(page_title)),
            price=price,
            availability=availability,
        )

    # HOOKS DE EXTRAÇÃO (sobrescritos por sites com marcação específica)

    async def extract_title(self, page: Page) -> str:
        """Título pelo seletor configurado."""
        return await self._safe_get_text(page, self.selectors.title)

    async def extract_price(self, page: Page) -> float:
        """Preço pelo seletor configurado."""
        text = await self._safe_get_text(page, self.selectors.price)
        return clean_price(text)

    async def extract_availability(self, page: Page, content: str) -> bool:
        """
        Disponibilidade por marcadores de esgotado.
        Sem sinal explícito de indisponibilidade o produto é considerado disponível.
        """
        if self.selectors.sold_out:
            if await self._safe_query(page, self.selectors.sold_out) is not None:
                return False

        if self.selectors.availability:
            text = await self._safe_get_text(page, self.selectors.availability)
            if text and not clean_availability(text):
                return False

        if self.config.scan_body_for_sold_out and "sold out" in content.lower():
            return False

        return True

    def fallback_title(self, page_title: str) -> str:
        """Título usado quando nenhum seletor encontra o nome do produto."""
        return page_title

    # VERIFICAÇÃO DE BLOQUEIO

    def _check_block_title(self, page_title: str, url: str) -> None:
        """Verifica marcadores de bloqueio no <title>."""
        for marker in self.config.block_title_markers:
            if marker in (page_title or ""):
                self.logger.warning(
                    "Página de bloqueio detectada",
                    site=self.site_id,
                    marker=marker,
                )
                raise BlockedError(
                    f"Blocked by {self.name} ({marker})",
                    block_type="title_marker",
                    site=self.name,
                    url=url,
                )

    def _check_for_blocks(self, content: str, url: str) -> None:
        """
        Verifica se o corpo da página indica bloqueio.
        Páginas com indicadores de produto nunca são tratadas como bloqueio.
        """
        content_lower = content.lower()

        if self._has_product_indicators(content_lower):
            return

        for block_type, indicators in self.BLOCK_INDICATORS.items():
            for indicator in indicators:
                if indicator in content_lower:
                    self.logger.warning(
                        "Possível bloqueio detectado",
                        type=block_type,
                        indicator=indicator,
                    )
                    raise BlockedError(
                        f"Detectado bloqueio: {block_type}",
                        block_type=block_type,
                        site=self.name,
                        url=url,
                    )

    def _has_product_indicators(self, content: str) -> bool:
        """Três ou mais indicadores de produto significam página válida."""
        product_indicators = [
            "add to cart",
            "add to bag",
            "buy now",
            "₹",
            "price",
            "product",
            "mrp",
        ]
        found_count = sum(1 for ind in product_indicators if ind in content)
        return found_count >= 3

    # METADADOS ESTRUTURADOS

    async def _read_structured_data(self, page: Page) -> StructuredProduct:
        """Lê JSON-LD e meta tags da página."""
        try:
            blocks = await page.eval_on_selector_all(
                'script[type="application/ld+json"]',
                "els => els.map(e => e.textContent)",
            )
            meta = await page.eval_on_selector_all(
                "meta[property]",
                "els => Object.fromEntries(els.map(e => [e.getAttribute('property'), e.getAttribute('content')]))",
            )
        except PlaywrightError as e:
            self.logger.debug("Metadados indisponíveis", error=str(e))
            return StructuredProduct()

        return merge_structured(parse_json_ld(blocks or []), parse_meta_tags(meta or {}))

    # GERENCIAMENTO DO BROWSER

    @asynccontextmanager
    async def _open_page(self) -> AsyncIterator[Page]:
        """Abre browser, contexto e página; fecha tudo ao sair."""
        headers = {"Accept-Language": "en-IN,en-US;q=0.9,en;q=0.8"}
        if self.config.referer:
            headers["Referer"] = self.config.referer

        async with async_playwright() as playwright:
            browser = await playwright.chromium.launch(
                headless=self.settings.headless,
                args=[
                    "--disable-blink-features=AutomationControlled",
                    "--disable-dev-shm-usage",
                    "--no-sandbox",
                    "--disable-setuid-sandbox",
                    "--disable-gpu",
                    "--disable-infobars",
                    "--window-size=1920,1080",
                ],
            )
            try:
                context = await browser.new_context(
                    user_agent=random.choice([self.settings.user_agent, *self.USER_AGENTS]),
                    viewport={"width": 1920, "height": 1080},
                    locale="en-IN",
                    timezone_id="Asia/Kolkata",
                    extra_http_headers=headers,
                )
                page = await context.new_page()
                page.set_default_timeout(self.settings.scrape_timeout * 1000)
                await page.route("**/*", self._block_heavy_resources)
                yield page
            finally:
                await browser.close()

    async def _block_heavy_resources(self, route: Route) -> None:
        if route.request.resource_type in self.BLOCKED_RESOURCE_TYPES:
            await route.abort()
        else:
            await route.continue_()

    async def _wait_for_content(self, page: Page) -> None:
        """Aguarda o seletor principal do site; segue em frente no timeout."""
        if not self.selectors.wait_for:
            return

        try:
            await page.wait_for_selector(
                self.selectors.wait_for,
                timeout=self.settings.selector_timeout * 1000,
            )
        except PlaywrightTimeout:
            self.logger.debug(
                "Timeout aguardando conteúdo - tentando continuar",
                site=self.site_id,
            )

    # HELPERS DE EXTRAÇÃO

    async def _safe_query(self, page: Page, selector: str) -> Optional[Any]:
        """Primeiro elemento encontrado entre seletores separados por vírgula."""
        for sel in selector.split(", "):
            try:
                element = await page.query_selector(sel.strip())
                if element:
                    return element
            except PlaywrightError:
                continue
        return None

    async def _safe_get_text(
        self,
        page: Page,
        selector: str,
        default: str = "",
    ) -> str:
        """Extrai texto do primeiro seletor com conteúdo."""
        if not selector:
            return default

        for sel in selector.split(", "):
            try:
                element = await page.query_selector(sel.strip())
                if element:
                    text = await element.inner_text()
                    if text and text.strip():
                        return text.strip()
            except PlaywrightError:
                continue

        return default

    async def _safe_get_all_texts(self, page: Page, selector: str) -> list[str]:
        """Textos de todos os elementos do seletor."""
        try:
            elements = await page.query_selector_all(selector)
        except PlaywrightError:
            return []

        texts = []
        for element in elements:
            try:
                text = await element.inner_text()
            except PlaywrightError:
                continue
            if text and text.strip():
                texts.append(text.strip())
        return texts
