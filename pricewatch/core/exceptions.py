"""
Hierarquia de exceções do sistema.
Todas as exceções herdam de PriceWatchError para facilitar tratamento.
"""

from typing import Any, Optional


class PriceWatchError(Exception):
    """
    Exceção base do sistema.
    Todas as exceções customizadas herdam desta classe.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        base = self.message
        if self.details:
            base += f" | Details: {self.details}"
        if self.cause:
            base += f" | Caused by: {self.cause}"
        return base

    def to_dict(self) -> dict[str, Any]:
        """Serializa exceção para dicionário."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "cause": str(self.cause) if self.cause else None,
        }


# EXCEÇÕES DE RESOLUÇÃO DE URL

class InvalidURLError(PriceWatchError):
    """URL que não pode ser interpretada (sem esquema ou hostname)."""

    def __init__(self, url: str, **kwargs):
        details = kwargs.pop("details", {})
        details["url"] = url
        super().__init__(f"URL inválida: {url}", details=details, **kwargs)
        self.url = url


class UnsupportedSiteError(PriceWatchError):
    """Nenhum scraper registrado para o hostname."""

    def __init__(
        self,
        hostname: str,
        supported_sites: list[str],
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        details["hostname"] = hostname
        super().__init__(
            f'Nenhum scraper disponível para "{hostname}". '
            f"Suportados: {', '.join(supported_sites)}",
            details=details,
            **kwargs,
        )
        self.hostname = hostname
        self.supported_sites = supported_sites


# EXCEÇÕES DE SCRAPING

class ScrapeError(PriceWatchError):
    """Erro genérico de scraping (rede, timeout, bloqueio, resposta inválida)."""

    def __init__(
        self,
        message: str,
        *,
        site: Optional[str] = None,
        url: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if site:
            details["site"] = site
        if url:
            details["url"] = url
        super().__init__(message, details=details, **kwargs)
        self.site = site
        self.url = url


class NetworkError(ScrapeError):
    """Erro de rede (conexão recusada, status HTTP de erro, etc)."""

    def __init__(
        self,
        message: str = "Erro de conexão com o servidor",
        *,
        status_code: Optional[int] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if status_code:
            details["status_code"] = status_code
        super().__init__(message, details=details, **kwargs)
        self.status_code = status_code


class ScrapeTimeoutError(ScrapeError):
    """Navegação ou extração excedeu o tempo limite."""

    def __init__(
        self,
        message: str = "Tempo limite excedido",
        *,
        timeout_seconds: Optional[float] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if timeout_seconds:
            details["timeout_seconds"] = timeout_seconds
        super().__init__(message, details=details, **kwargs)
        self.timeout_seconds = timeout_seconds


class BlockedError(ScrapeError):
    """Erro quando o scraper é bloqueado (captcha, login wall, etc)."""

    def __init__(
        self,
        message: str = "Acesso bloqueado pelo site",
        *,
        block_type: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if block_type:
            details["block_type"] = block_type
        super().__init__(message, details=details, **kwargs)
        self.block_type = block_type


class ZeroPriceSkip(PriceWatchError):
    """
    Scraper retornou preço 0.
    Não é erro real: o produto é marcado como SKIPPED e não há novas tentativas.
    """

    def __init__(self, message: str = "scraped price was 0", **kwargs):
        super().__init__(message, **kwargs)


# EXCEÇÕES DE DOMÍNIO

class NotFoundError(PriceWatchError):
    """Entidade inexistente."""

    def __init__(
        self,
        message: str = "Product not found",
        *,
        entity: str = "product",
        entity_id: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        details["entity"] = entity
        if entity_id:
            details["entity_id"] = entity_id
        super().__init__(message, details=details, **kwargs)
        self.entity = entity
        self.entity_id = entity_id


class DuplicateProductError(PriceWatchError):
    """URL já monitorada."""

    def __init__(self, url: str, **kwargs):
        details = kwargs.pop("details", {})
        details["url"] = url
        super().__init__(
            "Product URL already being tracked",
            details=details,
            **kwargs,
        )
        self.url = url


class ValidationError(PriceWatchError):
    """Erro de validação de dados de entrada."""

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        if value is not None:
            details["invalid_value"] = str(value)
        super().__init__(message, details=details, **kwargs)


# EXCEÇÕES DE STORAGE

class StorageError(PriceWatchError):
    """Erro de persistência de dados."""

    def __init__(
        self,
        message: str,
        *,
        storage_type: Optional[str] = None,
        path: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if storage_type:
            details["storage_type"] = storage_type
        if path:
            details["path"] = path
        super().__init__(message, details=details, **kwargs)


class DatabaseError(StorageError):
    """Erro específico de banco de dados."""
    pass
