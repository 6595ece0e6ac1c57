"""
Modelos de dados Pydantic para o sistema.
Define produtos monitorados, histórico de preços e relatórios de execução.
"""

import math
from datetime import datetime
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, computed_field, field_validator

from pricewatch.core.types import (
    CurrencyCode,
    Price,
    PriceStatus,
    ProductRunStatus,
    RunTrigger,
    URLString,
)


# =============================================================================
# ENTIDADES PERSISTIDAS
# =============================================================================

class Product(BaseModel):
    """
    Produto monitorado.
    Estatísticas começam zeradas; lowest_price usa infinito até a primeira verificação.
    """

    # Identificação
    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1, max_length=500)
    url: URLString

    # Estado atual
    current_price: Price = 0.0
    highest_price: Price = 0.0
    lowest_price: float = Field(default=math.inf, ge=0)
    average_price: Price = 0.0
    currency: CurrencyCode = "INR"

    # Origem (hostname sem www.)
    source: str

    # Metadados de monitoramento
    total_checks: int = Field(default=0, ge=0)
    last_checked_at: Optional[datetime] = None
    is_active: bool = True

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @field_validator("name")
    @classmethod
    def clean_name(cls, v: str) -> str:
        """Remove espaços extras do nome."""
        return " ".join(v.split())

    @field_validator("source")
    @classmethod
    def lower_source(cls, v: str) -> str:
        return v.strip().lower()

    @computed_field
    @property
    def has_been_checked(self) -> bool:
        """Indica se já houve ao menos uma verificação."""
        return self.total_checks > 0


class PriceHistoryEntry(BaseModel):
    """
    Observação imutável de preço.
    Criada pelo watchdog; nunca alterada ou removida.
    """

    model_config = {"frozen": True}

    id: UUID = Field(default_factory=uuid4)
    product_id: UUID

    # Snapshot de preço
    price: Price
    previous_price: Optional[float] = None
    currency: CurrencyCode = "INR"

    # Classificação
    status: PriceStatus
    price_difference: float = 0.0
    percentage_change: float = 0.0

    source: Optional[str] = None
    checked_at: datetime = Field(default_factory=datetime.now)


# =============================================================================
# DADOS DE SCRAPING
# =============================================================================

class ScrapedData(BaseModel):
    """
    Contrato de saída de todos os scrapers.
    Preço 0 indica que o site não exibiu um preço reconhecível.
    """

    title: str = ""
    price: Any = 0
    availability: Any = True


class ProductRef(BaseModel):
    """Projeção de produto usada pelo job (id, nome, url, origem, preço atual)."""

    id: UUID
    name: str
    url: str
    source: str
    current_price: float = 0.0


# =============================================================================
# WATCHDOG
# =============================================================================

class WatchdogResult(BaseModel):
    """Resultado de uma análise de preço."""

    status: PriceStatus
    previous_price: float
    new_price: float
    price_difference: float
    percentage_change: float
    history_entry: PriceHistoryEntry
    updated_product: Product


class WatchdogStats(BaseModel):
    """Estatísticas agregadas de um produto."""

    total_checks: int
    current_price: float
    highest_price: float
    lowest_price: float
    average_price: float
    status_breakdown: dict[PriceStatus, int] = Field(default_factory=dict)


class WatchdogSummary(BaseModel):
    """Resumo somente-leitura do watchdog para um produto."""

    product: Product
    last_check: Optional[PriceHistoryEntry] = None
    previous_check: Optional[PriceHistoryEntry] = None
    stats: WatchdogStats


# =============================================================================
# PAGINAÇÃO
# =============================================================================

class Pagination(BaseModel):
    """Metadados de paginação."""

    total: int
    page: int
    limit: int

    @computed_field
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class ProductPage(BaseModel):
    """Página de produtos."""

    products: list[Product] = Field(default_factory=list)
    pagination: Pagination


class HistoryPage(BaseModel):
    """Página do histórico de preços de um produto."""

    product: Product
    history: list[PriceHistoryEntry] = Field(default_factory=list)
    pagination: Pagination


class BulkAddResult(BaseModel):
    """Resultado de cadastro em lote."""

    added: list[Product] = Field(default_factory=list)
    failed: list[dict[str, Any]] = Field(default_factory=list)


# =============================================================================
# JOB
# =============================================================================

class ProductResult(BaseModel):
    """Resultado do processamento de um produto no job."""

    product_id: UUID
    name: str
    status: ProductRunStatus
    attempts: int = 0
    duration_seconds: float = 0.0

    # Título limpo da página (SUCCESS e SKIPPED)
    title: Optional[str] = None

    # SKIPPED
    reason: Optional[str] = None
    # FAILED
    error: Optional[str] = None

    # SUCCESS
    available: Optional[bool] = None
    price_status: Optional[PriceStatus] = None
    previous_price: Optional[float] = None
    new_price: Optional[float] = None
    price_difference: Optional[float] = None
    percentage_change: Optional[float] = None

    @computed_field
    @property
    def retried(self) -> bool:
        """Precisou de mais de uma tentativa."""
        return self.attempts > 1


class JobSummary(BaseModel):
    """Contagens agregadas de uma execução."""

    success: int = 0
    failed: int = 0
    skipped: int = 0
    retried: int = 0

    @classmethod
    def from_results(cls, results: list[ProductResult]) -> "JobSummary":
        """Agrega resultados por status."""
        return cls(
            success=sum(1 for r in results if r.status == ProductRunStatus.SUCCESS),
            failed=sum(1 for r in results if r.status == ProductRunStatus.FAILED),
            skipped=sum(1 for r in results if r.status == ProductRunStatus.SKIPPED),
            retried=sum(1 for r in results if r.retried),
        )


class JobRunReport(BaseModel):
    """Relatório completo de uma execução do job (não persistido)."""

    total_products: int = 0
    results: list[ProductResult] = Field(default_factory=list)
    summary: JobSummary = Field(default_factory=JobSummary)
    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    @computed_field
    @property
    def duration_seconds(self) -> Optional[float]:
        """Duração da execução em segundos."""
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()

    def mark_finished(self):
        """Marca a execução como finalizada."""
        self.finished_at = datetime.now()


# =============================================================================
# AGENDADOR
# =============================================================================

class RunRecord(BaseModel):
    """Entrada do histórico de execuções do agendador."""

    run_at: datetime
    duration_seconds: float
    trigger: RunTrigger = RunTrigger.CRON
    total_products: Optional[int] = None
    summary: Optional[JobSummary] = None
    error: Optional[str] = None

    @computed_field
    @property
    def crashed(self) -> bool:
        return self.error is not None


class GuardStatus(BaseModel):
    """Snapshot somente-leitura do estado do agendador."""

    is_running: bool
    schedule: str
    started_at: Optional[datetime] = None
    last_run_at: Optional[datetime] = None
    last_run_duration: Optional[float] = None
    last_run_summary: Optional[JobSummary] = None
    total_runs: int = 0
    recent_history: list[RunRecord] = Field(default_factory=list)
