"""
Configurações globais do sistema usando Pydantic Settings.
Carrega variáveis de ambiente e define valores padrão.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CRON_SCHEDULE = "0 */6 * * *"


class Settings(BaseSettings):
    """Configurações principais do sistema."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Ambiente
    env: Literal["development", "production", "testing"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = False

    # Agendamento (expressão cron de 5 campos)
    cron_schedule: str = DEFAULT_CRON_SCHEDULE
    history_capacity: int = Field(default=10, ge=1, le=100)

    # Lotes
    batch_size: int = Field(default=50, ge=1, le=500)
    batch_delay: float = Field(default=3.0, ge=0, le=300)

    # Disparo manual (valores menores para feedback rápido)
    manual_batch_size: int = Field(default=5, ge=1, le=500)
    manual_batch_delay: float = Field(default=2.0, ge=0, le=300)

    # Retries
    max_retries: int = Field(default=3, ge=1, le=10)
    retry_base_delay: float = Field(default=1.0, ge=0, le=60)

    # Timeouts (segundos)
    scrape_timeout: int = Field(default=30, ge=5, le=180)
    selector_timeout: int = Field(default=10, ge=1, le=60)

    # Paths
    data_path: Path = Field(default=Path("./data"))
    log_path: Path = Field(default=Path("./logs"))
    db_name: str = "pricewatch.db"

    # User Agent
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        )
    )

    # Playwright
    headless: bool = True

    @field_validator("data_path", "log_path", mode="after")
    @classmethod
    def ensure_path_exists(cls, v: Path) -> Path:
        """Garante que os diretórios existam."""
        v.mkdir(parents=True, exist_ok=True)
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Retorna instância singleton das configurações.
    Usa cache para evitar recarregar .env múltiplas vezes.
    """
    return Settings()
