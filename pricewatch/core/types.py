"""
Tipos customizados e enumerações do sistema.
"""

from enum import Enum
from typing import Annotated

from pydantic import Field, StringConstraints


# ENUMERAÇÕES

class PriceStatus(str, Enum):
    """Classificação da variação de preço em uma verificação."""

    CHEAPER = "CHEAPER"
    COSTLY = "COSTLY"
    SAME = "SAME"


class ProductRunStatus(str, Enum):
    """Resultado do processamento de um produto dentro de um job."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


class RunTrigger(str, Enum):
    """Origem de uma execução do job."""

    CRON = "cron"
    MANUAL = "manual"


# TIPOS ANOTADOS

# Preço (nunca negativo)
Price = Annotated[float, Field(ge=0)]

# URL validada
URLString = Annotated[
    str,
    StringConstraints(
        pattern=r"^https?://.*",
        strip_whitespace=True,
    ),
]

# Código de moeda (ex: INR)
CurrencyCode = Annotated[
    str,
    StringConstraints(
        min_length=3,
        max_length=3,
        to_upper=True,
        strip_whitespace=True,
    ),
]
