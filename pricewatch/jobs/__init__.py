"""
Módulo de jobs: execução em lote e agendamento.
"""

from pricewatch.jobs.runner import BatchJobRunner, chunk, format_duration
from pricewatch.jobs.scheduler import ScheduleGuard, validate_cron

__all__ = [
    "BatchJobRunner",
    "ScheduleGuard",
    "chunk",
    "format_duration",
    "validate_cron",
]
