"""
Agendador do job de preços.

Garante no máximo uma execução por vez (cron ou manual) e mantém
um histórico curto das últimas execuções.
"""

import asyncio
import time
from collections import deque
from datetime import datetime
from typing import Any, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from config.logging_config import LoggerMixin, run_context
from config.settings import DEFAULT_CRON_SCHEDULE, Settings, get_settings
from pricewatch.core.models import GuardStatus, JobRunReport, JobSummary, RunRecord
from pricewatch.core.types import RunTrigger
from pricewatch.jobs.runner import BatchJobRunner


JOB_ID = "price_check"


def validate_cron(expression: str) -> bool:
    """Verifica se a expressão cron de 5 campos é válida."""
    try:
        CronTrigger.from_crontab(expression)
    except (ValueError, TypeError):
        return False
    return True


class ScheduleGuard(LoggerMixin):
    """
    Dispara o BatchJobRunner pelo cron e por disparos manuais.

    Uma execução em andamento faz o próximo disparo ser ignorado
    (sem fila). O flag é sempre liberado, mesmo quando o job falha.
    """

    def __init__(
        self,
        runner: BatchJobRunner,
        settings: Optional[Settings] = None,
    ):
        """
        Args:
            runner: Runner do job de preços
            settings: Configurações (padrão: get_settings())
        """
        self.runner = runner
        self.settings = settings or get_settings()

        self._running = False
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._tasks: set[asyncio.Task] = set()

        self.schedule = ""
        self.started_at: Optional[datetime] = None
        self.last_run_at: Optional[datetime] = None
        self.last_run_duration: Optional[float] = None
        self.last_run_summary: Optional[JobSummary] = None
        self.total_runs = 0
        self.history: deque[RunRecord] = deque(maxlen=self.settings.history_capacity)

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_busy(self) -> bool:
        """Execução em andamento ou disparo manual ainda não iniciado."""
        return self._running or any(not task.done() for task in self._tasks)

    async def run_once(
        self,
        trigger: RunTrigger = RunTrigger.CRON,
        **overrides: Any,
    ) -> Optional[JobRunReport]:
        """
        Executa o job uma vez, se nenhum outro estiver rodando.

        Args:
            trigger: Origem da execução
            **overrides: Argumentos repassados a run_job

        Returns:
            Relatório do job, ou None se ignorado ou se o job falhou
        """
        trigger = RunTrigger(trigger)

        if self._running:
            self.logger.warning(
                "Job já em execução - ignorando este ciclo",
                trigger=trigger.value,
            )
            return None

        self._running = True
        self.last_run_at = datetime.now()
        run_start = time.monotonic()

        try:
            with run_context(trigger=trigger.value):
                self.logger.info("Disparando verificação de preços")
                report = await self.runner.run_job(**overrides)

            duration = time.monotonic() - run_start
            self.last_run_duration = duration
            self.last_run_summary = report.summary
            self.total_runs += 1

            self.history.appendleft(RunRecord(
                run_at=self.last_run_at,
                duration_seconds=duration,
                trigger=trigger,
                total_products=report.total_products,
                summary=report.summary,
            ))

            return report

        except Exception as e:
            self.logger.error(
                "Job de preços falhou",
                trigger=trigger.value,
                error=str(e),
                exc_info=True,
            )
            self.history.appendleft(RunRecord(
                run_at=self.last_run_at,
                duration_seconds=time.monotonic() - run_start,
                trigger=trigger,
                error=str(e) or type(e).__name__,
            ))
            return None

        finally:
            self._running = False

    def trigger(self, **overrides: Any) -> bool:
        """
        Disparo manual sem espera pelo resultado.

        Usa os parâmetros de lote manuais, menores que os do cron,
        a menos que sejam sobrescritos.

        Returns:
            False se já houver execução em andamento; True se o job foi iniciado
        """
        if self.is_busy:
            self.logger.info("Disparo manual recusado - job em execução")
            return False

        params = {
            "batch_size": self.settings.manual_batch_size,
            "batch_delay": self.settings.manual_batch_delay,
            **overrides,
        }

        task = asyncio.create_task(self.run_once(RunTrigger.MANUAL, **params))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        self.logger.info("Disparo manual iniciado", **params)
        return True

    def start(self, schedule: Optional[str] = None) -> str:
        """
        Inicia o agendamento cron.

        Expressão inválida cai para o padrão "0 */6 * * *".

        Args:
            schedule: Expressão cron (padrão: settings.cron_schedule)

        Returns:
            Expressão efetivamente agendada
        """
        expression = schedule or self.settings.cron_schedule

        if not validate_cron(expression):
            self.logger.error(
                "Expressão cron inválida - usando padrão",
                schedule=expression,
                fallback=DEFAULT_CRON_SCHEDULE,
            )
            expression = DEFAULT_CRON_SCHEDULE

        if self._scheduler is not None:
            self.stop()

        self.schedule = expression
        self.started_at = datetime.now()

        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self.run_once,
            CronTrigger.from_crontab(expression),
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()

        self.logger.info(
            "Agendamento iniciado",
            schedule=expression,
            started_at=self.started_at.isoformat(),
        )
        return expression

    def stop(self) -> None:
        """Para o agendamento."""
        if self._scheduler is None:
            return

        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        self.logger.info("Agendamento parado")

    def next_run_time(self) -> Optional[datetime]:
        """Próximo disparo cron, se agendado."""
        if self._scheduler is None:
            return None
        job = self._scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None

    def status(self) -> GuardStatus:
        """Snapshot somente-leitura do estado."""
        return GuardStatus(
            is_running=self._running,
            schedule=self.schedule,
            started_at=self.started_at,
            last_run_at=self.last_run_at,
            last_run_duration=self.last_run_duration,
            last_run_summary=self.last_run_summary,
            total_runs=self.total_runs,
            recent_history=list(self.history),
        )
