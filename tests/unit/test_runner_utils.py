"""
Testes unitários para utilitários do job em lote.
"""

import pytest
import structlog

from config.logging_config import run_context
from pricewatch.jobs.runner import chunk, format_duration
from pricewatch.jobs.scheduler import validate_cron


class TestChunk:
    """Testes para chunk."""

    def test_divide_em_lotes_ordenados(self):
        assert chunk([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]

    def test_lote_maior_que_lista(self):
        assert chunk([1, 2], 50) == [[1, 2]]

    def test_lista_vazia(self):
        assert chunk([], 3) == []

    def test_tamanho_invalido(self):
        with pytest.raises(ValueError):
            chunk([1], 0)

    def test_preserva_todos_os_itens(self):
        items = list(range(103))
        batches = chunk(items, 10)
        assert len(batches) == 11
        assert [x for batch in batches for x in batch] == items


class TestFormatDuration:
    """Testes para format_duration."""

    @pytest.mark.parametrize("seconds,expected", [
        (0.25, "250ms"),
        (0, "0ms"),
        (12.34, "12.3s"),
        (59.9, "59.9s"),
        (125, "2m 5s"),
        (3600, "60m 0s"),
    ])
    def test_formatos(self, seconds, expected):
        assert format_duration(seconds) == expected


class TestValidateCron:
    """Testes para validate_cron."""

    @pytest.mark.parametrize("expression", ["0 */6 * * *", "*/30 * * * *", "0 9 * * mon-fri"])
    def test_validas(self, expression):
        assert validate_cron(expression) is True

    @pytest.mark.parametrize("expression", ["6 hours", "", "* * *", "61 * * * *"])
    def test_invalidas(self, expression):
        assert validate_cron(expression) is False


class TestRunContext:
    """Testes para run_context."""

    def test_vincula_run_id_e_contexto(self):
        with run_context(trigger="manual") as run_id:
            bound = structlog.contextvars.get_contextvars()
            assert bound["run_id"] == run_id
            assert bound["trigger"] == "manual"

        assert "run_id" not in structlog.contextvars.get_contextvars()

    def test_run_ids_distintos(self):
        with run_context() as first:
            pass
        with run_context() as second:
            pass
        assert first != second
