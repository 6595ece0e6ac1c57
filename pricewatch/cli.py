"""
Interface de linha de comando (CLI) do PriceWatch.
Usa Typer para uma experiência moderna e rica.
"""

import asyncio
import csv
import json
import math
from pathlib import Path
from typing import Optional
from uuid import UUID

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from pricewatch.core.exceptions import PriceWatchError
from pricewatch.core.models import JobRunReport, ProductResult
from pricewatch.core.types import PriceStatus, ProductRunStatus
from pricewatch.jobs.runner import format_duration
from pricewatch.monitor import PriceMonitor

# Inicializa CLI
app = typer.Typer(
    name="pricewatch",
    help="Monitoramento de preços de produtos em lojas online.",
    add_completion=False,
)

# Console Rico para output formatado
console = Console()

STATUS_STYLES = {
    PriceStatus.CHEAPER: "green",
    PriceStatus.COSTLY: "red",
    PriceStatus.SAME: "yellow",
    ProductRunStatus.SUCCESS: "green",
    ProductRunStatus.FAILED: "red",
    ProductRunStatus.SKIPPED: "yellow",
}


def run_async(coro):
    """Helper para executar corrotinas."""
    return asyncio.run(coro)


def _parse_id(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise typer.BadParameter(f"ID inválido: {value}")


def _fail(error: PriceWatchError) -> None:
    console.print(f"[red]✗ {error.message}[/red]")
    raise typer.Exit(code=1)


def _money(value: Optional[float], currency: str = "INR") -> str:
    if value is None or math.isinf(value):
        return "-"
    symbol = "₹" if currency == "INR" else f"{currency} "
    return f"{symbol}{value:,.2f}"


def _styled(status) -> str:
    style = STATUS_STYLES.get(status, "white")
    return f"[{style}]{status.value}[/{style}]"


# =============================================================================
# PRODUTOS
# =============================================================================

@app.command("add")
def add(
    url: str = typer.Argument(..., help="URL da página do produto"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Nome amigável"),
):
    """
    Cadastra um produto para monitoramento.

    Exemplos:
        pricewatch add https://www.amazon.in/dp/B0CHX1W1XY
        pricewatch add https://www.myntra.com/123 --name "Tênis"
    """
    monitor = PriceMonitor()
    try:
        product = run_async(monitor.add_product(url, name))
    except PriceWatchError as e:
        _fail(e)

    console.print(f"[green]✓ Produto cadastrado:[/green] {product.name}")
    console.print(f"  ID: [cyan]{product.id}[/cyan]  Origem: {product.source}")


@app.command("import")
def import_products(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Arquivo com URLs"),
):
    """
    Cadastra produtos em lote.

    Uma URL por linha, opcionalmente seguida de ",nome".
    Linhas vazias e iniciadas por # são ignoradas.
    """
    items = []
    with path.open(encoding="utf-8", newline="") as f:
        for row in csv.reader(f):
            if not row or not row[0].strip() or row[0].lstrip().startswith("#"):
                continue
            url = row[0].strip()
            name = ",".join(row[1:]).strip() or None
            items.append((url, name))

    monitor = PriceMonitor()
    result = run_async(monitor.bulk_add_products(items))

    console.print(f"[green]✓ {len(result.added)} produtos cadastrados[/green]")
    for failure in result.failed:
        console.print(f"  [red]✗[/red] {failure['url']}: {failure['error']}")


@app.command("list")
def list_products(
    page: int = typer.Option(1, "--page", "-p", min=1, help="Página"),
    limit: int = typer.Option(10, "--limit", "-l", min=1, help="Itens por página"),
    active: Optional[bool] = typer.Option(None, "--active/--inactive", help="Filtrar por status"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Saída em formato JSON"),
):
    """
    Lista produtos monitorados.
    """
    monitor = PriceMonitor()
    result = run_async(monitor.list_products(page, limit, active))

    if json_output:
        console.print_json(json.dumps(result.model_dump(mode="json"), default=str))
        return

    if not result.products:
        console.print("[yellow]Nenhum produto cadastrado.[/yellow]")
        return

    table = Table(title=f"Produtos (página {result.pagination.page}/{result.pagination.total_pages})")
    table.add_column("ID", style="dim", overflow="fold")
    table.add_column("Nome", style="white", max_width=40, overflow="fold")
    table.add_column("Origem", style="cyan")
    table.add_column("Atual", justify="right", style="green")
    table.add_column("Mín", justify="right", style="blue")
    table.add_column("Máx", justify="right", style="red")
    table.add_column("Checks", justify="right")
    table.add_column("Ativo")

    for product in result.products:
        table.add_row(
            str(product.id),
            product.name,
            product.source,
            _money(product.current_price, product.currency),
            _money(product.lowest_price, product.currency),
            _money(product.highest_price, product.currency),
            str(product.total_checks),
            "✓" if product.is_active else "✗",
        )

    console.print(table)
    console.print(f"[dim]Total: {result.pagination.total}[/dim]")


@app.command("history")
def history(
    product_id: str = typer.Argument(..., help="ID do produto"),
    page: int = typer.Option(1, "--page", "-p", min=1, help="Página"),
    limit: int = typer.Option(20, "--limit", "-l", min=1, help="Itens por página"),
):
    """
    Mostra histórico de preços de um produto.
    """
    monitor = PriceMonitor()
    try:
        result = run_async(monitor.get_price_history(_parse_id(product_id), page, limit))
    except PriceWatchError as e:
        _fail(e)

    if not result.history:
        console.print(f"[yellow]Nenhum histórico para '{result.product.name}'[/yellow]")
        return

    table = Table(title=f"Histórico de Preços: {result.product.name}")
    table.add_column("Data", style="cyan")
    table.add_column("Preço", justify="right", style="green")
    table.add_column("Anterior", justify="right")
    table.add_column("Diferença", justify="right")
    table.add_column("%", justify="right")
    table.add_column("Status")

    for entry in result.history:
        table.add_row(
            entry.checked_at.strftime("%Y-%m-%d %H:%M"),
            _money(entry.price, entry.currency),
            _money(entry.previous_price, entry.currency),
            f"{entry.price_difference:+.2f}",
            f"{entry.percentage_change:+.2f}%",
            _styled(entry.status),
        )

    console.print(table)
    pagination = result.pagination
    console.print(f"[dim]Página {pagination.page}/{pagination.total_pages} - {pagination.total} registros[/dim]")


@app.command("deactivate")
def deactivate(product_id: str = typer.Argument(..., help="ID do produto")):
    """
    Para de monitorar um produto.
    """
    _set_active(product_id, False)


@app.command("activate")
def activate(product_id: str = typer.Argument(..., help="ID do produto")):
    """
    Volta a monitorar um produto.
    """
    _set_active(product_id, True)


def _set_active(product_id: str, is_active: bool) -> None:
    monitor = PriceMonitor()
    try:
        product = run_async(monitor.set_active(_parse_id(product_id), is_active))
    except PriceWatchError as e:
        _fail(e)

    state = "ativado" if is_active else "desativado"
    console.print(f"[green]✓ Monitoramento {state}:[/green] {product.name}")


# =============================================================================
# WATCHDOG
# =============================================================================

@app.command("check")
def check(
    product_id: str = typer.Argument(..., help="ID do produto"),
    price: float = typer.Argument(..., min=0, help="Preço observado"),
):
    """
    Registra manualmente um preço e mostra a variação.
    """
    monitor = PriceMonitor()
    try:
        result = run_async(monitor.check_price(_parse_id(product_id), price))
    except PriceWatchError as e:
        _fail(e)

    product = result.updated_product
    console.print(Panel(
        f"[bold]{product.name}[/bold]\n\n"
        f"Status: {_styled(result.status)}\n"
        f"Anterior: {_money(result.previous_price, product.currency)}\n"
        f"Novo: [bold]{_money(result.new_price, product.currency)}[/bold]\n"
        f"Diferença: {result.price_difference:+.2f} ({result.percentage_change:+.2f}%)",
        title="🔍 Watchdog",
        border_style="blue",
    ))


@app.command("scrape")
def scrape(product_id: str = typer.Argument(..., help="ID do produto")):
    """
    Verifica agora o preço de um produto na loja.
    """
    monitor = PriceMonitor()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task("Verificando preço...", total=None)
        try:
            result = run_async(monitor.scrape_product(_parse_id(product_id)))
        except PriceWatchError as e:
            _fail(e)

    _display_product_result(result)


@app.command("summary")
def summary(product_id: str = typer.Argument(..., help="ID do produto")):
    """
    Resumo do watchdog: últimas verificações e contagem por status.
    """
    monitor = PriceMonitor()
    try:
        result = run_async(monitor.get_summary(_parse_id(product_id)))
    except PriceWatchError as e:
        _fail(e)

    product = result.product
    stats = result.stats
    breakdown = "  ".join(
        f"{_styled(status)}: {count}" for status, count in stats.status_breakdown.items()
    )

    console.print(Panel(
        f"[bold]{product.name}[/bold]\n{product.url}\n\n"
        f"Verificações: [cyan]{stats.total_checks}[/cyan]\n"
        f"Atual: [green]{_money(stats.current_price, product.currency)}[/green]\n"
        f"Menor: [blue]{_money(stats.lowest_price, product.currency)}[/blue]\n"
        f"Maior: [red]{_money(stats.highest_price, product.currency)}[/red]\n"
        f"Média: [yellow]{_money(stats.average_price, product.currency)}[/yellow]\n\n"
        f"{breakdown or 'Sem histórico'}",
        title="📊 Resumo",
        border_style="blue",
    ))

    if result.last_check:
        console.print(
            f"Última verificação: {result.last_check.checked_at:%Y-%m-%d %H:%M} "
            f"{_styled(result.last_check.status)}"
        )


# =============================================================================
# JOB E AGENDAMENTO
# =============================================================================

@app.command("run")
def run(
    batch_size: Optional[int] = typer.Option(None, "--batch-size", "-b", min=1, help="Produtos por lote"),
    batch_delay: Optional[float] = typer.Option(None, "--delay", "-d", min=0, help="Pausa entre lotes (s)"),
    retries: Optional[int] = typer.Option(None, "--retries", "-r", min=1, help="Tentativas por produto"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Saída em formato JSON"),
):
    """
    Executa uma verificação de todos os produtos ativos.
    """
    monitor = PriceMonitor()
    report = run_async(monitor.run_job(
        batch_size=batch_size,
        batch_delay=batch_delay,
        max_retries=retries,
    ))

    if report is None:
        console.print("[red]✗ Job não executado (veja os logs)[/red]")
        raise typer.Exit(code=1)

    if json_output:
        console.print_json(json.dumps(report.model_dump(mode="json"), default=str))
        return

    _display_report(report)


@app.command("schedule")
def schedule(
    cron: Optional[str] = typer.Option(None, "--cron", "-c", help="Expressão cron (5 campos)"),
):
    """
    Inicia o agendamento e mantém o processo rodando.

    Exemplos:
        pricewatch schedule
        pricewatch schedule --cron "*/30 * * * *"
    """
    monitor = PriceMonitor()

    async def _serve():
        expression = monitor.start_schedule(cron)
        console.print(f"[green]📅 Agendamento iniciado:[/green] {expression}")
        console.print("[dim]Ctrl+C para sair[/dim]")
        try:
            await asyncio.Event().wait()
        finally:
            monitor.stop_schedule()

    try:
        run_async(_serve())
    except KeyboardInterrupt:
        console.print("\n[yellow]🛑 Agendamento parado.[/yellow]")


@app.command("sites")
def sites():
    """
    Lista sites suportados.
    """
    monitor = PriceMonitor()

    table = Table(title="Sites Suportados")
    table.add_column("ID", style="cyan")
    table.add_column("Nome", style="green")
    table.add_column("URL", style="blue")
    table.add_column("Status", style="yellow")

    for site in monitor.get_supported_sites():
        table.add_row(
            site["id"],
            site["name"],
            site["base_url"] or "-",
            site["status"] or "-",
        )

    console.print(table)


@app.command("version")
def version():
    """
    Exibe a versão do sistema.
    """
    from pricewatch import __version__

    console.print(f"[bold blue]PriceWatch[/bold blue] v{__version__}")
    console.print("Monitoramento de preços de lojas online")


# FUNÇÕES DE DISPLAY

def _display_product_result(result: ProductResult):
    """Exibe o resultado de um produto."""
    lines = [
        f"[bold]{result.title or result.name}[/bold]",
        "",
        f"Resultado: {_styled(result.status)}",
        f"Tentativas: {result.attempts}  Duração: {format_duration(result.duration_seconds)}",
    ]

    if result.status == ProductRunStatus.SUCCESS:
        lines += [
            f"Preço: {_styled(result.price_status)} "
            f"{_money(result.previous_price)} → [bold]{_money(result.new_price)}[/bold] "
            f"({result.percentage_change:+.2f}%)",
            f"Disponível: {'✓' if result.available else '✗'}",
        ]
    elif result.status == ProductRunStatus.SKIPPED:
        lines.append(f"Motivo: {result.reason}")
    else:
        lines.append(f"Erro: [red]{result.error}[/red]")

    console.print(Panel("\n".join(lines), title="🔍 Verificação", border_style="blue"))


def _display_report(report: JobRunReport):
    """Exibe o relatório de um job."""
    s = report.summary
    console.print(Panel(
        f"Produtos: [cyan]{report.total_products}[/cyan]\n"
        f"Sucesso: [green]{s.success}[/green]  Falhas: [red]{s.failed}[/red]  "
        f"Ignorados: [yellow]{s.skipped}[/yellow]  Com retry: [magenta]{s.retried}[/magenta]\n"
        f"Duração: {format_duration(report.duration_seconds or 0)}",
        title="📊 Job de Preços",
        border_style="blue",
    ))

    if not report.results:
        return

    table = Table(title="Resultados")
    table.add_column("Produto", style="white", max_width=40, overflow="fold")
    table.add_column("Resultado")
    table.add_column("Preço", justify="right", style="green")
    table.add_column("Variação")
    table.add_column("Tent.", justify="right")
    table.add_column("Detalhe", style="dim", max_width=40, overflow="fold")

    for r in report.results:
        table.add_row(
            r.name,
            _styled(r.status),
            _money(r.new_price),
            _styled(r.price_status) if r.price_status else "-",
            str(r.attempts),
            r.error or r.reason or "",
        )

    console.print(table)


# ENTRY POINT

def main():
    """Entry point principal."""
    app()


if __name__ == "__main__":
    main()
