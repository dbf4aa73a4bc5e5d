"""paramtasks CLI.

Commands:
- init: Initialize database schema
- create: Generate a task from parameter choices
- render: Show a task's resolved chain and rendered description
- branches: Browse generated tasks grouped by branch
- cost: Show a task's per-unit cost breakdown
- materialize: Re-render every stored display name
- next: Show which parameters the task builder offers for a set of choices
"""

from __future__ import annotations

import asyncio
import json
from uuid import UUID

import typer
from rich.console import Console
from rich.table import Table

from paramtasks.browse.branches import build_branches
from paramtasks.catalog.repository import (
    fetch_generated_task,
    fetch_task_lines,
    load_catalog,
    load_reference_lookup,
)
from paramtasks.catalog.service import (
    TaskNotFoundError,
    create_generated_task,
    describe_task,
    editor_chain,
    list_task_views,
    materialize_display_names,
    offered_parameters,
    task_cost,
)
from paramtasks.config import get_config
from paramtasks.core.logging import configure_logging
from paramtasks.costing.rollup import MixedCurrencyError, line_subtotal
from paramtasks.db.connection import close_db, get_session, init_db
from paramtasks.engine.resolver import normalize_param_values, parse_param_values
from paramtasks.models import CostScope

app = typer.Typer(
    name="paramtasks",
    help="paramtasks - Parametric task naming, browsing and cost rollups",
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main(
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level"),
):
    """Load configuration and set up logging before any command runs."""
    try:
        config = get_config()
    except KeyError as exc:
        console.print(f"[red]✗[/red] {exc.args[0]}")
        raise typer.Exit(code=2)

    configure_logging(log_level or config.log_level, config.log_format)


def _run(coro) -> None:
    async def _wrapped():
        try:
            await coro
        finally:
            await close_db()

    asyncio.run(_wrapped())


def _parse_task_id(task_id: str) -> UUID:
    try:
        return UUID(task_id)
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid task id: {task_id}") from exc


def _load_json(param_values: str) -> dict:
    try:
        values = json.loads(param_values)
    except ValueError as exc:
        raise typer.BadParameter(f"param_values is not valid JSON: {exc}") from exc
    if not isinstance(values, dict):
        raise typer.BadParameter("param_values must be a JSON object")
    return values


@app.command()
def init(
    drop: bool = typer.Option(False, "--drop", help="Drop existing tables"),
):
    """Initialize database schema."""
    config = get_config()
    console.print(f"[bold]Initializing database:[/bold] {config.db.url}")
    if drop:
        console.print("[yellow]Dropping existing tables...[/yellow]")

    _run(init_db(drop=drop))
    console.print("[bold green]✓[/bold green] Database initialized")


@app.command()
def create(
    param_values: str = typer.Argument(..., help='JSON map, e.g. \'{"tipo_elemento": "o1"}\''),
    template_id: str | None = typer.Option(None, "--template", help="Task template ID"),
    category_id: str | None = typer.Option(None, "--category", help="Category ID"),
    unit_id: str | None = typer.Option(None, "--unit", help="Unit ID"),
    org_id: str | None = typer.Option(None, "--org", help="Owning organization (omit for system task)"),
    custom_name: str | None = typer.Option(None, "--name", help="Custom display name"),
):
    """Generate a task from parameter choices."""
    values = _load_json(param_values)
    config = get_config()

    async def _create():
        async with get_session() as session:
            task, created = await create_generated_task(
                session,
                values,
                template_id=template_id,
                category_id=category_id,
                unit_id=unit_id,
                organization_id=org_id,
                custom_name=custom_name,
                is_system=org_id is None,
                code_width=config.costing.code_width,
                rendering=config.rendering,
            )
            if created:
                console.print(f"[bold green]✓[/bold green] Created task {task.code}")
            else:
                console.print(f"[yellow]⚠[/yellow] Task already exists: {task.code}")
            console.print(f"  {task.display_name}")
            console.print(f"  id: {task.id}", style="dim")

    _run(_create())


@app.command()
def render(task_id: str = typer.Argument(..., help="Generated task ID")):
    """Show a task's resolved parameter chain and rendered description."""
    task_uuid = _parse_task_id(task_id)
    config = get_config()

    async def _render():
        async with get_session() as session:
            task = await fetch_generated_task(session, task_uuid)
            if task is None:
                console.print(f"[red]✗[/red] Task {task_uuid} not found")
                raise typer.Exit(code=1)

            catalog = await load_catalog(session)
            lookup = await load_reference_lookup(session)
            resolved = editor_chain(task, catalog)

            table = Table(title=f"Task {task.code}")
            table.add_column("Pos", justify="right")
            table.add_column("Parameter", style="cyan")
            table.add_column("Value", style="green")

            for param in resolved:
                table.add_row(str(param.position), param.label, param.option_label)

            console.print(table)
            skipped = len(task.param_values) - len(resolved)
            if skipped:
                console.print(f"[yellow]⚠[/yellow] {skipped} value(s) could not be resolved")

            rendered = describe_task(task, catalog, lookup, config.rendering)
            console.print(f"\n[bold]Description:[/bold] {rendered}")
            if task.display_name and task.display_name != rendered:
                console.print(f"[yellow]Stored name is stale:[/yellow] {task.display_name}")

    _run(_render())


@app.command()
def branches(
    search: str | None = typer.Option(None, "--search", "-s", help="Filter text"),
    org_id: str | None = typer.Option(None, "--org", help="Organization ID"),
    show_tasks: bool = typer.Option(False, "--tasks", help="List tasks under each branch"),
):
    """Browse generated tasks grouped by their first parameter value."""
    config = get_config()

    async def _branches():
        async with get_session() as session:
            views = await list_task_views(session, organization_id=org_id, rendering=config.rendering)

        groups = build_branches(views, search, uncategorized=config.rendering.uncategorized_label)
        if not groups:
            console.print("[yellow]No tasks found[/yellow]")
            return

        table = Table(title="Task Branches")
        table.add_column("Branch", style="cyan")
        table.add_column("Category")
        table.add_column("Tasks", justify="right", style="green")

        for branch in groups:
            table.add_row(branch.name, branch.category_name, str(branch.total_tasks))
            if show_tasks:
                for task in branch.tasks:
                    table.add_row(f"  {task.code}", task.display_name, "", style="dim")

        console.print(table)
        total = sum(branch.total_tasks for branch in groups)
        console.print(f"\n[bold]Total:[/bold] {total} tasks in {len(groups)} branches")

    _run(_branches())


@app.command()
def cost(
    task_id: str = typer.Argument(..., help="Generated task ID"),
    scope: CostScope | None = typer.Option(None, "--scope", help="Cost scope"),
):
    """Show a task's per-unit cost breakdown."""
    task_uuid = _parse_task_id(task_id)
    config = get_config()
    effective_scope = scope or CostScope(config.costing.default_scope)

    async def _cost():
        async with get_session() as session:
            try:
                breakdown = await task_cost(session, task_uuid)
            except TaskNotFoundError as exc:
                console.print(f"[red]✗[/red] {exc}")
                raise typer.Exit(code=1)
            except MixedCurrencyError as exc:
                console.print(f"[red]✗[/red] {exc}")
                raise typer.Exit(code=1)

            materials, labor = await fetch_task_lines(session, task_uuid)

        if breakdown.is_empty:
            console.print("[yellow]No costs defined for this task[/yellow]")
            return

        currency = breakdown.currency or config.costing.currency

        table = Table(title="Cost per unit")
        table.add_column("Type", style="cyan")
        table.add_column("Item")
        table.add_column("Quantity", justify="right")
        table.add_column("Unit price", justify="right")
        table.add_column("Subtotal", justify="right", style="green")

        if effective_scope is not CostScope.LABOR_ONLY:
            for line in materials:
                table.add_row(
                    "Material",
                    line.name or "-",
                    f"{line.quantity} {line.unit_name or 'UD'}",
                    f"{line.unit_price or 0:,.2f}",
                    f"{line_subtotal(line):,.2f}",
                )
        if effective_scope is not CostScope.MATERIALS_ONLY:
            for line in labor:
                table.add_row(
                    "Labor",
                    line.name or "-",
                    f"{line.quantity} {line.unit_name or 'UD'}",
                    f"{line.unit_price or 0:,.2f}",
                    f"{line_subtotal(line):,.2f}",
                )

        console.print(table)
        console.print(f"  Materials: {currency} {breakdown.material_total:,.2f}")
        console.print(f"  Labor: {currency} {breakdown.labor_total:,.2f}")
        console.print(
            f"[bold]Total ({effective_scope.value}):[/bold] "
            f"{currency} {breakdown.total_for(effective_scope):,.2f}"
        )

    _run(_cost())


@app.command()
def materialize():
    """Re-render and store display names for every generated task."""
    config = get_config()

    async def _materialize():
        async with get_session() as session:
            changed = await materialize_display_names(session, config.rendering)
        console.print(f"[bold green]✓[/bold green] {changed} display name(s) updated")

    _run(_materialize())


@app.command("next")
def next_parameters(
    param_values: str = typer.Argument("{}", help="Current choices as a JSON map"),
):
    """Show which parameters the task builder offers for the current choices."""
    raw = _load_json(param_values)
    config = get_config()

    async def _next():
        async with get_session() as session:
            catalog = await load_catalog(session)

        root_slug = config.rendering.root_parameter_slug
        if catalog.parameter_by_slug(root_slug) is None:
            console.print(f"[yellow]⚠[/yellow] Root parameter '{root_slug}' is not in the catalog")

        values = normalize_param_values(parse_param_values(raw), catalog.parameters, catalog.options)
        offered = offered_parameters(values, catalog, config.rendering)
        if not offered:
            console.print("[yellow]No parameters to offer[/yellow]")
            return

        table = Table(title="Parameters")
        table.add_column("Slug", style="cyan")
        table.add_column("Label")
        table.add_column("Selected", style="green")

        for parameter in offered:
            option_id = values.get(parameter.slug)
            option = catalog.options.get(option_id) if option_id else None
            table.add_row(parameter.slug, parameter.label, option.label if option else "")

        console.print(table)

    _run(_next())


if __name__ == "__main__":
    app()
