"""Generated task operations (create, edit, re-materialize, cost).

The engine is pure; these functions fetch the snapshot it needs, call it,
and store the rendered description in display_name.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from paramtasks.catalog.lookup import ReferenceLookup
from paramtasks.catalog.repository import (
    fetch_generated_tasks,
    fetch_task_lines,
    load_catalog,
    load_reference_lookup,
)
from paramtasks.config import RenderingConfig
from paramtasks.costing.rollup import CostBreakdown, unit_cost
from paramtasks.db.models import GeneratedTaskModel
from paramtasks.engine.codes import next_task_code, param_values_signature
from paramtasks.engine.dependencies import (
    available_parameters,
    orphaned_selections,
    selections_by_parameter_id,
)
from paramtasks.engine.models import CatalogSnapshot, ResolvedParam, TaskView
from paramtasks.engine.renderer import render
from paramtasks.engine.resolver import (
    normalize_param_values,
    order_slugs,
    parse_param_values,
    resolve,
)
from paramtasks.models import GeneratedTask, Parameter

logger = logging.getLogger(__name__)


class TaskNotFoundError(LookupError):
    """Raised when a generated task id does not exist."""

    def __init__(self, task_id: UUID):
        self.task_id = task_id
        super().__init__(f"Generated task {task_id} not found")


def base_name_for(
    template_id: str | None, category_id: str | None, lookup: ReferenceLookup
) -> str:
    """Template name, falling back to category name, then empty."""
    return lookup.template_name(template_id) or lookup.category_name(category_id) or ""


def describe_task(
    task: GeneratedTask,
    catalog: CatalogSnapshot,
    lookup: ReferenceLookup,
    rendering: RenderingConfig | None = None,
) -> str:
    """Resolve and render the canonical description of a task."""
    rendering = rendering or RenderingConfig()
    resolved = resolve(task.param_values, catalog.parameters, catalog.options)
    return render(
        base_name_for(task.template_id, task.category_id, lookup),
        resolved,
        task_id=task.id,
        placeholder=rendering.placeholder,
        default_label=rendering.default_task_label,
        short_id_length=rendering.short_id_length,
    )


def build_task_view(
    task: GeneratedTask,
    catalog: CatalogSnapshot,
    lookup: ReferenceLookup,
    rendering: RenderingConfig | None = None,
) -> TaskView:
    """Join a task with its resolved chain and reference names."""
    resolved = resolve(task.param_values, catalog.parameters, catalog.options)
    display_name = task.custom_name or task.display_name or describe_task(
        task, catalog, lookup, rendering
    )
    return TaskView(
        id=str(task.id),
        code=task.code or "",
        display_name=display_name,
        resolved=resolved,
        unit_name=lookup.unit_name(task.unit_id),
        category_name=lookup.category_name(task.category_id),
    )


def editor_chain(task: GeneratedTask, catalog: CatalogSnapshot) -> list[ResolvedParam]:
    """Resolved chain in the editor's saved order (rendering still uses position)."""
    resolved = {p.slug: p for p in resolve(task.param_values, catalog.parameters, catalog.options)}
    ordered = order_slugs(resolved, task.param_order, catalog.parameters)
    return [resolved[slug] for slug in ordered]


def offered_parameters(
    param_values: Mapping[str, str],
    catalog: CatalogSnapshot,
    rendering: RenderingConfig | None = None,
) -> list[Parameter]:
    """Parameters the task builder may show for the current choices."""
    rendering = rendering or RenderingConfig()
    selections = selections_by_parameter_id(param_values, catalog.parameters)
    by_id = {p.id: p for p in catalog.parameters}
    ids = available_parameters(
        selections, catalog.parameters, catalog.dependencies, rendering.root_parameter_slug
    )
    return [by_id[parameter_id] for parameter_id in ids if parameter_id in by_id]


async def list_task_views(
    session: AsyncSession,
    organization_id: str | None = None,
    rendering: RenderingConfig | None = None,
) -> list[TaskView]:
    catalog = await load_catalog(session)
    lookup = await load_reference_lookup(session)
    tasks = await fetch_generated_tasks(session, organization_id=organization_id)
    return [build_task_view(task, catalog, lookup, rendering) for task in tasks]


async def create_generated_task(
    session: AsyncSession,
    param_values: Mapping[str, Any] | str | None,
    *,
    template_id: str | None = None,
    category_id: str | None = None,
    unit_id: str | None = None,
    organization_id: str | None = None,
    custom_name: str | None = None,
    param_order: list[str] | None = None,
    is_system: bool = True,
    code_width: int = 6,
    rendering: RenderingConfig | None = None,
) -> tuple[GeneratedTaskModel, bool]:
    """Create a generated task, or return the existing one with identical choices.

    Args:
        session: Database session
        param_values: Parameter slug -> option id (legacy id/label forms accepted)
        template_id: Template supplying the base name

    Returns:
        (task row, created) where created is False if an identical task existed
    """
    catalog = await load_catalog(session)
    lookup = await load_reference_lookup(session)

    values = normalize_param_values(
        parse_param_values(param_values), catalog.parameters, catalog.options
    )
    signature = param_values_signature(values)

    existing = (
        await session.execute(
            select(GeneratedTaskModel).where(
                GeneratedTaskModel.signature == signature,
                GeneratedTaskModel.template_id.is_(None)
                if template_id is None
                else GeneratedTaskModel.template_id == template_id,
                _same_owner(is_system, organization_id),
            )
        )
    ).scalars().first()
    if existing is not None:
        logger.info(f"Task with identical parameters already exists: {existing.code}")
        return existing, False

    _warn_orphans(values, catalog)

    codes = (await session.execute(select(GeneratedTaskModel.code))).scalars().all()
    task = GeneratedTaskModel(
        code=next_task_code(codes, width=code_width),
        template_id=template_id,
        category_id=category_id,
        unit_id=unit_id,
        param_values=values,
        param_order=list(param_order or []),
        signature=signature,
        custom_name=custom_name,
        is_system=is_system,
        organization_id=organization_id,
    )
    session.add(task)
    await session.flush()

    task.display_name = describe_task(_snapshot(task, values), catalog, lookup, rendering)
    await session.flush()

    logger.info(f"Created generated task {task.code}: {task.display_name}")
    return task, True


async def update_generated_task(
    session: AsyncSession,
    task_id: UUID,
    param_values: Mapping[str, Any] | str | None,
    param_order: list[str] | None = None,
    rendering: RenderingConfig | None = None,
) -> GeneratedTaskModel:
    """Replace a task's parameter values and re-render its description.

    Raises:
        TaskNotFoundError: If task_id does not exist
    """
    task = await session.get(GeneratedTaskModel, task_id)
    if task is None:
        raise TaskNotFoundError(task_id)

    catalog = await load_catalog(session)
    lookup = await load_reference_lookup(session)

    values = normalize_param_values(
        parse_param_values(param_values), catalog.parameters, catalog.options
    )
    _warn_orphans(values, catalog)

    task.param_values = values
    task.signature = param_values_signature(values)
    if param_order is not None:
        task.param_order = list(param_order)
    task.display_name = describe_task(_snapshot(task, values), catalog, lookup, rendering)
    await session.flush()

    logger.info(f"Updated generated task {task.code}: {task.display_name}")
    return task


async def materialize_display_names(
    session: AsyncSession, rendering: RenderingConfig | None = None
) -> int:
    """Re-render every task's display_name from the current catalog.

    Returns:
        Number of tasks whose stored display_name changed
    """
    catalog = await load_catalog(session)
    lookup = await load_reference_lookup(session)

    rows = (await session.execute(select(GeneratedTaskModel))).scalars().all()
    changed = 0
    for row in rows:
        values = parse_param_values(row.param_values)
        display_name = describe_task(_snapshot(row, values), catalog, lookup, rendering)
        if display_name != row.display_name:
            row.display_name = display_name
            changed += 1

    await session.flush()
    logger.info(f"Materialized display names: {changed}/{len(rows)} changed")
    return changed


async def task_cost(session: AsyncSession, task_id: UUID) -> CostBreakdown:
    """Per-unit cost of a stored task.

    Raises:
        TaskNotFoundError: If task_id does not exist
        MixedCurrencyError: If the task's lines use more than one currency
    """
    if await session.get(GeneratedTaskModel, task_id) is None:
        raise TaskNotFoundError(task_id)

    materials, labor = await fetch_task_lines(session, task_id)
    return unit_cost(materials, labor)


def _same_owner(is_system: bool, organization_id: str | None):
    """Duplicates are only looked up among tasks the caller owns."""
    if is_system:
        return GeneratedTaskModel.is_system.is_(True)
    owner = (
        GeneratedTaskModel.organization_id.is_(None)
        if organization_id is None
        else GeneratedTaskModel.organization_id == organization_id
    )
    return GeneratedTaskModel.is_system.is_(False) & owner


def _snapshot(row: GeneratedTaskModel, values: dict[str, str]) -> GeneratedTask:
    return GeneratedTask(
        id=row.id,
        template_id=row.template_id,
        category_id=row.category_id,
        param_values=values,
        code=row.code,
    )


def _warn_orphans(values: Mapping[str, str], catalog: CatalogSnapshot) -> None:
    selections = selections_by_parameter_id(values, catalog.parameters)
    orphans = orphaned_selections(selections, catalog.dependencies)
    if orphans:
        logger.warning(f"Parameters set without their parent option: {', '.join(sorted(orphans))}")
