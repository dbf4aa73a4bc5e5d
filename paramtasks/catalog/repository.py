"""Database queries producing engine snapshots."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from paramtasks.catalog.lookup import StaticLookup
from paramtasks.db.models import (
    CategoryModel,
    GeneratedTaskModel,
    LaborTypeModel,
    MaterialModel,
    TaskLaborModel,
    TaskMaterialModel,
    TaskParameterDependencyModel,
    TaskParameterModel,
    TaskParameterOptionModel,
    TaskTemplateModel,
    UnitModel,
)
from paramtasks.engine.models import CatalogSnapshot
from paramtasks.engine.resolver import parse_param_values
from paramtasks.models import (
    GeneratedTask,
    LaborLine,
    MaterialLine,
    Parameter,
    ParameterDependency,
    ParameterOption,
)


async def load_catalog(session: AsyncSession) -> CatalogSnapshot:
    """Fetch parameters, options and dependencies in one snapshot."""
    parameter_rows = (
        await session.execute(
            select(TaskParameterModel).order_by(TaskParameterModel.position, TaskParameterModel.slug)
        )
    ).scalars().all()
    option_rows = (await session.execute(select(TaskParameterOptionModel))).scalars().all()
    dependency_rows = (await session.execute(select(TaskParameterDependencyModel))).scalars().all()

    return CatalogSnapshot(
        parameters=[
            Parameter(
                id=row.id,
                slug=row.slug,
                label=row.label,
                position=row.position,
                expression_template=row.expression_template,
            )
            for row in parameter_rows
        ],
        options={
            row.id: ParameterOption(
                id=row.id,
                parameter_id=row.parameter_id,
                label=row.label,
                name=row.name,
                category_id=row.category_id,
                unit_id=row.unit_id,
            )
            for row in option_rows
        },
        dependencies=[
            ParameterDependency(
                parent_parameter_id=row.parent_parameter_id,
                parent_option_id=row.parent_option_id,
                child_parameter_id=row.child_parameter_id,
            )
            for row in dependency_rows
        ],
    )


async def load_reference_lookup(session: AsyncSession) -> StaticLookup:
    """Fetch template, category and unit names."""
    templates = (await session.execute(select(TaskTemplateModel.id, TaskTemplateModel.name))).all()
    categories = (await session.execute(select(CategoryModel.id, CategoryModel.name))).all()
    units = (await session.execute(select(UnitModel.id, UnitModel.name))).all()

    return StaticLookup(
        templates={row.id: row.name for row in templates},
        categories={row.id: row.name for row in categories},
        units={row.id: row.name for row in units},
    )


async def fetch_generated_tasks(
    session: AsyncSession,
    organization_id: str | None = None,
    include_system: bool = True,
) -> list[GeneratedTask]:
    """Return generated tasks, newest first.

    Args:
        organization_id: If provided, only that organization's tasks (plus
            system tasks when include_system is True)
    """
    stmt = select(GeneratedTaskModel).order_by(
        GeneratedTaskModel.created_at.desc(), GeneratedTaskModel.code.desc()
    )
    if organization_id is not None:
        if include_system:
            stmt = stmt.where(
                (GeneratedTaskModel.organization_id == organization_id)
                | (GeneratedTaskModel.is_system.is_(True))
            )
        else:
            stmt = stmt.where(GeneratedTaskModel.organization_id == organization_id)
    elif not include_system:
        stmt = stmt.where(GeneratedTaskModel.is_system.is_(False))

    rows = (await session.execute(stmt)).scalars().all()
    return [to_generated_task(row) for row in rows]


async def fetch_generated_task(session: AsyncSession, task_id: UUID) -> GeneratedTask | None:
    row = await session.get(GeneratedTaskModel, task_id)
    return to_generated_task(row) if row else None


async def fetch_task_lines(
    session: AsyncSession, task_id: UUID
) -> tuple[list[MaterialLine], list[LaborLine]]:
    """Return a task's material and labor lines joined with their resolved prices."""
    material_rows = (
        await session.execute(
            select(TaskMaterialModel, MaterialModel)
            .join(MaterialModel, MaterialModel.id == TaskMaterialModel.material_id)
            .where(TaskMaterialModel.task_id == task_id)
            .order_by(MaterialModel.name)
        )
    ).all()
    labor_rows = (
        await session.execute(
            select(TaskLaborModel, LaborTypeModel)
            .join(LaborTypeModel, LaborTypeModel.id == TaskLaborModel.labor_type_id)
            .where(TaskLaborModel.task_id == task_id)
            .order_by(LaborTypeModel.name)
        )
    ).all()

    materials = [
        MaterialLine(
            id=row.TaskMaterialModel.id,
            task_id=row.TaskMaterialModel.task_id,
            resource_id=row.MaterialModel.id,
            name=row.MaterialModel.name,
            unit_name=row.MaterialModel.unit_name,
            quantity=row.TaskMaterialModel.quantity,
            unit_price=row.MaterialModel.avg_price,
            currency=row.MaterialModel.currency,
        )
        for row in material_rows
    ]
    labor = [
        LaborLine(
            id=row.TaskLaborModel.id,
            task_id=row.TaskLaborModel.task_id,
            resource_id=row.LaborTypeModel.id,
            name=row.LaborTypeModel.name,
            unit_name=row.LaborTypeModel.unit_name,
            quantity=row.TaskLaborModel.quantity,
            unit_price=row.LaborTypeModel.avg_price,
            currency=row.LaborTypeModel.currency,
        )
        for row in labor_rows
    ]
    return materials, labor


def to_generated_task(row: GeneratedTaskModel) -> GeneratedTask:
    param_order = row.param_order if isinstance(row.param_order, list) else []
    return GeneratedTask(
        id=row.id,
        template_id=row.template_id,
        category_id=row.category_id,
        unit_id=row.unit_id,
        param_values=parse_param_values(row.param_values),
        param_order=[str(slug) for slug in param_order],
        code=row.code,
        display_name=row.display_name,
        custom_name=row.custom_name,
        is_system=row.is_system,
        organization_id=row.organization_id,
        created_at=row.created_at,
    )
