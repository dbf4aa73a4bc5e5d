"""SQLAlchemy async database models for paramtasks.

Maps the parameter catalog, generated tasks and their cost lines.
Material and labor prices are stored as resolved averages on the
resource rows (the "pricing view"); lines only carry quantities.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


def _text_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class CategoryModel(Base):
    """Task category (rubro)."""

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=_text_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)


class UnitModel(Base):
    """Unit of measure ("m2", "m3", "ud")."""

    __tablename__ = "units"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=_text_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)


class TaskTemplateModel(Base):
    """Task template: supplies the base name prepended to rendered descriptions."""

    __tablename__ = "task_templates"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=_text_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    category_id: Mapped[str | None] = mapped_column(
        Text, ForeignKey("categories.id", ondelete="SET NULL"), index=True
    )


class TaskParameterModel(Base):
    """Parameter definition with its position and expression template."""

    __tablename__ = "task_parameters"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=_text_id)
    slug: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    label: Mapped[str] = mapped_column(Text, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    expression_template: Mapped[str | None] = mapped_column(Text, default="{value}")

    __table_args__ = (Index("idx_task_parameters_position", "position"),)


class TaskParameterOptionModel(Base):
    """Allowed option of a parameter."""

    __tablename__ = "task_parameter_options"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=_text_id)
    parameter_id: Mapped[str] = mapped_column(
        Text, ForeignKey("task_parameters.id", ondelete="CASCADE"), nullable=False, index=True
    )
    label: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str | None] = mapped_column(Text)
    category_id: Mapped[str | None] = mapped_column(Text)
    unit_id: Mapped[str | None] = mapped_column(Text)


class TaskParameterDependencyModel(Base):
    """Child parameter unlocked by a parent parameter's option."""

    __tablename__ = "task_parameter_dependencies"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=_text_id)
    parent_parameter_id: Mapped[str] = mapped_column(
        Text, ForeignKey("task_parameters.id", ondelete="CASCADE"), nullable=False
    )
    parent_option_id: Mapped[str] = mapped_column(
        Text, ForeignKey("task_parameter_options.id", ondelete="CASCADE"), nullable=False
    )
    child_parameter_id: Mapped[str] = mapped_column(
        Text, ForeignKey("task_parameters.id", ondelete="CASCADE"), nullable=False
    )

    __table_args__ = (
        UniqueConstraint(
            "parent_parameter_id",
            "parent_option_id",
            "child_parameter_id",
            name="uq_parameter_dependency",
        ),
    )


class GeneratedTaskModel(Base):
    """Task generated from a template and parameter choices."""

    __tablename__ = "generated_tasks"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    code: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    template_id: Mapped[str | None] = mapped_column(
        Text, ForeignKey("task_templates.id", ondelete="SET NULL"), index=True
    )
    category_id: Mapped[str | None] = mapped_column(Text, index=True)
    unit_id: Mapped[str | None] = mapped_column(Text)

    # Choices: {parameter_slug: option_id}, plus the editor's saved order
    param_values: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    param_order: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    signature: Mapped[str] = mapped_column(Text, nullable=False, index=True)

    # Rendered description, materialized on create/edit
    display_name: Mapped[str | None] = mapped_column(Text)
    custom_name: Mapped[str | None] = mapped_column(Text)

    # Ownership
    is_system: Mapped[bool] = mapped_column(nullable=False, default=True)
    organization_id: Mapped[str | None] = mapped_column(Text, index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), onupdate=_utcnow, nullable=False
    )

    __table_args__ = (
        Index("idx_generated_tasks_org_created", "organization_id", "created_at"),
    )


class MaterialModel(Base):
    """Material with its resolved average unit price."""

    __tablename__ = "materials"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=_text_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    unit_name: Mapped[str | None] = mapped_column(Text)
    avg_price: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))
    currency: Mapped[str | None] = mapped_column(String(3))


class LaborTypeModel(Base):
    """Labor type with its resolved average unit rate."""

    __tablename__ = "labor_types"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=_text_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    unit_name: Mapped[str | None] = mapped_column(Text)
    avg_price: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))
    currency: Mapped[str | None] = mapped_column(String(3))


class TaskMaterialModel(Base):
    """Material quantity consumed per unit of a generated task."""

    __tablename__ = "task_materials"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    task_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("generated_tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    material_id: Mapped[str] = mapped_column(
        Text, ForeignKey("materials.id", ondelete="CASCADE"), nullable=False
    )
    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False, default=Decimal("0"))
    organization_id: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="check_task_material_quantity_non_negative"),
    )


class TaskLaborModel(Base):
    """Labor quantity consumed per unit of a generated task."""

    __tablename__ = "task_labor"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    task_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("generated_tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    labor_type_id: Mapped[str] = mapped_column(
        Text, ForeignKey("labor_types.id", ondelete="CASCADE"), nullable=False
    )
    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False, default=Decimal("0"))
    organization_id: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="check_task_labor_quantity_non_negative"),
    )
