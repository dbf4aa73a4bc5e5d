"""paramtasks Pydantic models for type-safe catalog snapshots.

These are the rows the engine consumes from the external store. The engine
never writes them; see paramtasks.catalog.service for the host-side writes.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CostScope(str, Enum):
    """Which line families contribute to a task's unit cost."""

    MATERIALS_ONLY = "materials_only"
    LABOR_ONLY = "labor_only"
    MATERIALS_AND_LABOR = "materials_and_labor"


class Parameter(BaseModel):
    """Task parameter definition (e.g. "tipo_ladrillo")."""

    id: str
    slug: str
    label: str
    position: int = 0
    expression_template: str | None = "{value}"

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "p-elemento",
                "slug": "tipo_elemento",
                "label": "Tipo de elemento",
                "position": 0,
                "expression_template": "Elemento de {value}",
            }
        }
    )

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("slug must be non-empty")
        return v


class ParameterOption(BaseModel):
    """Allowed value of one parameter."""

    id: str
    parameter_id: str
    label: str
    name: str | None = None
    category_id: str | None = None
    unit_id: str | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "o-pared",
                "parameter_id": "p-elemento",
                "label": "pared",
                "name": "pared",
            }
        }
    )


class ParameterDependency(BaseModel):
    """A child parameter unlocked by a specific option of a parent parameter."""

    parent_parameter_id: str
    parent_option_id: str
    child_parameter_id: str


class GeneratedTask(BaseModel):
    """Task generated from a template and a set of parameter choices."""

    id: UUID = Field(default_factory=uuid4)
    template_id: str | None = None
    category_id: str | None = None
    unit_id: str | None = None
    param_values: dict[str, str] = Field(default_factory=dict)
    param_order: list[str] = Field(default_factory=list)
    code: str | None = None
    display_name: str | None = None
    custom_name: str | None = None
    is_system: bool = True
    organization_id: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CostLine(BaseModel):
    """Shared shape of material and labor lines (joined with their pricing view)."""

    id: UUID = Field(default_factory=uuid4)
    task_id: UUID | None = None
    resource_id: str | None = None
    name: str | None = None
    unit_name: str | None = None
    quantity: Decimal = Decimal("0")
    unit_price: Decimal | None = None  # None = price not yet set
    currency: str | None = None

    @field_validator("quantity")
    @classmethod
    def validate_quantity(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("quantity must be non-negative")
        return v


class MaterialLine(CostLine):
    """Material consumed per unit of a generated task."""


class LaborLine(CostLine):
    """Labor consumed per unit of a generated task."""
