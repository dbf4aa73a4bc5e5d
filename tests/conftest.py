"""Pytest configuration and fixtures for paramtasks tests.

Provides a small masonry catalog shared by unit and integration tests.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from paramtasks.config import reset_config
from paramtasks.engine.models import CatalogSnapshot, ResolvedParam, TaskView
from paramtasks.models import (
    LaborLine,
    MaterialLine,
    Parameter,
    ParameterDependency,
    ParameterOption,
)


@pytest.fixture
def parameters() -> list[Parameter]:
    """Element type -> brick type, as in the masonry template."""
    return [
        Parameter(
            id="p-elemento",
            slug="tipo_elemento",
            label="Tipo de elemento",
            position=0,
            expression_template="Elemento de {value}",
        ),
        Parameter(
            id="p-ladrillo",
            slug="tipo_ladrillo",
            label="Tipo de ladrillo",
            position=1,
            expression_template="tipo {value}",
        ),
    ]


@pytest.fixture
def options() -> dict[str, ParameterOption]:
    return {
        "o1": ParameterOption(id="o1", parameter_id="p-elemento", label="pared", name="pared"),
        "o2": ParameterOption(id="o2", parameter_id="p-ladrillo", label="hueco", name="hueco"),
        "o3": ParameterOption(id="o3", parameter_id="p-ladrillo", label="macizo", name="macizo"),
    }


@pytest.fixture
def dependencies() -> list[ParameterDependency]:
    return [
        ParameterDependency(
            parent_parameter_id="p-elemento",
            parent_option_id="o1",
            child_parameter_id="p-ladrillo",
        )
    ]


@pytest.fixture
def catalog(parameters, options, dependencies) -> CatalogSnapshot:
    return CatalogSnapshot(parameters=parameters, options=options, dependencies=dependencies)


@pytest.fixture
def make_view():
    """Build a TaskView from (slug, option_label, position) tuples."""

    def _make(task_id: str, display_name: str, chain=(), category_name=None) -> TaskView:
        return TaskView(
            id=task_id,
            code=task_id.zfill(6),
            display_name=display_name,
            resolved=[
                ResolvedParam(
                    slug=slug,
                    label=slug.replace("_", " ").capitalize(),
                    option_label=option_label,
                    position=position,
                )
                for slug, option_label, position in chain
            ],
            category_name=category_name,
        )

    return _make


@pytest.fixture
def material_lines() -> list[MaterialLine]:
    return [
        MaterialLine(name="Ladrillo hueco 12x18x33", quantity=Decimal("16"), unit_price=Decimal("450.00"), currency="ARS"),
        MaterialLine(name="Mortero", quantity=Decimal("0.025"), unit_price=Decimal("52000.00"), currency="ARS"),
        MaterialLine(name="Hierro 6mm", quantity=Decimal("1.5"), unit_price=None, currency="ARS"),
    ]


@pytest.fixture
def labor_lines() -> list[LaborLine]:
    return [
        LaborLine(name="Oficial", quantity=Decimal("0.8"), unit_price=Decimal("9500.00"), currency="ARS"),
        LaborLine(name="Ayudante", quantity=Decimal("0.8"), unit_price=Decimal("7800.00")),
    ]


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch):
    """Set up test environment variables."""
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("DEFAULT_ORG_ID", "test-org")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    reset_config()
    yield
    reset_config()
