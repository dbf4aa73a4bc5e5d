"""Reference lookups for template, category and unit names.

Options and tasks only carry foreign keys; names are resolved through an
injected lookup so the engine never reaches for global state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Protocol


class ReferenceLookup(Protocol):
    def template_name(self, template_id: str | None) -> str | None: ...

    def category_name(self, category_id: str | None) -> str | None: ...

    def unit_name(self, unit_id: str | None) -> str | None: ...


@dataclass(slots=True)
class StaticLookup:
    """In-memory ReferenceLookup built from already-fetched rows."""

    templates: Mapping[str, str] = field(default_factory=dict)
    categories: Mapping[str, str] = field(default_factory=dict)
    units: Mapping[str, str] = field(default_factory=dict)

    def template_name(self, template_id: str | None) -> str | None:
        return self.templates.get(template_id) if template_id else None

    def category_name(self, category_id: str | None) -> str | None:
        return self.categories.get(category_id) if category_id else None

    def unit_name(self, unit_id: str | None) -> str | None:
        return self.units.get(unit_id) if unit_id else None
