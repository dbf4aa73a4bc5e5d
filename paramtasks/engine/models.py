"""Data structures passed between the resolve, render and browse stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from paramtasks.models import Parameter, ParameterDependency, ParameterOption


@dataclass(frozen=True, slots=True)
class ResolvedParam:
    slug: str
    label: str
    option_label: str
    position: int
    expression_template: str | None = None
    option_id: str | None = None


@dataclass(frozen=True, slots=True)
class OptionNotFound:
    """Lookup miss for an option id referenced from param_values."""

    option_id: str


@dataclass(slots=True)
class TaskView:
    """A generated task joined with its resolved chain, for browsing."""

    id: str
    code: str
    display_name: str
    resolved: list[ResolvedParam] = field(default_factory=list)
    unit_name: str | None = None
    category_name: str | None = None

    @property
    def branch_param(self) -> ResolvedParam | None:
        if not self.resolved:
            return None
        return min(self.resolved, key=lambda param: param.position)


@dataclass(slots=True)
class CatalogSnapshot:
    """Parameters, options and dependencies fetched at one point in time."""

    parameters: list[Parameter] = field(default_factory=list)
    options: Mapping[str, ParameterOption] = field(default_factory=dict)
    dependencies: list[ParameterDependency] = field(default_factory=list)

    def parameter_by_slug(self, slug: str) -> Parameter | None:
        for parameter in self.parameters:
            if parameter.slug == slug:
                return parameter
        return None
