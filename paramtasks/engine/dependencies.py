"""Parameter dependency helpers for the task builder.

A dependency says: once parent parameter P is set to option O, child
parameter C may be offered. Dependencies only drive which parameters are
offered next. Rendering never rejects a selection whose parent is missing;
orphaned_selections() exists so callers can warn about them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from paramtasks.models import Parameter, ParameterDependency

logger = logging.getLogger(__name__)


def available_parameters(
    selections: Mapping[str, str],
    parameters: Iterable[Parameter],
    dependencies: Iterable[ParameterDependency],
    root_slug: str = "tipo_tarea",
) -> list[str]:
    """Return ids of the parameters that can be offered for the current selections.

    Args:
        selections: Parameter id -> chosen option id
        parameters: Parameter catalog
        dependencies: Declared parent-option -> child edges
        root_slug: Slug of the parameter that is always offered

    Returns:
        Parameter ids: selected ones first, then the root (if unselected),
        then children unlocked by a selected parent option
    """
    available: list[str] = list(dict.fromkeys(selections))

    root = next((p for p in parameters if p.slug == root_slug), None)
    if root is not None and root.id not in selections and root.id not in available:
        available.append(root.id)

    dependencies = list(dependencies)
    for parent_id, option_id in selections.items():
        for dep in dependencies:
            if dep.parent_parameter_id != parent_id or dep.parent_option_id != option_id:
                continue
            if dep.child_parameter_id in selections or dep.child_parameter_id in available:
                continue
            available.append(dep.child_parameter_id)

    return available


def orphaned_selections(
    selections: Mapping[str, str],
    dependencies: Iterable[ParameterDependency],
) -> list[str]:
    """Return selected child parameter ids none of whose declared parents unlock them.

    A parameter with no incoming dependency is never orphaned.
    """
    parents_by_child: dict[str, list[ParameterDependency]] = {}
    for dep in dependencies:
        parents_by_child.setdefault(dep.child_parameter_id, []).append(dep)

    orphaned: list[str] = []
    for child_id in selections:
        deps = parents_by_child.get(child_id)
        if not deps:
            continue
        if not any(selections.get(dep.parent_parameter_id) == dep.parent_option_id for dep in deps):
            orphaned.append(child_id)

    if orphaned:
        logger.info(f"{len(orphaned)} selection(s) set without their parent option")
    return orphaned


def selections_by_parameter_id(
    param_values: Mapping[str, str], parameters: Iterable[Parameter]
) -> dict[str, str]:
    """Re-key a slug -> option id map by parameter id."""
    ids = {p.slug: p.id for p in parameters}
    return {ids[slug]: option_id for slug, option_id in param_values.items() if slug in ids}
