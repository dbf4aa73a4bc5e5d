"""Hierarchical browsing of the generated task catalog.

Tasks are grouped by their "branch": the option label of the lowest-position
parameter in their resolved chain. Tasks with nothing resolved land in the
uncategorized group.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from paramtasks.engine.models import TaskView

UNCATEGORIZED = "Sin categoría"


@dataclass(slots=True)
class TaskBranch:
    id: str
    name: str
    category_name: str
    tasks: list[TaskView] = field(default_factory=list)

    @property
    def total_tasks(self) -> int:
        return len(self.tasks)


def branch_label(task: TaskView, uncategorized: str = UNCATEGORIZED) -> str:
    param = task.branch_param
    if param is None:
        return uncategorized
    return param.option_label


def branch_id(name: str) -> str:
    """Slug used as a stable key for a branch ("Muros de ladrillo" -> "muros-de-ladrillo")."""
    return re.sub(r"\s+", "-", name.strip().lower())


def group_by_branch(
    tasks: Iterable[TaskView], uncategorized: str = UNCATEGORIZED
) -> dict[str, list[TaskView]]:
    """Partition tasks by branch label.

    Returns:
        Dict ordered by branch label; tasks keep their input order within a group
    """
    groups: dict[str, list[TaskView]] = {}
    for task in tasks:
        groups.setdefault(branch_label(task, uncategorized), []).append(task)
    return {label: groups[label] for label in sorted(groups)}


def task_matches(task: TaskView, query: str, uncategorized: str = UNCATEGORIZED) -> bool:
    """Case-insensitive substring match on branch, display name, or any chain label."""
    needle = query.strip().casefold()
    if not needle:
        return True

    haystack = [branch_label(task, uncategorized), task.display_name or ""]
    for param in task.resolved:
        haystack.append(param.label)
        haystack.append(param.option_label)

    return any(needle in text.casefold() for text in haystack)


def filter_tasks(
    tasks: Iterable[TaskView], query: str | None, uncategorized: str = UNCATEGORIZED
) -> list[TaskView]:
    if not query or not query.strip():
        return list(tasks)
    return [task for task in tasks if task_matches(task, query, uncategorized)]


def build_branches(
    tasks: Iterable[TaskView],
    query: str | None = None,
    uncategorized: str = UNCATEGORIZED,
) -> list[TaskBranch]:
    """Filter, group and project tasks into TaskBranch rows for display."""
    groups = group_by_branch(filter_tasks(tasks, query, uncategorized), uncategorized)
    return [
        TaskBranch(
            id=branch_id(name),
            name=name,
            category_name=members[0].category_name or "",
            tasks=members,
        )
        for name, members in groups.items()
    ]
