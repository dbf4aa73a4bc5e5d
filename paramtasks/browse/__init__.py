"""Branch grouping and search over generated tasks."""

from paramtasks.browse.branches import (
    UNCATEGORIZED,
    TaskBranch,
    branch_id,
    branch_label,
    build_branches,
    filter_tasks,
    group_by_branch,
    task_matches,
)

__all__ = [
    "UNCATEGORIZED",
    "TaskBranch",
    "branch_id",
    "branch_label",
    "build_branches",
    "filter_tasks",
    "group_by_branch",
    "task_matches",
]
