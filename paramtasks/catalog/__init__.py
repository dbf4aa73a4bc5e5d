"""Catalog persistence adapters and generated task operations."""

from paramtasks.catalog.lookup import ReferenceLookup, StaticLookup
from paramtasks.catalog.repository import (
    fetch_generated_task,
    fetch_generated_tasks,
    fetch_task_lines,
    load_catalog,
    load_reference_lookup,
)
from paramtasks.catalog.service import (
    TaskNotFoundError,
    build_task_view,
    create_generated_task,
    describe_task,
    editor_chain,
    list_task_views,
    materialize_display_names,
    offered_parameters,
    task_cost,
    update_generated_task,
)

__all__ = [
    "ReferenceLookup",
    "StaticLookup",
    "TaskNotFoundError",
    "build_task_view",
    "create_generated_task",
    "describe_task",
    "editor_chain",
    "fetch_generated_task",
    "fetch_generated_tasks",
    "fetch_task_lines",
    "list_task_views",
    "load_catalog",
    "load_reference_lookup",
    "materialize_display_names",
    "offered_parameters",
    "task_cost",
    "update_generated_task",
]
