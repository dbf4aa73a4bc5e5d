"""Parameter-chain resolution and description rendering."""

from paramtasks.engine.codes import next_task_code, param_values_signature
from paramtasks.engine.dependencies import available_parameters, orphaned_selections
from paramtasks.engine.models import CatalogSnapshot, OptionNotFound, ResolvedParam, TaskView
from paramtasks.engine.renderer import render
from paramtasks.engine.resolver import (
    lookup_option,
    normalize_param_values,
    order_slugs,
    parse_param_values,
    resolve,
)

__all__ = [
    "CatalogSnapshot",
    "OptionNotFound",
    "ResolvedParam",
    "TaskView",
    "available_parameters",
    "lookup_option",
    "next_task_code",
    "normalize_param_values",
    "order_slugs",
    "orphaned_selections",
    "param_values_signature",
    "parse_param_values",
    "render",
    "resolve",
]
