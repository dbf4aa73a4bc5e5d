"""Description rendering for generated tasks.

Builds the canonical task description:
    {base_name} {fragment_1} {fragment_2} ... .

where each fragment is the parameter's expression template with its
placeholder replaced by the chosen option label.

Cleanup rules (applied to the joined text):
- Whitespace runs collapse to a single space
- Repeated commas and repeated periods collapse to one
- A trailing comma becomes a period; otherwise a period is appended if missing
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from uuid import UUID

from paramtasks.engine.models import ResolvedParam

DEFAULT_PLACEHOLDER = "{value}"
DEFAULT_TASK_LABEL = "Tarea"

_WHITESPACE = re.compile(r"\s+")
_REPEATED_COMMAS = re.compile(r",\s*,")
_REPEATED_PERIODS = re.compile(r"\.\s*\.")


def expand_template(
    template: str | None, value: str, placeholder: str = DEFAULT_PLACEHOLDER
) -> str:
    """Substitute value into the first placeholder of template.

    A missing or blank template renders the bare value.
    """
    if not template or not template.strip():
        template = placeholder
    return template.replace(placeholder, value, 1)


def short_id(task_id: UUID | str, length: int = 8) -> str:
    """Stable short identifier for fallback labels."""
    return str(task_id).replace("-", "")[:length]


def finish_sentence(text: str) -> str:
    """Normalize spacing and punctuation, guaranteeing a terminal period."""
    text = _WHITESPACE.sub(" ", text).strip()
    text = _REPEATED_COMMAS.sub(",", text)
    text = _REPEATED_PERIODS.sub(".", text)

    if not text:
        return text
    if text.endswith(","):
        text = text[:-1].rstrip()
        if not text:
            return text
    if not text.endswith("."):
        text += "."
    return text


def render(
    base_name: str | None,
    resolved: Iterable[ResolvedParam],
    *,
    task_id: UUID | str | None = None,
    placeholder: str = DEFAULT_PLACEHOLDER,
    default_label: str = DEFAULT_TASK_LABEL,
    short_id_length: int = 8,
) -> str:
    """Render the canonical description for a resolved parameter chain.

    Args:
        base_name: Template/category base name (may be blank)
        resolved: Output of resolve(), already ordered by position
        task_id: Used for the "Tarea {short_id}." fallback
        placeholder: Placeholder token inside expression templates
        default_label: Label used when there is nothing else to show

    Returns:
        Non-empty description ending in a period
    """
    fragments = [
        expand_template(param.expression_template, param.option_label, placeholder)
        for param in resolved
    ]

    parts = [base_name.strip()] if base_name and base_name.strip() else []
    parts.extend(fragments)

    text = finish_sentence(" ".join(parts))
    if text:
        return text

    if task_id is not None:
        return f"{default_label} {short_id(task_id, short_id_length)}."
    return f"{default_label}."
