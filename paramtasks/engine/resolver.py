"""Parameter-chain resolution.

Turns a task's stored param_values (parameter slug -> option id) into an
ordered list of ResolvedParam, following each parameter's position.

Resolution rules:
- Only parameters whose slug has a non-empty value are considered
- Order is position ascending, ties broken by slug (input order never matters)
- An option id with no matching option is skipped, never raised
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from paramtasks.engine.models import OptionNotFound, ResolvedParam
from paramtasks.models import Parameter, ParameterOption

logger = logging.getLogger(__name__)


def parse_param_values(raw: Any) -> dict[str, str]:
    """Parse a stored param_values blob into a slug -> option id map.

    Accepts a mapping, a JSON object string, or None. Anything malformed
    yields an empty map so one bad row cannot break a task list.

    Args:
        raw: Value read from the store's JSON column

    Returns:
        Map of parameter slug to option id (empty values dropped)
    """
    if raw is None:
        return {}

    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning("param_values is not valid JSON; treating as empty")
            return {}

    if not isinstance(raw, Mapping):
        logger.warning(f"param_values has unexpected shape {type(raw).__name__}; treating as empty")
        return {}

    values: dict[str, str] = {}
    for slug, option_id in raw.items():
        if option_id is None or isinstance(option_id, (dict, list)):
            continue
        option_id = str(option_id).strip()
        if option_id:
            values[str(slug)] = option_id
    return values


def lookup_option(
    options: Mapping[str, ParameterOption], option_id: str
) -> ParameterOption | OptionNotFound:
    """Look up an option by id, returning OptionNotFound on a miss."""
    option = options.get(option_id)
    if option is None:
        return OptionNotFound(option_id)
    return option


def resolve(
    param_values: Mapping[str, str],
    parameters: Iterable[Parameter],
    options: Mapping[str, ParameterOption],
) -> list[ResolvedParam]:
    """Resolve chosen options into an ordered parameter chain.

    Args:
        param_values: Parameter slug -> chosen option id
        parameters: Parameter catalog (any order)
        options: Option id -> option

    Returns:
        Resolved parameters sorted by position; unresolvable entries omitted
    """
    if not param_values:
        return []

    selected = [p for p in parameters if param_values.get(p.slug)]
    selected.sort(key=lambda p: (p.position, p.slug))

    lookups = [(p, lookup_option(options, param_values[p.slug])) for p in selected]

    resolved: list[ResolvedParam] = []
    for parameter, option in lookups:
        if isinstance(option, OptionNotFound):
            logger.debug(
                f"Skipping parameter {parameter.slug!r}: option {option.option_id!r} not found"
            )
            continue
        resolved.append(
            ResolvedParam(
                slug=parameter.slug,
                label=parameter.label,
                option_label=option.label,
                position=parameter.position,
                expression_template=parameter.expression_template,
                option_id=option.id,
            )
        )

    return resolved


def normalize_param_values(
    raw: Mapping[str, str],
    parameters: Iterable[Parameter],
    options: Mapping[str, ParameterOption],
) -> dict[str, str]:
    """Rewrite legacy param_values entries into slug -> option id form.

    Older rows are keyed by parameter id instead of slug, and some store the
    option label instead of its id. Keys are mapped id -> slug; values are
    matched by id, then exact label/name, then case-insensitive label/name,
    always within the parameter's own options. Entries that cannot be mapped
    are kept unchanged so the resolver skips them.
    """
    parameters = list(parameters)
    by_id = {p.id: p for p in parameters}
    by_slug = {p.slug: p for p in parameters}

    normalized: dict[str, str] = {}
    for key, value in raw.items():
        parameter = by_slug.get(key) or by_id.get(key)
        if parameter is None:
            normalized[key] = value
            continue
        normalized[parameter.slug] = _match_option_id(parameter, value, options)
    return normalized


def _match_option_id(
    parameter: Parameter, value: str, options: Mapping[str, ParameterOption]
) -> str:
    candidates = [o for o in options.values() if o.parameter_id == parameter.id]

    for option in candidates:
        if option.id == value:
            return option.id

    for option in candidates:
        if value in (option.label, option.name):
            return option.id

    lowered = value.lower()
    for option in candidates:
        if option.label.lower() == lowered or (option.name or "").lower() == lowered:
            return option.id

    return value


def order_slugs(
    selected: Iterable[str],
    param_order: Iterable[str] | None,
    parameters: Iterable[Parameter],
) -> list[str]:
    """Order selected slugs for display: saved order first, then by position.

    Saved slugs that are no longer selected are dropped.
    """
    selected = list(dict.fromkeys(selected))
    positions = {p.slug: p.position for p in parameters}

    ordered = [slug for slug in (param_order or []) if slug in selected]
    ordered = list(dict.fromkeys(ordered))

    remaining = [slug for slug in selected if slug not in ordered]
    remaining.sort(key=lambda slug: (positions.get(slug, len(positions)), slug))

    return ordered + remaining
