"""Task code and identity helpers.

Codes are sequential, zero-padded numbers ("000001", "000002", ...).
The param_values signature is a deterministic 16-character hash used to
detect a task that already exists with exactly the same choices.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable, Mapping


def next_task_code(existing_codes: Iterable[str | None], width: int = 6) -> str:
    """Return the code following the greatest all-digit code.

    Non-numeric codes are ignored; with no numeric codes the sequence starts at 1.
    """
    highest = 0
    for code in existing_codes:
        if code and code.isdigit():
            highest = max(highest, int(code))
    return str(highest + 1).zfill(width)


def param_values_signature(param_values: Mapping[str, str]) -> str:
    """Generate a deterministic signature of a param_values map.

    Key construction: JSON of the sorted, non-empty (slug, option id) pairs.

    Returns:
        16-character SHA256 hash prefix
    """
    pairs = sorted(
        (str(slug), str(option_id))
        for slug, option_id in param_values.items()
        if option_id not in (None, "")
    )
    key_string = json.dumps(pairs, ensure_ascii=False, separators=(",", ":"))
    return hashlib.sha256(key_string.encode("utf-8")).hexdigest()[:16]
