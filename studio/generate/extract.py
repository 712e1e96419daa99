# Recover a JSON object from free-form model text.
#
# Order of attempts:
#   1) fenced block (```json ... ``` or bare ``` ... ```) whose body is an object
#   2) greedy span from the first "{" to the last "}"
# The caller always keeps the raw text; this module never raises on bad input.

from __future__ import annotations

import json
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

_FENCE = re.compile(r"```(?:json|JSON)?[ \t]*\r?\n(.*?)```", re.DOTALL)

PROJECT_PLAN_KEYS = (
    "analysis",
    "architecture",
    "fileStructure",
    "dependencies",
    "commands",
    "features",
    "nextSteps",
)


def _reject_constant(name: str):
    # NaN / Infinity / -Infinity are not JSON and cannot be re-serialized in a response
    raise ValueError(f"non-standard constant {name}")


def _loads_object(candidate: str) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    try:
        value = json.loads(candidate, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        return None, f"invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})"
    except ValueError as e:
        return None, f"invalid JSON: {e}"
    except RecursionError:
        return None, "invalid JSON: nesting too deep"
    if not isinstance(value, dict):
        return None, f"expected a JSON object, got {type(value).__name__}"
    return value, None


def extract_json_object(text: str) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """Return ``(obj, None)`` on success or ``(None, reason)`` on failure."""
    for block in _FENCE.findall(text or ""):
        obj, _ = _loads_object(block.strip())
        if obj is not None:
            return obj, None

    start = text.find("{") if text else -1
    end = text.rfind("}") if text else -1
    if start == -1 or end == -1 or end < start:
        return None, "no JSON object found in model output"
    return _loads_object(text[start:end + 1])


def missing_keys(obj: Dict[str, Any], expected: Iterable[str] = PROJECT_PLAN_KEYS) -> List[str]:
    return [k for k in expected if k not in obj]
