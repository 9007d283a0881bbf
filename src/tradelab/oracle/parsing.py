"""Extraction of JSON payloads embedded in free-form oracle text."""

import json
import re
from typing import Any, Dict, List

from ..exceptions import OracleResponseError

_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")


def _extract(text: str, pattern: re.Pattern, kind: str) -> Any:
    match = pattern.search(text or "")
    if not match:
        raise OracleResponseError(f"No JSON {kind} found in oracle response")
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise OracleResponseError(
            f"Malformed JSON {kind} in oracle response: {e}",
            details={"excerpt": match.group(0)[:200]},
        ) from e


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Parse the span from the first ``{`` to the last ``}`` in the text.

    Raises:
        OracleResponseError: If there is no such span or it is not a JSON object
    """
    value = _extract(text, _OBJECT_PATTERN, "object")
    if not isinstance(value, dict):
        raise OracleResponseError("Oracle response JSON is not an object")
    return value


def extract_json_array(text: str) -> List[Any]:
    """
    Parse the span from the first ``[`` to the last ``]`` in the text.

    Raises:
        OracleResponseError: If there is no such span or it is not a JSON array
    """
    value = _extract(text, _ARRAY_PATTERN, "array")
    if not isinstance(value, list):
        raise OracleResponseError("Oracle response JSON is not an array")
    return value
