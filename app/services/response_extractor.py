"""
Response Extractor

Pulls the JSON object out of free-form model output. The model is asked for a
single JSON object but sometimes wraps it in prose or code fences, or emits
slightly malformed JSON.
"""

import json
import logging
import re
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

_BARE_KEY_RE = re.compile(r"([{,]\s*)([A-Za-z_]\w*)\s*:")
_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")


def _repair(candidate: str) -> str:
    repaired = candidate.replace("'", '"')
    repaired = _BARE_KEY_RE.sub(r'\1"\2":', repaired)
    return _TRAILING_COMMA_RE.sub(r"\1", repaired)


def _loads_object(candidate: str) -> Optional[Dict[str, Any]]:
    parsed = json.loads(candidate)
    return parsed if isinstance(parsed, dict) else None


def extract_first_json(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Return the JSON object spanning the first ``{`` to the last ``}`` of ``text``.

    A strict parse is tried first, then one repair pass (quote style, bare keys,
    trailing commas) and a single retry. Returns None when nothing usable is
    found; never raises.
    """
    if not text:
        return None

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        logger.warning("No JSON object in model output")
        return None

    candidate = text[start:end + 1]
    try:
        return _loads_object(candidate)
    except json.JSONDecodeError as e:
        logger.debug(f"Strict JSON parse failed: {e}")

    try:
        parsed = _loads_object(_repair(candidate))
    except json.JSONDecodeError as e:
        logger.warning(f"Could not parse JSON from model output after repair: {e}")
        return None

    if parsed is not None:
        logger.info("Parsed model JSON after repair")
    return parsed


def strip_json_fragments(text: str) -> str:
    """Remove ``{...}`` fragments and code fences, leaving the prose."""
    cleaned = re.sub(r"```(?:json)?", "", text or "", flags=re.IGNORECASE)
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        cleaned = cleaned[:start] + cleaned[end + 1:]
    return re.sub(r"\s+\n|\n\s+", "\n", cleaned).strip()
