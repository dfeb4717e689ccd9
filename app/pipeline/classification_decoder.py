"""Repairs and decodes the free-text reply of the classification model."""

import json
from typing import Any

import json_repair

from app.pipeline.exceptions import ClassificationDecodeError
from app.pipeline.models import ClassificationResult

_DESCRIPTION_KEYS = ("desc", "description")


def repair_json_text(raw: str) -> str:
    """Normalize near-JSON text into a JSON string.

    Surrounding prose and code fences are dropped, single quotes, unquoted
    keys, missing commas and truncated objects are fixed where possible.
    Text without any JSON-like content comes back as an empty JSON string.
    """
    return json_repair.repair_json(raw.strip())


def decode_classification(raw: str) -> ClassificationResult:
    """Repair the model reply and decode it into a ClassificationResult.

    Raises:
        ClassificationDecodeError: if the reply holds no recoverable JSON
            object with classification fields.
    """
    if not raw or not raw.strip():
        raise ClassificationDecodeError("Classification reply is empty", raw_text=raw)

    repaired = repair_json_text(raw)
    try:
        parsed = json.loads(repaired)
    except json.JSONDecodeError as exc:
        raise ClassificationDecodeError(
            f"Repaired classification is not valid JSON: {exc}", raw_text=raw
        ) from exc

    data = _first_object(parsed)
    if data is None:
        raise ClassificationDecodeError(
            "Classification reply contains no JSON object", raw_text=raw
        )
    if "tags" not in data and not any(key in data for key in _DESCRIPTION_KEYS):
        raise ClassificationDecodeError(
            "Classification object has neither 'tags' nor 'desc'", raw_text=raw
        )

    return ClassificationResult(
        tags=_build_tags(data.get("tags")),
        description=_build_description(data),
    )


def _first_object(parsed: Any) -> dict[str, Any] | None:
    if isinstance(parsed, dict):
        return parsed
    # several JSON fragments in one reply come back as a list
    if isinstance(parsed, list):
        for item in parsed:
            if isinstance(item, dict):
                return item
    return None


def _build_tags(raw: Any) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = raw.split(",")
    if not isinstance(raw, list):
        return []
    tags: list[str] = []
    for item in raw:
        if item is None or isinstance(item, (dict, list)):
            continue
        tag = str(item).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def _build_description(data: dict[str, Any]) -> str:
    for key in _DESCRIPTION_KEYS:
        value = data.get(key)
        if value is not None:
            return str(value).strip()
    return ""
