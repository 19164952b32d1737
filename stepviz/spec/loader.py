"""Load authored spec documents into DiagramSpec models."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from jsonschema import Draft202012Validator
from pydantic import ValidationError

from stepviz.spec.models import DiagramSpec
from stepviz.utils.file_utils import read_json_file

_ID_LIST = {"type": "array", "items": {"type": "string"}}

# Only the shape every layout needs; everything else is validated by the models.
# Optional sections may be null and default to empty in the models.
SPEC_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["title", "nodes", "edges"],
    "properties": {
        "id": {"type": "string"},
        "title": {"type": "string", "minLength": 1},
        "layout": {
            "type": ["object", "null"],
            "properties": {"type": {"type": "string"}, "numbered": {"type": "boolean"}},
        },
        "nodes": {
            "type": "array",
            "minItems": 1,
            "items": {"type": "object", "required": ["id"], "properties": {"id": {"type": "string"}}},
        },
        "edges": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "from", "to"],
                "properties": {"id": {"type": "string"}, "from": {"type": "string"}, "to": {"type": "string"}},
            },
        },
        "overlays": {
            "type": ["array", "null"],
            "items": {"type": "object", "required": ["id"], "properties": {"diff": {"type": "object"}}},
        },
        "scenes": {
            "type": ["array", "null"],
            "items": {"type": "object", "required": ["id"], "properties": {"overlays": _ID_LIST}},
        },
    },
    "additionalProperties": True,
}

_VALIDATOR = Draft202012Validator(SPEC_SCHEMA)


class SpecLoadError(ValueError):
    """Raised when a document is not a usable diagram spec."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []


def schema_errors(data: Any) -> List[str]:
    errors = []
    for err in sorted(_VALIDATOR.iter_errors(data), key=lambda e: list(e.absolute_path)):
        location = "/".join(str(p) for p in err.absolute_path) or "<root>"
        errors.append(f"{location}: {err.message}")
    return errors


def parse_spec(data: Any, default_id: Optional[str] = None) -> DiagramSpec:
    """Validate a decoded JSON document and build a DiagramSpec.

    ``default_id`` fills in a missing ``id`` (the loader passes the file stem).
    """
    errors = schema_errors(data)
    if errors:
        raise SpecLoadError(f"Invalid spec: {errors[0]}", errors)
    if not data.get("id") and default_id:
        data = {**data, "id": default_id}
    try:
        return DiagramSpec.model_validate(data)
    except ValidationError as exc:
        messages = [f"{'/'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors()]
        raise SpecLoadError(f"Invalid spec: {messages[0]}", messages) from exc


def load_spec(path: str | Path) -> DiagramSpec:
    p = Path(path)
    try:
        data = read_json_file(p)
    except ValueError as exc:
        raise SpecLoadError(f"Spec {p.name} is not valid JSON: {exc}") from exc
    return parse_spec(data, default_id=p.stem)
