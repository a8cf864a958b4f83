"""Payload fragments for entity webhooks."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any


def for_post(post_type: str) -> dict[str, Any]:
    return {"post_type": post_type}


def for_term(taxonomy: str) -> dict[str, Any]:
    return {"taxonomy": taxonomy}


def for_user(roles: Iterable[str]) -> dict[str, Any]:
    return {"roles": list(roles)}


def from_field(field: Mapping[str, Any]) -> dict[str, Any]:
    """Custom-field context: key and name, when they are strings."""
    out: dict[str, Any] = {}
    if isinstance(field.get("key"), str):
        out["field_key"] = field["key"]
    if isinstance(field.get("name"), str):
        out["field_name"] = field["name"]
    return out


def meta_id(object_type: str, object_id: int | str, meta_key: str) -> str:
    """Stable id for a meta event so dedup works per key."""
    return f"{object_type}:{object_id}:{meta_key}"
