from __future__ import annotations

import json
import re
from typing import Any, Iterable, Mapping

from app.core.errors import BadQueryError
from app.schemas.query import RESERVED_KEYS, FieldCondition

OPERATORS = ("gt", "gte", "lt", "lte", "in")

_BRACKET_RE = re.compile(r"^(?P<field>[^\[\]]+)\[(?P<op>[^\[\]]+)\]$")


def _operator_name(key: str) -> str | None:
    name = key[1:] if key.startswith("$") else key
    return name if name in OPERATORS else None


def _in_values(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return [value]


def _conditions_for_field(field: str, raw_condition: Any) -> list[FieldCondition]:
    if not isinstance(raw_condition, dict):
        return [FieldCondition(field=field, op="eq", value=raw_condition)]
    if not raw_condition:
        raise BadQueryError("invalidFilterOperator", field=field)
    conditions = []
    for key, value in raw_condition.items():
        op = _operator_name(str(key))
        if op is None:
            # Only operator keys are interpreted; anything else is not a comparison.
            raise BadQueryError("invalidFilterOperator", field=field)
        if op == "in":
            value = _in_values(value)
        elif isinstance(value, (dict, list)):
            raise BadQueryError("invalidFilterValue", field=field)
        conditions.append(FieldCondition(field=field, op=op, value=value))
    return conditions


def parse_filter_expression(expression: Mapping[str, Any]) -> list[FieldCondition]:
    """Walk a structured filter object and return one condition per field/operator pair."""
    if not isinstance(expression, Mapping):
        raise BadQueryError("invalidFilter")
    conditions: list[FieldCondition] = []
    for field, raw_condition in expression.items():
        field = str(field).strip()
        if not field:
            raise BadQueryError("invalidFilter")
        conditions.extend(_conditions_for_field(field, raw_condition))
    return conditions


def parse_filter_json(raw: str) -> list[FieldCondition]:
    try:
        expression = json.loads(raw)
    except (TypeError, ValueError):
        raise BadQueryError("invalidFilter")
    if not isinstance(expression, dict):
        raise BadQueryError("invalidFilter")
    return parse_filter_expression(expression)


def parse_query_params(params: Mapping[str, str]) -> list[FieldCondition]:
    """Implicit filters from the non-reserved query keys.

    ``field=value`` is an equality, ``field[gt]=value`` a comparison and
    ``field[in]=a,b`` a membership test.
    """
    conditions: list[FieldCondition] = []
    for key, value in params.items():
        if key in RESERVED_KEYS:
            continue
        match = _BRACKET_RE.match(key)
        if match is None:
            conditions.append(FieldCondition(field=key, op="eq", value=value))
            continue
        field = match.group("field").strip()
        op = _operator_name(match.group("op").strip())
        if op is None:
            raise BadQueryError("invalidFilterOperator", field=field)
        conditions.append(FieldCondition(field=field, op=op, value=_in_values(value) if op == "in" else value))
    return conditions


def unknown_fields(conditions: Iterable[FieldCondition], known: Iterable[str]) -> list[str]:
    known_set = set(known)
    return sorted({c.field for c in conditions if c.field not in known_set})
