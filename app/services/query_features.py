from __future__ import annotations

import logging
import math
from typing import Iterable, Sequence

from app.core.config import settings
from app.core.errors import BadQueryError
from app.schemas.query import FieldCondition, QueryDescriptor, ResultMetadata, ResultSet, SortKey
from app.services.collections import Collection
from app.services.filter_expression import parse_filter_json, parse_query_params, unknown_fields

_LOG = logging.getLogger("app.query")

# Largest OFFSET/LIMIT a 64-bit store accepts.
MAX_ROWS = 2**63 - 1


def _split_fields(raw: str | None) -> list[str]:
    return [part.strip() for part in str(raw or "").split(",") if part.strip()]


def parse_select(raw: str | None, known: Iterable[str]) -> list[str] | None:
    if raw is None:
        return None
    known_set = set(known)
    return [field for field in _split_fields(raw) if field in known_set]


def parse_sort(raw: str | None, known: Iterable[str]) -> list[SortKey]:
    known_set = set(known)
    keys: list[SortKey] = []
    seen: set[str] = set()
    for token in _split_fields(raw):
        direction = 1
        if token.startswith("-"):
            direction = -1
            token = token[1:].strip()
        elif token.startswith("+"):
            token = token[1:].strip()
        if not token or token not in known_set or token in seen:
            continue
        seen.add(token)
        keys.append(SortKey(field=token, direction=direction))
    return keys


def _positive_int(raw: str | None, default: int) -> int:
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return default
    if value < 1:
        return default
    return min(value, MAX_ROWS)


def resolve_pagination(page: str | None, limit: str | None) -> tuple[int, int]:
    return (
        _positive_int(page, settings.QUERY_DEFAULT_PAGE),
        _positive_int(limit, settings.QUERY_DEFAULT_LIMIT),
    )


def build_pagination_metadata(total_records: int, page: int, limit: int) -> ResultMetadata:
    return ResultMetadata(
        total_records=total_records,
        total_pages=math.ceil(total_records / limit) if limit else 0,
        per_page=limit,
        current_page=page,
    )


def collect_conditions(descriptor: QueryDescriptor) -> list[FieldCondition]:
    conditions = parse_query_params(descriptor.params)
    if descriptor.filter is not None:
        conditions.extend(parse_filter_json(descriptor.filter))
    return conditions


def run_query(
    descriptor: QueryDescriptor,
    collection: Collection,
    populate: str | None = None,
    base_conditions: Sequence[FieldCondition] = (),
) -> ResultSet:
    """Translate a query descriptor into count + find calls on ``collection``.

    ``base_conditions`` are fixed constraints set by the caller (for example
    "reviews of this user") and are AND-ed with the request's own filters.
    The total is counted on the filtered, unpaginated set before the page is
    fetched; the two reads are not atomic.
    """
    conditions = list(base_conditions) + collect_conditions(descriptor)
    known = collection.field_names()
    missing = unknown_fields(conditions, known)
    if missing:
        raise BadQueryError("unknownFilterField", field=missing[0])

    total_records = collection.count(conditions)

    projection = parse_select(descriptor.select, known)
    sort = parse_sort(descriptor.sort, known)
    page, limit = resolve_pagination(descriptor.page, descriptor.limit)

    records = collection.find(
        conditions,
        projection=projection,
        sort=sort,
        skip=min((page - 1) * limit, MAX_ROWS),
        limit=limit,
        populate=populate,
    )
    _LOG.debug(
        "query collection=%s conditions=%d sort=%s page=%d limit=%d total=%d returned=%d",
        collection.name,
        len(conditions),
        ",".join(f"{'-' if k.direction == -1 else ''}{k.field}" for k in sort),
        page,
        limit,
        total_records,
        len(records),
    )
    return ResultSet(records=records, metadata=build_pagination_metadata(total_records, page, limit))
