from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Protocol, Sequence

from sqlalchemy import asc, desc, inspect
from sqlalchemy.orm import Query, Session, load_only, selectinload

from app.core.errors import BadQueryError
from app.schemas.query import FieldCondition, SortKey

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


class Collection(Protocol):
    """A named resource that can be filtered, projected, sorted and paged."""

    name: str
    identity_field: str

    def field_names(self) -> list[str]: ...

    def count(self, conditions: Sequence[FieldCondition]) -> int: ...

    def find(
        self,
        conditions: Sequence[FieldCondition],
        projection: Sequence[str] | None = None,
        sort: Sequence[SortKey] = (),
        skip: int = 0,
        limit: int | None = None,
        populate: str | None = None,
    ) -> list[dict[str, Any]]: ...


def _bad_filter_value(field: str, kind: str) -> BadQueryError:
    return BadQueryError("invalidFilterValue", field=field, kind=kind)


def _coerce_bool_filter_value(field: str, value):
    if isinstance(value, bool):
        return value
    text = str(value if value is not None else "").strip().lower()
    if text in {"1", "true", "yes", "y", "on"}:
        return True
    if text in {"0", "false", "no", "n", "off"}:
        return False
    raise _bad_filter_value(field, "boolean")


def _parse_number(field: str, value) -> Decimal:
    if isinstance(value, bool):
        raise _bad_filter_value(field, "number")
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    else:
        text = str(value).strip().replace(",", ".")
        try:
            number = Decimal(text)
        except InvalidOperation:
            raise _bad_filter_value(field, "number")
    if not number.is_finite():
        raise _bad_filter_value(field, "number")
    return number


def _coerce_number_filter_value(field: str, value, python_type):
    if value is None:
        return None
    number = _parse_number(field, value)
    if python_type is Decimal:
        return number
    if python_type is int and number.adjusted() < 19 and number == number.to_integral_value():
        integral = int(number)
        if _INT64_MIN <= integral <= _INT64_MAX:
            return integral
    # Fractional or out-of-range bounds on integer columns stay numeric: "rating < 3.5" keeps 3.
    return float(number)


def _coerce_date_filter_value(field: str, value):
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    text = str(value or "").strip()
    if not text:
        raise _bad_filter_value(field, "date")
    try:
        if "T" in text or " " in text:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        return date.fromisoformat(text)
    except ValueError:
        raise _bad_filter_value(field, "date")


def _coerce_datetime_filter_value(field: str, value):
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value or "").strip()
        if not text:
            raise _bad_filter_value(field, "datetime")
        try:
            if "T" not in text and " " not in text and len(text) == 10:
                # Date-only value for a timestamp field means the start of that day.
                parsed = datetime.combine(date.fromisoformat(text), datetime.min.time())
            else:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            raise _bad_filter_value(field, "datetime")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def coerce_value(field: str, python_type, value):
    """Convert a raw filter value to ``python_type``; unknown types pass through."""
    if value is None or python_type is None:
        return value
    if python_type is uuid.UUID:
        if isinstance(value, uuid.UUID):
            return value
        try:
            return uuid.UUID(str(value).strip())
        except ValueError:
            raise _bad_filter_value(field, "uuid")
    if python_type is bool:
        return _coerce_bool_filter_value(field, value)
    if python_type in {int, float, Decimal}:
        return _coerce_number_filter_value(field, value, python_type)
    if python_type is datetime:
        return _coerce_datetime_filter_value(field, value)
    if python_type is date:
        return _coerce_date_filter_value(field, value)
    if python_type is str and not isinstance(value, str):
        return str(value)
    return value


def _coerce_condition_value(field: str, python_type, condition: FieldCondition):
    if condition.op == "in":
        return [coerce_value(field, python_type, item) for item in condition.value]
    return coerce_value(field, python_type, condition.value)


def _is_date_only_literal(raw_value) -> bool:
    if isinstance(raw_value, date) and not isinstance(raw_value, datetime):
        return True
    if not isinstance(raw_value, str):
        return False
    text = raw_value.strip()
    if not text or "T" in text or " " in text:
        return False
    try:
        date.fromisoformat(text)
        return True
    except ValueError:
        return False


def _column_python_type(column):
    try:
        return column.property.columns[0].type.python_type
    except Exception:
        return None


class SqlCollection:
    """Collection backed by a SQLAlchemy declarative model."""

    def __init__(self, db: Session, model, name: str | None = None):
        self.db = db
        self.model = model
        self.name = name or model.__tablename__
        self._mapper = inspect(model)
        self.identity_field = self._mapper.primary_key[0].key
        self._hidden = set(getattr(model, "__hidden_fields__", ()))

    def field_names(self) -> list[str]:
        return [attr.key for attr in self._mapper.column_attrs if attr.key not in self._hidden]

    def _column(self, field: str):
        if field not in self.field_names():
            raise BadQueryError("unknownFilterField", field=field)
        return getattr(self.model, field)

    def _filtered(self, conditions: Sequence[FieldCondition]) -> Query:
        q = self.db.query(self.model)
        for condition in conditions:
            col = self._column(condition.field)
            python_type = _column_python_type(col)
            if python_type is datetime and condition.op == "eq" and _is_date_only_literal(condition.value):
                day_start = coerce_value(condition.field, python_type, condition.value)
                q = q.filter(col >= day_start, col < day_start + timedelta(days=1))
                continue
            value = _coerce_condition_value(condition.field, python_type, condition)
            if condition.op == "eq":
                q = q.filter(col.is_(None) if value is None else col == value)
            elif condition.op == "gt":
                q = q.filter(col > value)
            elif condition.op == "gte":
                q = q.filter(col >= value)
            elif condition.op == "lt":
                q = q.filter(col < value)
            elif condition.op == "lte":
                q = q.filter(col <= value)
            elif condition.op == "in":
                q = q.filter(col.in_(value))
        return q

    def _relationship(self, populate: str):
        relationship = self._mapper.relationships.get(populate)
        if relationship is None:
            raise BadQueryError("unknownRelation", relation=populate)
        return relationship

    def count(self, conditions: Sequence[FieldCondition]) -> int:
        return self._filtered(conditions).count()

    def find(
        self,
        conditions: Sequence[FieldCondition],
        projection: Sequence[str] | None = None,
        sort: Sequence[SortKey] = (),
        skip: int = 0,
        limit: int | None = None,
        populate: str | None = None,
    ) -> list[dict[str, Any]]:
        q = self._filtered(conditions)
        fields = self._projected_fields(projection)
        relationship = self._relationship(populate) if populate else None
        loaded = list(fields)
        if relationship is not None:
            loaded.extend(col.key for col in relationship.local_columns if col.key not in loaded)
        q = q.options(load_only(*[getattr(self.model, f) for f in loaded]))
        if relationship is not None:
            q = q.options(selectinload(getattr(self.model, relationship.key)))
        for key in sort:
            col = self._column(key.field)
            q = q.order_by(asc(col) if key.direction == 1 else desc(col))
        q = q.order_by(asc(getattr(self.model, self.identity_field)))
        if skip:
            q = q.offset(skip)
        if limit is not None:
            q = q.limit(limit)
        rows = q.all()
        records = []
        for row in rows:
            record = {field: getattr(row, field) for field in fields}
            if relationship is not None:
                record[relationship.key] = _related_to_dict(getattr(row, relationship.key))
            records.append(record)
        return records

    def _projected_fields(self, projection: Sequence[str] | None) -> list[str]:
        known = self.field_names()
        if projection is None:
            return known
        selected = [self.identity_field]
        selected.extend(f for f in projection if f in known and f not in selected)
        return selected


def _row_to_dict(row) -> dict[str, Any]:
    mapper = inspect(type(row))
    hidden = set(getattr(type(row), "__hidden_fields__", ()))
    return {attr.key: getattr(row, attr.key) for attr in mapper.column_attrs if attr.key not in hidden}


def _related_to_dict(value):
    if value is None:
        return None
    if isinstance(value, (list, tuple, set)):
        return [_row_to_dict(item) for item in value]
    return _row_to_dict(value)


_OPERATORS = {
    "gt": lambda left, right: left > right,
    "gte": lambda left, right: left >= right,
    "lt": lambda left, right: left < right,
    "lte": lambda left, right: left <= right,
}


class InMemoryCollection:
    """Collection over a list of plain dicts.

    ``relations`` maps a relation name to ``(foreign_key_field, collection)``.
    """

    def __init__(
        self,
        name: str,
        documents: Iterable[dict[str, Any]],
        identity_field: str = "id",
        relations: dict[str, tuple[str, "InMemoryCollection"]] | None = None,
    ):
        self.name = name
        self.identity_field = identity_field
        self.documents = [dict(doc) for doc in documents]
        self.relations = dict(relations or {})

    def field_names(self) -> list[str]:
        names = [self.identity_field]
        for doc in self.documents:
            names.extend(key for key in doc if key not in names)
        return names

    def _field_type(self, field: str):
        for doc in self.documents:
            value = doc.get(field)
            if value is not None:
                return type(value)
        return None

    def _matches(self, doc: dict[str, Any], condition: FieldCondition, python_type) -> bool:
        value = doc.get(condition.field)
        expected = _coerce_condition_value(condition.field, python_type, condition)
        if condition.op == "eq":
            return value == expected
        if condition.op == "in":
            return value in expected
        if value is None or expected is None:
            return False
        return _OPERATORS[condition.op](value, expected)

    def _filtered(self, conditions: Sequence[FieldCondition]) -> list[dict[str, Any]]:
        known = self.field_names()
        for condition in conditions:
            if condition.field not in known:
                raise BadQueryError("unknownFilterField", field=condition.field)
        types = {c.field: self._field_type(c.field) for c in conditions}
        return [doc for doc in self.documents if all(self._matches(doc, c, types[c.field]) for c in conditions)]

    def get(self, identity) -> dict[str, Any] | None:
        for doc in self.documents:
            if doc.get(self.identity_field) == identity:
                return dict(doc)
        return None

    def count(self, conditions: Sequence[FieldCondition]) -> int:
        return len(self._filtered(conditions))

    def find(
        self,
        conditions: Sequence[FieldCondition],
        projection: Sequence[str] | None = None,
        sort: Sequence[SortKey] = (),
        skip: int = 0,
        limit: int | None = None,
        populate: str | None = None,
    ) -> list[dict[str, Any]]:
        if populate and populate not in self.relations:
            raise BadQueryError("unknownRelation", relation=populate)
        docs = self._filtered(conditions)
        # Python's sort is stable: apply the least significant key first.
        for key in reversed(list(sort)):
            docs.sort(
                key=lambda doc: (doc.get(key.field) is None, doc.get(key.field)),
                reverse=key.direction == -1,
            )
        end = None if limit is None else skip + limit
        docs = docs[skip:end]
        fields = None
        if projection is not None:
            fields = [self.identity_field] + [f for f in projection if f != self.identity_field]
        records = []
        for doc in docs:
            record = dict(doc) if fields is None else {f: doc[f] for f in fields if f in doc}
            if populate:
                foreign_key, related = self.relations[populate]
                record[populate] = related.get(doc.get(foreign_key))
            records.append(record)
        return records
