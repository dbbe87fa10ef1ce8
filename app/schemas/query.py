from typing import Any, Dict, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

Op = Literal["eq", "gt", "gte", "lt", "lte", "in"]
Direction = Literal[1, -1]

RESERVED_KEYS = ("select", "sort", "page", "limit", "filter")


class FieldCondition(BaseModel):
    field: str
    op: Op = "eq"
    value: Any = None


class SortKey(BaseModel):
    field: str
    direction: Direction = 1


class QueryDescriptor(BaseModel):
    select: Optional[str] = None
    sort: Optional[str] = None
    page: Optional[str] = None
    limit: Optional[str] = None
    filter: Optional[str] = None
    params: Dict[str, str] = {}

    @classmethod
    def from_params(cls, params: Mapping[str, str]) -> "QueryDescriptor":
        """Split a flat query-string mapping into reserved keys and implicit filters."""
        reserved = {key: str(params[key]) for key in RESERVED_KEYS if key in params}
        rest = {str(key): str(params[key]) for key in params.keys() if key not in RESERVED_KEYS}
        return cls(params=rest, **reserved)


class ResultMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_records: int = Field(0, alias="totalRecords")
    total_pages: int = Field(0, alias="totalPages")
    per_page: int = Field(alias="perPage")
    current_page: int = Field(alias="currentPage")


class ResultSet(BaseModel):
    records: List[Dict[str, Any]] = []
    metadata: ResultMetadata

    def to_payload(self) -> Dict[str, Any]:
        return {"records": self.records, "metadata": self.metadata.model_dump(by_alias=True)}
