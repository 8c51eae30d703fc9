"""Cross-tabulation of two dimensions (e.g. permission parent x object)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class DataMatrixRow:
    header_id: str
    data: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"header_id": self.header_id, "data": dict(self.data)}


@dataclass(frozen=True)
class DataMatrix:
    """Serializable matrix. Header references map ids to the objects they name."""

    row_header_ids: tuple[str, ...] = ()
    column_header_ids: tuple[str, ...] = ()
    row_header_references: dict[str, Any] = field(default_factory=dict)
    column_header_references: dict[str, Any] = field(default_factory=dict)
    rows: tuple[DataMatrixRow, ...] = ()

    def row(self, header_id: str) -> Optional[DataMatrixRow]:
        for row in self.rows:
            if row.header_id == header_id:
                return row
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "row_header_ids": list(self.row_header_ids),
            "column_header_ids": list(self.column_header_ids),
            "row_header_references": dict(self.row_header_references),
            "column_header_references": dict(self.column_header_references),
            "rows": [row.to_dict() for row in self.rows],
        }


class DataMatrixBuilder:
    """Accumulates cells, then freezes them into a DataMatrix.

    Rows and columns keep first-seen order.
    """

    def __init__(self) -> None:
        self._column_ids: dict[str, None] = {}
        self._column_refs: dict[str, Any] = {}
        self._rows: dict[str, dict[str, Any]] = {}
        self._row_refs: dict[str, Any] = {}

    def add_value(self, row_id: str, column_id: str, value: Any) -> None:
        self._rows.setdefault(row_id, {})[column_id] = value
        self._column_ids.setdefault(column_id, None)

    def has_row_header(self, row_id: str) -> bool:
        return row_id in self._row_refs

    def set_row_header(self, row_id: str, reference: Any) -> None:
        self._row_refs[row_id] = reference
        self._rows.setdefault(row_id, {})

    def has_column_header(self, column_id: str) -> bool:
        return column_id in self._column_refs

    def set_column_header(self, column_id: str, reference: Any) -> None:
        self._column_refs[column_id] = reference

    def to_matrix(self) -> DataMatrix:
        return DataMatrix(
            row_header_ids=tuple(self._rows),
            column_header_ids=tuple(self._column_ids),
            row_header_references=dict(self._row_refs),
            column_header_references=dict(self._column_refs),
            rows=tuple(DataMatrixRow(row_id, dict(data)) for row_id, data in self._rows.items()),
        )
