"""Abstract interfaces for row storage backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Row(Protocol):
    """A stored row: a typed, labelled record that may belong to a parent row."""

    @property
    def type(self) -> str: ...

    @property
    def id(self) -> str: ...

    @property
    def label(self) -> str: ...

    @property
    def parent_id(self) -> str: ...

    @property
    def columns(self) -> dict[str, Any]: ...


class RowStorer(ABC):
    """Operations a row storage backend provides."""

    @abstractmethod
    def get_row_by_id(self, row_type: str, row_id: str) -> Row:
        """Return the row with the given type and identifier."""

    @abstractmethod
    def get_row(self, row_type: str, row_label: str) -> Row:
        """Return the single row with the given type and label."""

    @abstractmethod
    def create_row(self, row_type: str, row_label: str) -> Row:
        """Create a top-level row whose type and label are unique together."""

    @abstractmethod
    def create_child(
        self,
        row_type: str,
        row_label: str,
        parent_type: str,
        parent_id: str,
        columns: dict[str, Any],
    ) -> Row:
        """Create a row under an existing parent, with a label unique within it."""

    @abstractmethod
    def get_child(self, child_label: str, parent_id: str) -> Row:
        """Return the single row with the given label under the given parent."""

    @abstractmethod
    def list_rows(
        self, row_type: str, label_filter: str, parent_id_filter: str
    ) -> list[Row]:
        """List rows of a type, optionally filtered by label substring and parent."""

    @abstractmethod
    def update_row(self, row_type: str, row_id: str, new_label: str) -> Row:
        """Change the label of a row and return the updated row."""

    @abstractmethod
    def update_child(
        self,
        child_type: str,
        child_id: str,
        new_child_label: str,
        parent_type: str,
        new_parent_id: str,
    ) -> Row:
        """Move a child row to a new parent and label and return the updated row."""

    @abstractmethod
    def update_column(
        self, row_type: str, row_id: str, column_name: str, column_value: Any
    ) -> None:
        """Set one column of an existing row."""

    @abstractmethod
    def update_columns(
        self, row_type: str, row_id: str, columns: dict[str, Any]
    ) -> None:
        """Replace all columns of an existing row."""

    @abstractmethod
    def delete_row(self, row_type: str, child_type: str, row_id: str) -> None:
        """Delete a row, refusing if it still has children of ``child_type``."""