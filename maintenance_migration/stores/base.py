"""Base store interface for the backends being migrated between."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

Row = Dict[str, Any]

# (column, values) for a filtered multi-get
InFilter = Tuple[str, Sequence[Any]]


class BaseStore(ABC):
    """
    Base class for record stores.

    A store gives read/write access to named tables through three
    operations: exact-match selects, filtered multi-gets on a list of
    values, and batch inserts that return the inserted rows.
    """

    def __init__(self, name: str):
        """
        Initialize the store.

        Args:
            name: Label used in logs ("source" or "destination")
        """
        self.name = name

    @abstractmethod
    def select(
        self,
        table: str,
        columns: Sequence[str],
        eq: Optional[Dict[str, Any]] = None,
        in_filter: Optional[InFilter] = None,
        limit: Optional[int] = None
    ) -> List[Row]:
        """
        Select rows from a table.

        Args:
            table: Table name
            columns: Columns to return
            eq: Column -> value exact-match filters
            in_filter: Column and values for a membership filter
            limit: Maximum rows to return

        Returns:
            Matching rows in the order the backend returns them
        """
        pass

    @abstractmethod
    def insert(
        self,
        table: str,
        rows: List[Row],
        returning: Optional[Sequence[str]] = None
    ) -> List[Row]:
        """
        Insert rows in a single request.

        Args:
            table: Table name
            rows: Row payloads
            returning: Columns of the inserted rows to return

        Returns:
            The inserted rows; order is not guaranteed to match ``rows``
        """
        pass

    def select_one(
        self,
        table: str,
        columns: Sequence[str],
        eq: Dict[str, Any]
    ) -> Optional[Row]:
        """Return the first row matching ``eq``, or None."""
        rows = self.select(table, columns, eq=eq, limit=1)
        return rows[0] if rows else None

    def validate_connection(self) -> bool:
        """Validate the connection to the store."""
        return True
