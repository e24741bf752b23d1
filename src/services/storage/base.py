from typing import Optional

TABLES = ("users", "patients", "visits", "appointments")


class StorageBackend:
    """
    Table-like persistence used by the record store and the session holder.

    Rows travel as plain dicts. Filters:
    - eq: {"field": value, ...} equality on every pair
    - between: ("field", start, end), both bounds inclusive
    - order_by / descending: single-field sort
    """

    def select(
        self,
        table: str,
        eq: Optional[dict] = None,
        between: Optional[tuple] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[dict]:
        raise NotImplementedError

    def insert(self, table: str, row: dict) -> dict:
        raise NotImplementedError

    def update(self, table: str, row_id: str, patch: dict, eq: Optional[dict] = None) -> Optional[dict]:
        """Merge `patch` into the row with `row_id` (and matching `eq`); None when nothing matched."""
        raise NotImplementedError

    def count(self, table: str, eq: Optional[dict] = None) -> int:
        return len(self.select(table, eq=eq))

    def get_slot(self, key: str) -> Optional[dict]:
        raise NotImplementedError

    def set_slot(self, key: str, value: Optional[dict]) -> None:
        """Store `value` under `key`; None clears the slot."""
        raise NotImplementedError

    @staticmethod
    def _check_table(table: str):
        if table not in TABLES:
            raise ValueError(f"Unknown table {table!r}")


def matches(row: dict, eq: Optional[dict] = None, between: Optional[tuple] = None) -> bool:
    if eq:
        for field, value in eq.items():
            if row.get(field) != value:
                return False
    if between:
        field, start, end = between
        value = row.get(field)
        if value is None or value < start or value > end:
            return False
    return True


def apply_query(
    rows: list[dict],
    eq: Optional[dict] = None,
    between: Optional[tuple] = None,
    order_by: Optional[str] = None,
    descending: bool = False,
) -> list[dict]:
    """Linear-scan filter + sort, for backends without a query engine."""
    result = [dict(r) for r in rows if matches(r, eq, between)]
    if order_by:
        # Nulls sort last in either direction
        present = [r for r in result if r.get(order_by) is not None]
        missing = [r for r in result if r.get(order_by) is None]
        present.sort(key=lambda r: r[order_by], reverse=descending)
        result = present + missing
    return result
