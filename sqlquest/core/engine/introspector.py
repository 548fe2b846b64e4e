from typing import List

from sqlalchemy import Connection

from sqlquest.core.engine.sanitizer import safe_identifier
from sqlquest.core.schemas import ForeignKeyRef, TableColumn, UniqueIndex


# -----------------------------------------------------------------------------
# SCHEMA INTROSPECTOR
# Purpose: read column, foreign key and unique index metadata for validators
# Why: grading DDL means looking at the resulting schema, often before commit
# -----------------------------------------------------------------------------


class SchemaIntrospector:
    """
    Read-only view over SQLite's catalog, bound to one connection.

    Bound to the same connection as the transaction gate, it sees the
    uncommitted effects of the statement being graded.

    Example:
        schema = SchemaIntrospector(conn)
        names = [c.name for c in schema.columns("brinquedos")]
    """

    def __init__(self, conn: Connection):
        self.conn = conn

    def _pragma(self, command: str):
        return self.conn.exec_driver_sql(f"PRAGMA {command}").mappings().all()

    def columns(self, table: str) -> List[TableColumn]:
        """
        Columns of a table in declaration order.

        Args:
            table: Table name, checked against the identifier pattern.

        Returns:
            List of TableColumn, empty if the table does not exist.
        """
        table = safe_identifier(table)
        rows = self._pragma(f"table_info('{table}')")
        return [
            TableColumn(
                ordinal=row["cid"],
                name=row["name"],
                declared_type=row["type"] or "",
                not_null=bool(row["notnull"]),
                default_value=row["dflt_value"],
                is_primary_key=bool(row["pk"]),
            )
            for row in rows
        ]

    def foreign_keys(self, table: str) -> List[ForeignKeyRef]:
        table = safe_identifier(table)
        rows = self._pragma(f"foreign_key_list('{table}')")
        return [
            ForeignKeyRef(
                id=row["id"],
                sequence=row["seq"],
                parent_table=row["table"],
                child_column=row["from"],
                parent_column=row["to"],
                on_update=row["on_update"],
                on_delete=row["on_delete"],
                match=row["match"],
            )
            for row in rows
        ]

    def unique_indexes(self, table: str) -> List[UniqueIndex]:
        """
        Unique indexes of a table with their columns in covered order.
        Includes the automatic indexes behind UNIQUE / PRIMARY KEY constraints.
        """
        table = safe_identifier(table)
        indexes = []
        for idx in self._pragma(f"index_list('{table}')"):
            if idx["unique"] != 1:
                continue
            # Catalog names may be any quoted identifier, so escape instead of rejecting
            name = idx["name"]
            quoted = name.replace("'", "''")
            cols = sorted(self._pragma(f"index_info('{quoted}')"), key=lambda c: c["seqno"])
            indexes.append(UniqueIndex(name=name, columns=[c["name"] for c in cols]))
        return indexes

    def scalar_count(self, query: str) -> int:
        """Run an ad-hoc single-value query (COUNT, EXISTS...) and return it as int."""
        value = self.conn.exec_driver_sql(query).scalar()
        return int(value or 0)

    def table_exists(self, table: str) -> bool:
        table = safe_identifier(table)
        return (
            self.scalar_count(
                "SELECT COUNT(*) FROM sqlite_master "
                f"WHERE type = 'table' AND name = '{table}'"
            )
            > 0
        )

    def row_count(self, table: str) -> int:
        table = safe_identifier(table)
        return self.scalar_count(f'SELECT COUNT(*) FROM "{table}"')
