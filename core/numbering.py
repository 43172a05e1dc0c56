"""
Document numbers: a fixed prefix followed by a zero-padded sequence.

The sequence is compared as an integer, so numbers keep counting past the
pad width (INV-20240401-9999 is followed by INV-20240401-10000).
"""

import logging

from clients.postgres_client import TableOperations

logger = logging.getLogger(__name__)


def sequence_of(number: str, prefix: str) -> int | None:
    """The integer after prefix, or None if number is not of that form."""
    if not number or not number.startswith(prefix):
        return None
    suffix = number[len(prefix):]
    return int(suffix) if suffix.isdigit() else None


def next_number(db: TableOperations, table: str, column: str, prefix: str, width: int) -> str:
    """
    Next free number under prefix in table.column.

    Deleted rows are counted, so a number is never handed out twice. Values
    that do not parse as prefix + digits are ignored.

    Call inside the transaction that inserts the new row.
    """
    rows = db.select(table, search={column: prefix})

    highest = 0
    for row in rows:
        sequence = sequence_of(row[column], prefix)
        if sequence is None:
            logger.warning(f"Ignoring malformed {column} {row[column]!r} in {table}")
            continue
        highest = max(highest, sequence)

    return f"{prefix}{highest + 1:0{width}d}"
