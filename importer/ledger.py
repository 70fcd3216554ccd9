"""
Error ledger: one entry per failed chunk, in chunk order.
"""

from typing import List, Optional
import logging

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import DBAPIError

from schemas.jobs import ErrorLedgerEntry
from core.exceptions import ImportPipelineError, ChunkHaltedError

logger = logging.getLogger(__name__)


def describe_failure(error: BaseException) -> str:
    """
    Reduce an exception to the message stored in a ledger entry.

    Pipeline errors contribute their plain message, driver errors the
    database's own text, item shaping errors one line per bad field.
    """
    if isinstance(error, ImportPipelineError):
        return error.message

    if isinstance(error, DBAPIError) and error.orig is not None:
        return str(error.orig).strip()

    if isinstance(error, PydanticValidationError):
        return "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'item'}: {err['msg']}"
            for err in error.errors()
        )

    return str(error) or error.__class__.__name__


class ErrorLedger:
    """
    Accumulates failed chunks without interrupting the job.

    Entries are appended as chunks fail, so their order is the order in
    which chunks were submitted.
    """

    def __init__(self, entries: Optional[List[ErrorLedgerEntry]] = None):
        self._entries: List[ErrorLedgerEntry] = list(entries or [])

    def record(self, chunk_index: int, error: BaseException, item_count: int) -> ErrorLedgerEntry:
        """Append an entry for a failed chunk and return it"""
        if self._entries and chunk_index <= self._entries[-1].chunk_index:
            raise ValueError(
                f"Chunk {chunk_index} recorded after chunk {self._entries[-1].chunk_index}"
            )

        entry = ErrorLedgerEntry(
            chunk_index=chunk_index,
            message=describe_failure(error),
            item_count=item_count,
            failed_item_offset=(
                error.failed_item_offset if isinstance(error, ChunkHaltedError) else None
            ),
        )
        self._entries.append(entry)
        return entry

    @property
    def entries(self) -> List[ErrorLedgerEntry]:
        return list(self._entries)

    @property
    def failed_items(self) -> int:
        return sum(entry.item_count for entry in self._entries)

    def __len__(self) -> int:
        return len(self._entries)
