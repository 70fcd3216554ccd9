"""
Pydantic schemas for import jobs: specifications, job records and ledger entries
"""

from pydantic import BaseModel, Field, validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from models.base import ImportJobStatus, ImportItemType


class ErrorLedgerEntry(BaseModel):
    """One failed chunk"""
    chunk_index: int = Field(..., ge=0, description="0-based position of the chunk in the job")
    message: str
    item_count: int = Field(..., ge=1)
    failed_item_offset: Optional[int] = Field(
        None, ge=0, description="Item within the chunk that stopped a patch chunk"
    )


class ResultSummary(BaseModel):
    """Final counters written once, at finalization"""
    total: int = Field(..., ge=0)
    successful: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)


class ImportJobSpec(BaseModel):
    """
    A job accepted for processing.

    ``item_type`` is already resolved from the wire literal, so a spec can
    only carry one of the recognized kinds.
    """
    job_id: str
    tenant_id: str
    item_type: ImportItemType
    items: List[Dict[str, Any]]


class ImportJobRecord(BaseModel):
    """
    Snapshot of an import job as held by a job store.

    Counters are checked on construction:
    processed_rows = successful_rows + failed_rows <= total_rows.
    """
    id: str
    tenant_id: str
    item_type: ImportItemType
    status: ImportJobStatus = ImportJobStatus.PENDING

    total_rows: int = Field(0, ge=0)
    processed_rows: int = Field(0, ge=0)
    successful_rows: int = Field(0, ge=0)
    failed_rows: int = Field(0, ge=0)
    progress: int = Field(0, ge=0, le=100)

    error_ledger: List[ErrorLedgerEntry] = Field(default_factory=list)
    result_summary: Optional[ResultSummary] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @validator("failed_rows", always=True)
    def check_counters(cls, v, values):
        """Reject counter combinations that break the row accounting"""
        processed = values.get("processed_rows")
        successful = values.get("successful_rows")
        total = values.get("total_rows")
        if processed is None or successful is None or total is None:
            return v
        if successful + v != processed:
            raise ValueError(
                f"processed_rows ({processed}) must equal successful_rows ({successful}) "
                f"+ failed_rows ({v})"
            )
        if processed > total:
            raise ValueError(f"processed_rows ({processed}) exceeds total_rows ({total})")
        return v

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    class Config:
        from_attributes = True
