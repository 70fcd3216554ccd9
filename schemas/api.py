"""
Pydantic schemas for API request/response models
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime
from models.base import ImportItemType, ImportJobStatus
from schemas.jobs import ErrorLedgerEntry, ImportJobRecord, ImportJobSpec, ResultSummary
from core.exceptions import MissingFieldError
from importer.classifier import resolve_item_type


# ============================================================================
# Submission Schemas
# ============================================================================

class ImportJobRequest(BaseModel):
    """
    Bulk import submission body.

    Every field is optional at the schema level so that a missing field is
    reported as a pre-flight rejection with the ``{success, error}`` body
    rather than a framework validation error.
    """
    job_id: Optional[str] = Field(None, alias="jobId")
    company_id: Optional[str] = Field(None, alias="companyId")
    items: Optional[List[Dict[str, Any]]] = None
    job_type: Optional[str] = Field(None, alias="jobType")

    def to_spec(self) -> ImportJobSpec:
        """
        Resolve the request into a job specification.

        Raises:
            MissingFieldError: A required field is absent or blank
            UnknownJobTypeError: ``jobType`` is not a recognized literal
        """
        for wire_name, value in (
            ("jobId", self.job_id),
            ("companyId", self.company_id),
            ("items", self.items),
            ("jobType", self.job_type),
        ):
            if value is None or (isinstance(value, str) and not value.strip()):
                raise MissingFieldError(
                    f"Missing required field: {wire_name}",
                    context={"field_name": wire_name}
                )

        return ImportJobSpec(
            job_id=self.job_id,
            tenant_id=self.company_id,
            item_type=resolve_item_type(self.job_type),
            items=self.items,
        )

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "jobId": "6a1f0c5e-2f7d-4b8e-9d59-0c3c2f4a9b10",
                "companyId": "acme-recycling",
                "jobType": "assets",
                "items": [
                    {
                        "company_id": "acme-recycling",
                        "serial_number": "SN-000123",
                        "brand": "Dell",
                        "model": "Latitude 7420",
                        "purchase_price": 120.0
                    }
                ]
            }
        }


class ImportAcceptedResponse(BaseModel):
    """Returned as soon as the pending job record exists"""
    success: bool = True
    job_id: str = Field(..., alias="jobId")
    status: ImportJobStatus

    class Config:
        populate_by_name = True
        use_enum_values = True


class ImportResultResponse(BaseModel):
    """Returned after the whole job ran, for ``wait=true`` submissions"""
    success: bool
    job_id: str = Field(..., alias="jobId")
    successful: int
    failed: int
    errors: Optional[List[ErrorLedgerEntry]] = None

    @classmethod
    def from_record(cls, record: ImportJobRecord) -> "ImportResultResponse":
        return cls(
            success=record.is_terminal,
            job_id=record.id,
            successful=record.successful_rows,
            failed=record.failed_rows,
            errors=list(record.error_ledger) or None,
        )

    class Config:
        populate_by_name = True


class ImportErrorResponse(BaseModel):
    """Pre-flight rejection or lookup failure"""
    success: bool = False
    error: str


# ============================================================================
# Polling Schemas
# ============================================================================

class ImportJobStatusResponse(BaseModel):
    """Read-only view of one job record"""
    id: str
    company_id: str
    job_type: str
    item_type: ImportItemType
    status: ImportJobStatus
    progress: int
    total_rows: int
    processed_rows: int
    successful_rows: int
    failed_rows: int
    error_details: List[ErrorLedgerEntry] = Field(default_factory=list)
    result_data: Optional[ResultSummary] = None
    created_at: datetime
    updated_at: datetime
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: ImportJobRecord) -> "ImportJobStatusResponse":
        return cls(
            id=record.id,
            company_id=record.tenant_id,
            job_type=record.item_type.job_type,
            item_type=record.item_type,
            status=record.status,
            progress=record.progress,
            total_rows=record.total_rows,
            processed_rows=record.processed_rows,
            successful_rows=record.successful_rows,
            failed_rows=record.failed_rows,
            error_details=record.error_ledger,
            result_data=record.result_summary,
            created_at=record.created_at,
            updated_at=record.updated_at,
            started_at=record.started_at,
            completed_at=record.completed_at,
        )

    class Config:
        use_enum_values = True
        json_schema_extra = {
            "example": {
                "id": "6a1f0c5e-2f7d-4b8e-9d59-0c3c2f4a9b10",
                "company_id": "acme-recycling",
                "job_type": "assets",
                "item_type": "asset_create",
                "status": "completed",
                "progress": 100,
                "total_rows": 150,
                "processed_rows": 150,
                "successful_rows": 100,
                "failed_rows": 50,
                "error_details": [
                    {
                        "chunk_index": 1,
                        "message": "duplicate key value violates unique constraint \"idx_asset_company_serial\"",
                        "item_count": 50
                    }
                ],
                "result_data": {"total": 150, "successful": 100, "failed": 50},
                "started_at": "2024-01-15T10:30:00",
                "completed_at": "2024-01-15T10:30:04"
            }
        }


class ImportJobListResponse(BaseModel):
    """A tenant's most recent jobs, newest first"""
    company_id: str
    jobs: List[ImportJobStatusResponse]
    count: int


# ============================================================================
# Health Check Schemas
# ============================================================================

class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field(..., description="Overall system status: healthy or unhealthy")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    database_connected: bool
    active_jobs: int = 0
