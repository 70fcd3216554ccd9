from sqlalchemy import Column, String, Enum, DateTime, Integer, Index
from sqlalchemy.dialects.postgresql import JSONB
from datetime import datetime
from models.base import Base, ImportJobStatus, ImportItemType


class ImportJob(Base):
    """
    Durable state for one bulk import job.
    
    Purpose:
    - Polling surface for clients waiting on a job
    - Per-chunk progress and counters
    - Error ledger of failed chunks
    
    Design:
    - Primary key is the caller-supplied job id
    - Written only by the batch processor, once per chunk
    - Immutable once status is completed or failed
    """
    __tablename__ = "import_jobs"
    
    id = Column(String(255), primary_key=True)
    tenant_id = Column("company_id", String(255), nullable=False, index=True)
    item_type = Column(Enum(ImportItemType, name="import_item_type"), nullable=False)
    
    status = Column(
        Enum(ImportJobStatus, name="import_job_status"),
        default=ImportJobStatus.PENDING,
        nullable=False,
        index=True
    )
    
    # Counters (processed_rows = successful_rows + failed_rows)
    total_rows = Column(Integer, nullable=False, default=0)
    processed_rows = Column(Integer, nullable=False, default=0)
    successful_rows = Column(Integer, nullable=False, default=0)
    failed_rows = Column(Integer, nullable=False, default=0)
    progress = Column(Integer, nullable=False, default=0)
    
    # Error ledger and final summary
    error_ledger = Column("error_details", JSONB, nullable=False, default=list)
    result_summary = Column("result_data", JSONB, nullable=True)
    
    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)


Index("idx_import_job_company_created", ImportJob.tenant_id, ImportJob.created_at)
Index("idx_import_job_status_updated", ImportJob.status, ImportJob.updated_at)
