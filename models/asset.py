from sqlalchemy import Column, String, Float, Text, DateTime, Index
from sqlalchemy.dialects.postgresql import JSONB, UUID
from datetime import datetime
import uuid
from models.base import Base


class Asset(Base):
    """
    Inventory asset received, processed and resold by a tenant.
    
    Target table for asset creation imports and for bulk patch imports.
    Free-form attributes that have no dedicated column go in ``attributes``.
    """
    __tablename__ = "assets"
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(String(255), nullable=False, index=True)
    
    # Identification
    serial_number = Column(String(100), nullable=False)
    brand = Column(String(200), nullable=True)
    model = Column(String(200), nullable=True)
    product_type_id = Column(String(255), nullable=True)
    
    # Condition and processing
    status = Column(String(50), nullable=False, default="received")
    processing_stage = Column(String(50), nullable=True)
    cosmetic_grade = Column(String(50), nullable=True)
    functional_status = Column(String(50), nullable=True)
    
    # Specs
    cpu = Column(String(200), nullable=True)
    ram = Column(String(100), nullable=True)
    storage = Column(String(100), nullable=True)
    screen_size = Column(String(50), nullable=True)
    
    # Money
    purchase_price = Column(Float, nullable=True)
    refurbishment_cost = Column(Float, nullable=True)
    sale_price = Column(Float, nullable=True)
    
    # Placement
    purchase_lot_id = Column(String(255), nullable=True)
    location_id = Column(String(255), nullable=True)
    processing_notes = Column(Text, nullable=True)
    
    attributes = Column(JSONB, nullable=True)
    
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    __table_args__ = (
        Index("idx_asset_company_serial", "company_id", "serial_number", unique=True),
        Index("idx_asset_company_status", "company_id", "status"),
    )
