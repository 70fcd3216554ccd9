from sqlalchemy import Column, String, Float, Integer, Text, DateTime, Index
from sqlalchemy.dialects.postgresql import UUID
from datetime import datetime
import uuid
from models.base import Base


class PurchaseOrderLine(Base):
    """Line item of a tenant's purchase order."""
    __tablename__ = "purchase_order_lines"
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(String(255), nullable=False, index=True)
    purchase_order_id = Column(String(255), nullable=False, index=True)
    
    product_type_id = Column(String(255), nullable=True)
    brand = Column(String(200), nullable=True)
    model = Column(String(200), nullable=True)
    serial_number = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    
    quantity_ordered = Column(Integer, nullable=False)
    unit_cost = Column(Float, nullable=False, default=0)
    unit_cost_source = Column(Float, nullable=True)  # In the supplier's currency
    
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    
    __table_args__ = (
        Index("idx_po_line_order", "company_id", "purchase_order_id"),
    )
