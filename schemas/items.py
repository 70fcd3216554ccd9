"""
Pydantic schemas for the three import item shapes.

Items are trusted input: authorization and business validation happen
upstream. These schemas only shape a raw item into the row written to
storage. Unknown keys are kept so storage can reject them the way it
rejects any other bad column.
"""

from pydantic import BaseModel, Field, validator
from typing import Optional, Dict, Any


class AssetCreateItem(BaseModel):
    """New inventory asset"""
    company_id: str = Field(..., min_length=1)
    serial_number: str = Field(..., min_length=1, max_length=100)

    brand: Optional[str] = None
    model: Optional[str] = None
    product_type_id: Optional[str] = None
    status: Optional[str] = None
    processing_stage: Optional[str] = None
    cosmetic_grade: Optional[str] = None
    functional_status: Optional[str] = None
    cpu: Optional[str] = None
    ram: Optional[str] = None
    storage: Optional[str] = None
    screen_size: Optional[str] = None
    purchase_price: Optional[float] = Field(None, ge=0)
    refurbishment_cost: Optional[float] = Field(None, ge=0)
    sale_price: Optional[float] = Field(None, ge=0)
    purchase_lot_id: Optional[str] = None
    location_id: Optional[str] = None
    processing_notes: Optional[str] = Field(None, max_length=1000)

    attributes: Optional[Dict[str, Any]] = None

    @validator("serial_number")
    def clean_serial_number(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("serial_number cannot be empty after stripping")
        return v

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)

    class Config:
        extra = "allow"


class PurchaseOrderLineCreateItem(BaseModel):
    """Purchase order line item"""
    company_id: str = Field(..., min_length=1)
    purchase_order_id: str = Field(..., min_length=1)
    quantity_ordered: int = Field(..., gt=0)
    unit_cost: float = Field(..., ge=0)

    unit_cost_source: Optional[float] = Field(None, ge=0)
    product_type_id: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    serial_number: Optional[str] = None
    description: Optional[str] = None

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)

    class Config:
        extra = "allow"


class EntityPatchItem(BaseModel):
    """Partial update of one existing asset, addressed by id"""
    id: str = Field(..., min_length=1)

    @property
    def fields(self) -> Dict[str, Any]:
        """Every key except ``id``, exactly as submitted"""
        return dict(self.model_extra or {})

    @validator("id", pre=True)
    def stringify_id(cls, v):
        return str(v) if v is not None else v

    class Config:
        extra = "allow"
