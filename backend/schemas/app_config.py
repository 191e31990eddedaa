from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class AppConfigBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    value: str

class AppConfigCreate(AppConfigBase):
    pass

class AppConfigUpdate(BaseModel):
    value: Optional[str] = None

class AppConfigOut(AppConfigBase):
    id: int
    tenant_id: Optional[str] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

    class Config:
        from_attributes = True
