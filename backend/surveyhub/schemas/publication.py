from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from surveyhub.models.publication import AudienceType


class PublishRequest(BaseModel):
    survey_id: int
    name: str
    audience_ref: Optional[str] = None
    audience_type: AudienceType = AudienceType.SESSION_FEEDBACK
    display_order: int = Field(default=0, ge=0)
    is_required: bool = False


class PublicationOut(BaseModel):
    id: int
    tenant_id: int
    survey_id: int
    name: str
    audience_ref: Optional[str] = None
    audience_type: str
    display_order: int
    is_required: bool
    published_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    is_open: bool

    class Config:
        from_attributes = True
