from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean
from surveyhub.core.database import Base
import enum


class AudienceType(str, enum.Enum):
    SESSION_FEEDBACK = "session_feedback"
    EVENT_FEEDBACK = "event_feedback"
    SESSION_DIALOGUE = "session_dialogue"
    EVENT_DIALOGUE = "event_dialogue"


class Publication(Base):
    """A survey made live for one audience (session or event)."""
    __tablename__ = "publications"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    survey_id = Column(Integer, ForeignKey("surveys.id"), nullable=False, index=True)

    name = Column(String, nullable=False)
    audience_ref = Column(String, nullable=True, index=True)
    audience_type = Column(String, default=AudienceType.SESSION_FEEDBACK.value, nullable=False)
    display_order = Column(Integer, default=0, nullable=False)
    is_required = Column(Boolean, default=False, nullable=False)

    # Naive UTC. closed_at is written once and never cleared.
    published_at = Column(DateTime, nullable=True)
    closed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    def is_open_at(self, now: datetime) -> bool:
        return (
            self.published_at is not None
            and self.closed_at is None
            and self.published_at <= now
        )

    @property
    def is_open(self) -> bool:
        return self.is_open_at(datetime.utcnow())
