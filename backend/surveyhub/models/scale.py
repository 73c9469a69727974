from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from surveyhub.core.database import Base


class Scale(Base):
    """Reusable ordered answer-option set (e.g. 1-5 agreement)."""
    __tablename__ = "scales"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    shareable = Column(Boolean, default=False)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    # Owned children only; everything else is looked up by id
    choices = relationship(
        "Choice",
        order_by="Choice.sequence",
        cascade="all, delete-orphan",
    )


class Choice(Base):
    __tablename__ = "choices"
    __table_args__ = (
        UniqueConstraint("scale_id", "sequence", name="uq_choice_scale_sequence"),
    )

    id = Column(Integer, primary_key=True, index=True)
    scale_id = Column(Integer, ForeignKey("scales.id"), nullable=False, index=True)
    text = Column(String(500), nullable=False)
    value = Column(Integer, nullable=False, default=0)
    sequence = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
