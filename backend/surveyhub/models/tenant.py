from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
from surveyhub.core.database import Base


class Tenant(Base):
    """Isolation root. Every other row carries the owning tenant_id."""
    __tablename__ = "tenants"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
