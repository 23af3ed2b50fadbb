"""CV record model: one structured document per user."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from ..database.base import Base


class CVRecord(Base):
    __tablename__ = "cv_records"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    # Document sections, stored as normalized JSON (see schemas.normalize_cv_document)
    personal_details = Column(JSON, default=dict)
    about = Column(JSON, default=dict)
    education = Column(JSON, default=list)
    work_experience = Column(JSON, default=list)
    projects = Column(JSON, default=list)
    skills = Column(JSON, default=list)
    interests = Column(JSON, default=list)

    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    user = relationship("User", back_populates="cv")
