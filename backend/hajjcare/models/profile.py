"""SQLAlchemy model for profile documents."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from hajjcare.database import Base


class ProfileDocument(Base):
    """One document per pilgrim profile, keyed by the profile id.

    The profile structure is stored verbatim so a load or merge round-trips
    without any field mapping.
    """

    __tablename__ = "profile_documents"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    # The full PilgrimProfile as JSON (JSONB on PostgreSQL)
    data: Mapped[dict] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
    )

    # Metadata
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<ProfileDocument(id={self.id})>"
