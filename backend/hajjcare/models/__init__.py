"""SQLAlchemy models."""

from hajjcare.models.profile import ProfileDocument

__all__ = [
    "ProfileDocument",
]
