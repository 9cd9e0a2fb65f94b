"""Repository layer for data access.

Repositories encapsulate database operations and provide a clean interface
for reading and merging profile documents.
"""

from hajjcare.repositories.profile import ProfileRepository

__all__ = ["ProfileRepository"]
