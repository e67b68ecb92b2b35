"""Repository layer for metadata index access."""

from datastore.repositories.fragment_repository import FragmentRepository

__all__ = [
    "FragmentRepository",
]
