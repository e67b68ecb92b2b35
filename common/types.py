"""Shared data type definitions (FragmentMetadata, FragmentSummary)."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping


@dataclass(frozen=True)
class FragmentSummary:
    """
    Lightweight listing projection of a fragment.
    """
    id: str
    created: str
    updated: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FragmentMetadata:
    """
    Persisted metadata record of a fragment. Payload bytes are stored separately.
    """
    id: str
    owner_id: str
    type: str
    size: int
    created: str
    updated: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def summary(self) -> FragmentSummary:
        return FragmentSummary(id=self.id, created=self.created, updated=self.updated)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "FragmentMetadata":
        return cls(
            id=data["id"],
            owner_id=data["owner_id"],
            type=data["type"],
            size=int(data["size"]),
            created=data["created"],
            updated=data["updated"],
        )
