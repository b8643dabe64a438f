"""
Base model for MongoDB document models.

MongoBaseModel provides to_mongo() / from_mongo() for round-tripping between
Python objects and raw MongoDB dicts. Unknown keys in stored documents are
ignored so collections owned by other subsystems can carry extra fields.
"""

from __future__ import annotations

from typing import Optional, TypeVar

from pydantic import BaseModel, ConfigDict

_M = TypeVar("_M", bound="MongoBaseModel")


class MongoBaseModel(BaseModel):
    """
    Base for all document models.

    to_mongo()   - converts model → dict suitable for pymongo writes
    from_mongo() - converts raw pymongo dict → model instance (returns None
                   gracefully when passed None)
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
    )

    def to_mongo(self) -> dict:
        """Return a dict ready for MongoDB, using field aliases (``_id``)."""
        return self.model_dump(by_alias=True, exclude_none=True)

    @classmethod
    def from_mongo(cls: type[_M], data: Optional[dict]) -> Optional[_M]:
        """Build a model instance from a raw MongoDB document dict.

        Returns None when data is None (e.g. find_one returns None).
        """
        if data is None:
            return None
        return cls.model_validate(data)
