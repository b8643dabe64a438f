"""Read-only access to tenant role records (`app-users` collection)."""

from __future__ import annotations

from typing import Optional

from pymongo.asynchronous.database import AsyncDatabase

from schemas.models.role import RoleRecordDoc

COLLECTION = "app-users"


class RoleRepository:
    def __init__(self, db: AsyncDatabase) -> None:
        self._col = db[COLLECTION]

    async def find_role(self, app_id: str, user_id: str) -> Optional[RoleRecordDoc]:
        raw = await self._col.find_one(
            {"app_id": app_id, "user_id": user_id},
            projection={"_id": 0, "app_id": 1, "user_id": 1, "role": 1},
        )
        return RoleRecordDoc.from_mongo(raw)
