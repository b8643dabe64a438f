"""MongoDB-backed throttle records.

Each update is one multi-document transaction: read the record, apply the
mutation, write it back. ``with_transaction`` retries the callback on
transient write conflicts, so two requests racing on the same key are
serialised rather than both admitted. Requires a replica set or sharded
cluster (transactions are unavailable on standalone mongod).
"""

from __future__ import annotations

from datetime import datetime, timezone

from pymongo.asynchronous.client_session import AsyncClientSession
from pymongo.asynchronous.database import AsyncDatabase

from repositories.protocols import HitsMutation
from schemas.models.throttle import THROTTLE_SCOPE_PASSWORD_RESETS, ThrottleRecordDoc

COLLECTION = "rate-limits"


class MongoThrottleRepository:
    def __init__(
        self, db: AsyncDatabase, scope: str = THROTTLE_SCOPE_PASSWORD_RESETS
    ) -> None:
        self._db = db
        self._col = db[COLLECTION]
        self._scope = scope

    async def update_hits(
        self, key: str, mutate: HitsMutation, *, ttl_seconds: int
    ) -> list[int]:
        async def _txn(session: AsyncClientSession) -> list[int]:
            raw = await self._col.find_one({"_id": key}, session=session)
            record = ThrottleRecordDoc.from_mongo(raw)
            current = list(record.hits) if record is not None else []

            updated = mutate(current)

            doc = ThrottleRecordDoc(
                key=key,
                scope=self._scope,
                hits=updated,
                updated_at=datetime.now(timezone.utc),
            ).to_mongo()
            doc.pop("_id")
            await self._col.update_one(
                {"_id": key}, {"$set": doc}, upsert=True, session=session
            )
            return updated

        async with self._db.client.start_session() as session:
            return await session.with_transaction(_txn)
