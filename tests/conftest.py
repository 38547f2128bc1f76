"""Common utilities for tests."""

from __future__ import annotations

import unittest.mock
from typing import Any, Iterator, Optional

from mockfirestore import CollectionReference, MockFirestore, Query
from mockfirestore._helpers import get_by_path
from mockfirestore.document import DocumentReference

MOCK_SERVER_TIMESTAMP = "2026-01-01T00:00:00Z"


class MockArrayUnion:
    def __init__(self, values: list[Any]) -> None:
        self.values = values

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)


class MockArrayRemove:
    def __init__(self, values: list[Any]) -> None:
        self.values = values

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)


class MockDeleteField:
    def __repr__(self) -> str:
        return "DELETE_FIELD"


MOCK_DELETE_FIELD = MockDeleteField()


class MockFieldFilter:
    def __init__(self, field_path: str, op_string: str, value: Any) -> None:
        self.field_path = field_path
        self.op_string = op_string
        self.value = value


def patch_mockfirestore() -> None:
    """Apply monkeypatches to mockfirestore to support FieldFilter and sentinels."""

    def collection_where(
        self: Any,
        field_path: Optional[str] = None,
        op_string: Optional[str] = None,
        value: Any = None,
        filter: Any = None,
    ) -> Any:
        if filter:
            return self._where(filter.field_path, filter.op_string, filter.value)
        return self._where(field_path, op_string, value)

    if not hasattr(CollectionReference, "_where"):
        CollectionReference._where = CollectionReference.where
        CollectionReference.where = collection_where

    def query_where(
        self: Any,
        field_path: Optional[str] = None,
        op_string: Optional[str] = None,
        value: Any = None,
        filter: Any = None,
    ) -> Any:
        if filter:
            return self._where(filter.field_path, filter.op_string, filter.value)
        return self._where(field_path, op_string, value)

    if not hasattr(Query, "_where"):
        Query._where = Query.where
        Query.where = query_where

    # Transactional reads pass transaction=...
    if not hasattr(DocumentReference, "_orig_get"):
        DocumentReference._orig_get = DocumentReference.get

        def doc_ref_get(self: Any, transaction: Any = None) -> Any:
            return self._orig_get()

        DocumentReference.get = doc_ref_get

    if not hasattr(DocumentReference, "_orig_update"):
        DocumentReference._orig_update = DocumentReference.update

        def patched_update(self: Any, data: dict[str, Any]) -> Any:
            sentinel_types = (MockArrayUnion, MockArrayRemove, MockDeleteField)
            sentinels = {k: v for k, v in data.items() if isinstance(v, sentinel_types)}
            others = {
                k: v for k, v in data.items() if not isinstance(v, sentinel_types)
            }

            if others:
                self._orig_update(others)

            if sentinels:
                document = get_by_path(self._data, self._path)
                for k, v in sentinels.items():
                    if isinstance(v, MockDeleteField):
                        document.pop(k, None)
                        continue
                    existing = document.get(k, [])
                    if not isinstance(existing, list):
                        existing = []
                    if isinstance(v, MockArrayUnion):
                        merged = list(existing)
                        for item in v.values:
                            if item not in merged:
                                merged.append(item)
                        document[k] = merged
                    else:
                        document[k] = [i for i in existing if i not in v.values]

        DocumentReference.update = patched_update


class MockBatch:
    def __init__(self, db: Any) -> None:
        self.db = db
        self.updates: list[tuple[Any, Any]] = []
        self.commit = unittest.mock.MagicMock(side_effect=self._real_commit)

    def update(self, ref: Any, data: Any) -> None:
        self.updates.append((ref, data))

    def set(self, ref: Any, data: Any, merge: bool = False) -> None:
        self.updates.append((ref, data))

    def delete(self, ref: Any) -> None:
        self.updates.append((ref, "DELETE"))

    def _real_commit(self) -> None:
        for ref, data in self.updates:
            if data == "DELETE":
                ref.delete()
            else:
                ref.update(data)


class MockTransaction:
    """Applies writes immediately; mockfirestore has no real transactions."""

    def __init__(self) -> None:
        self.writes: list[tuple[str, Any, Any]] = []

    def update(self, ref: Any, data: dict[str, Any]) -> None:
        self.writes.append(("update", ref, data))
        ref.update(data)

    def set(self, ref: Any, data: dict[str, Any], merge: bool = False) -> None:
        self.writes.append(("set", ref, data))
        ref.set(data, merge=merge)

    def delete(self, ref: Any) -> None:
        self.writes.append(("delete", ref, None))
        ref.delete()


def build_mock_db() -> MockFirestore:
    """Create a MockFirestore whose batches and transactions are inspectable."""
    patch_mockfirestore()
    db = MockFirestore()
    db.batch = unittest.mock.MagicMock(side_effect=lambda: MockBatch(db))
    db.transaction = unittest.mock.MagicMock(side_effect=MockTransaction)
    return db


def build_firestore_module(db: Any) -> unittest.mock.MagicMock:
    """Create a stand-in for ``firebase_admin.firestore`` bound to ``db``."""
    module = unittest.mock.MagicMock()
    module.client.return_value = db
    module.FieldFilter = MockFieldFilter
    module.ArrayUnion = MockArrayUnion
    module.ArrayRemove = MockArrayRemove
    module.DELETE_FIELD = MOCK_DELETE_FIELD
    module.SERVER_TIMESTAMP = MOCK_SERVER_TIMESTAMP
    # The real decorator retries on contention; one attempt is enough here
    module.transactional = lambda func: func
    return module


FIRESTORE_PATCH_TARGETS = [
    "mahjongrate.core.updates.firestore",
    "mahjongrate.cleanup.groups.firestore",
    "mahjongrate.cleanup.account.firestore",
    "mahjongrate.account.routes.firestore",
    "mahjongrate.group.routes.firestore",
]


def seed_record(
    db: Any,
    record_id: str,
    created_by: str,
    member_ids: list[str],
    sessions: int = 0,
    rounds: int = 0,
    players: int = 0,
    pending: Optional[list[str]] = None,
) -> Any:
    """Create a game record with a full subtree of sessions, rounds and scores."""
    record_ref = db.collection("gameRecords").document(record_id)
    record_ref.set(
        {
            "title": f"Record {record_id}",
            "createdBy": created_by,
            "memberIDs": list(member_ids),
            "inviteCode": f"CODE-{record_id}",
        }
    )

    player_ids = [f"{record_id}-player{i}" for i in range(players)]
    for player_id in player_ids:
        record_ref.collection("players").document(player_id).set({"name": player_id})

    for uid in pending or []:
        record_ref.collection("pendingMembers").document(uid).set(
            {"memberID": uid, "requestedAt": MOCK_SERVER_TIMESTAMP}
        )

    for s in range(sessions):
        result_ref = record_ref.collection("gameResults").document(f"result{s}")
        result_ref.set(
            {
                "gameRecordID": record_id,
                "title": f"Session {s}",
                "rate": 1.0,
                "basePoints": 25000,
                "playerIDs": player_ids,
            }
        )
        for r in range(rounds):
            round_ref = result_ref.collection("gameRounds").document(f"round{r}")
            round_ref.set({"gameRecordID": record_id, "roundNumber": r + 1})
            for player_id in player_ids:
                round_ref.collection("scores").document(player_id).set(
                    {"playerID": player_id, "points": 1000, "isResting": False}
                )
    return record_ref


def record_exists(db: Any, record_id: str) -> bool:
    """Check the raw store, without creating the document as a side effect."""
    return record_id in db._data.get("gameRecords", {})


def doc_path(ref: Any) -> str:
    return "/".join(ref._path)


def subtree_paths(db: Any, record_id: str) -> list[str]:
    """List the record document and every document nested under it.

    mockfirestore keeps subcollections inside the parent document's dict; the
    seeded documents hold no map fields, so every dict value is a collection.
    """
    paths: list[str] = []

    def walk(document: dict, path: list[str]) -> None:
        paths.append("/".join(path))
        for name, value in document.items():
            if not isinstance(value, dict):
                continue
            for doc_id, child in value.items():
                walk(child, path + [name, doc_id])

    walk(db._data["gameRecords"][record_id], ["gameRecords", record_id])
    return paths


def track_deletes(testcase: Any) -> list[str]:
    """Record the path of every document deleted while the test runs.

    Batch commits go through ``DocumentReference.delete`` as well.
    """
    deleted: list[str] = []
    original_delete = DocumentReference.delete

    def tracking_delete(self: Any) -> Any:
        deleted.append(doc_path(self))
        return original_delete(self)

    patcher = unittest.mock.patch.object(DocumentReference, "delete", tracking_delete)
    patcher.start()
    testcase.addCleanup(patcher.stop)
    return deleted
