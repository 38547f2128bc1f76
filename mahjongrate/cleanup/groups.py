"""Resolve a game record's relationship to a departing identity."""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING

from firebase_admin import firestore
from flask import current_app

from mahjongrate.core.constants import (
    GAME_RESULTS_COLLECTION,
    GAME_ROUNDS_COLLECTION,
    PENDING_MEMBERS_COLLECTION,
    PLAYERS_COLLECTION,
    PRUNE_BATCH_SIZE,
    RECORD_CREATED_BY,
    RECORD_MEMBER_IDS,
    RECORD_UPDATED_AT,
    SCORES_COLLECTION,
)
from mahjongrate.core.types import GameRecordDocument
from mahjongrate.core.updates import (
    FieldOperation,
    RemoveFromArray,
    ServerTimestamp,
    SetField,
    to_update_data,
)

from .pruner import prune_collection

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client
    from google.cloud.firestore_v1.document import DocumentReference
    from google.cloud.firestore_v1.transaction import Transaction


class GroupOutcome(enum.Enum):
    """What happened to a game record."""

    DELETED = "deleted"
    UPDATED = "updated"
    SKIPPED = "skipped"


def remaining_members(data: GameRecordDocument | None, uid: str) -> list[str]:
    """Return memberIDs without ``uid``, keeping array order."""
    members = (data or {}).get(RECORD_MEMBER_IDS) or []
    return [member_id for member_id in members if member_id != uid]


class GroupCascadeResolver:
    """Delete a game record or remove one member from it.

    A record whose only member is leaving is deleted together with its whole
    subtree. Otherwise the member is pulled out of ``memberIDs`` inside a
    transaction, handing ownership to another member if needed.
    """

    def __init__(self, db: Client, batch_size: int = PRUNE_BATCH_SIZE) -> None:
        self.db = db
        self.batch_size = batch_size

    def resolve(self, snapshot: DocumentSnapshot, uid: str) -> GroupOutcome:
        """Resolve one record that lists ``uid`` in its memberIDs."""
        if not remaining_members(snapshot.to_dict(), uid):
            current_app.logger.info(
                f"Deleting entire record tree {snapshot.id} (last member {uid})"
            )
            self.delete_record_tree(snapshot.reference)
            return GroupOutcome.DELETED

        current_app.logger.info(
            f"Removing {uid} from record {snapshot.id} (transfer owner if needed)"
        )
        transaction = self.db.transaction()
        outcome = firestore.transactional(
            GroupCascadeResolver._remove_member_transaction
        )(transaction, snapshot.reference, uid)

        if outcome is GroupOutcome.DELETED:
            # The record emptied concurrently; its subtree is still there
            current_app.logger.info(f"Record {snapshot.id} emptied concurrently")
            self.delete_record_tree(snapshot.reference)
        return outcome

    def delete_record_tree(self, record_ref: DocumentReference) -> None:
        """Delete a record and everything below it, leaves first.

        Not atomic: a crash leaves orphans under a record that still exists,
        and running this again finishes the job.
        """
        prune_collection(
            self.db, record_ref.collection(PLAYERS_COLLECTION), self.batch_size
        )
        prune_collection(
            self.db, record_ref.collection(PENDING_MEMBERS_COLLECTION), self.batch_size
        )

        for result_doc in record_ref.collection(GAME_RESULTS_COLLECTION).stream():
            rounds = result_doc.reference.collection(GAME_ROUNDS_COLLECTION)
            for round_doc in rounds.stream():
                prune_collection(
                    self.db,
                    round_doc.reference.collection(SCORES_COLLECTION),
                    self.batch_size,
                )
                round_doc.reference.delete()
            result_doc.reference.delete()

        record_ref.delete()

    @staticmethod
    def _remove_member_transaction(
        transaction: Transaction, record_ref: DocumentReference, uid: str
    ) -> GroupOutcome:
        """Remove ``uid`` from a record using a fresh read inside the transaction."""
        latest = record_ref.get(transaction=transaction)
        if not latest.exists:
            return GroupOutcome.SKIPPED

        data = latest.to_dict() or {}
        if uid not in (data.get(RECORD_MEMBER_IDS) or []):
            return GroupOutcome.SKIPPED

        remaining = remaining_members(data, uid)
        # Another member may have left since the record was queried
        if not remaining:
            transaction.delete(record_ref)
            return GroupOutcome.DELETED

        operations: list[FieldOperation] = [
            RemoveFromArray(RECORD_MEMBER_IDS, (uid,)),
            ServerTimestamp(RECORD_UPDATED_AT),
        ]
        if data.get(RECORD_CREATED_BY) == uid:
            operations.append(SetField(RECORD_CREATED_BY, remaining[0]))

        transaction.update(record_ref, to_update_data(operations))
        return GroupOutcome.UPDATED
