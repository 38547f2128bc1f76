"""Account deletion: remove an identity and everything that points at it."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from firebase_admin import auth, firestore
from flask import current_app
from google.api_core.exceptions import FailedPrecondition

from mahjongrate.core.constants import (
    GAME_RECORDS_COLLECTION,
    MEMBERS_COLLECTION,
    PENDING_MEMBER_ID,
    PENDING_MEMBERS_COLLECTION,
    PRUNE_BATCH_SIZE,
    RECORD_MEMBER_IDS,
)
from mahjongrate.errors import AccountDeletionError, NotFoundError

from .groups import GroupCascadeResolver, GroupOutcome
from .storage import delete_profile_icon

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client


@dataclass
class DeletionReport:
    """Summary of one account deletion run."""

    uid: str
    icon_deleted: bool = False
    groups_deleted: int = 0
    groups_updated: int = 0
    groups_skipped: int = 0
    failed_groups: list[str] = field(default_factory=list)
    pending_requests_deleted: int = 0

    def record(self, outcome: GroupOutcome) -> None:
        """Count a resolved game record."""
        if outcome is GroupOutcome.DELETED:
            self.groups_deleted += 1
        elif outcome is GroupOutcome.UPDATED:
            self.groups_updated += 1
        else:
            self.groups_skipped += 1


class AccountDeletionService:
    """Delete a user's data, then the user.

    Everything before the final Auth deletion is best-effort and idempotent,
    so when that last step fails the whole call can be retried: records that
    were already resolved no longer list the user and are not found again.

    Args:
        db: Firestore client.
        storage: object with ``bucket(name=None)``, e.g. ``firebase_admin.storage``.
        identity: object with ``delete_user(uid)``, e.g. ``firebase_admin.auth``.
    """

    def __init__(
        self,
        db: Client,
        storage: Any,
        identity: Any,
        batch_size: int = PRUNE_BATCH_SIZE,
    ) -> None:
        self.db = db
        self.storage = storage
        self.identity = identity
        self.resolver = GroupCascadeResolver(db, batch_size)

    def delete_account(self, uid: str) -> DeletionReport:
        """Run the full cleanup for ``uid`` and delete the Auth user.

        Raises:
            NotFoundError: the Auth user does not exist.
            AccountDeletionError: the Auth user could not be deleted.
        """
        report = DeletionReport(uid=uid)
        member_ref = self.db.collection(MEMBERS_COLLECTION).document(uid)

        # 1) Profile image; never blocks the rest
        try:
            member_doc = member_ref.get()
            if member_doc.exists:
                report.icon_deleted = delete_profile_icon(
                    self.storage, member_doc.to_dict() or {}, uid
                )
        except Exception as e:
            current_app.logger.warning(
                f"Failed to delete profile image for {uid} (continue): {e}"
            )

        # 2) Game records listing the user
        self._resolve_records(uid, report)

        # 3) Join requests to records the user never became a member of
        try:
            report.pending_requests_deleted = self._delete_pending_requests(uid)
        except FailedPrecondition as e:
            current_app.logger.error(
                f"Missing collection group index on "
                f"{PENDING_MEMBERS_COLLECTION}.{PENDING_MEMBER_ID}; deploy "
                f"firestore.indexes.json. Pending requests for {uid} kept: {e}"
            )
        except Exception as e:
            current_app.logger.warning(
                f"Failed to delete pending requests for {uid} (continue): {e}"
            )

        # 4) Profile document
        try:
            member_ref.delete()
        except Exception as e:
            current_app.logger.warning(
                f"Failed to delete members doc for {uid} (continue): {e}"
            )

        # 5) The Auth user itself; failure here fails the whole call
        try:
            self.identity.delete_user(uid)
        except auth.UserNotFoundError as e:
            current_app.logger.error(f"Auth user {uid} not found: {e}")
            raise NotFoundError("Account not found.") from e
        except Exception as e:
            current_app.logger.error(f"Failed to delete auth user {uid}: {e}")
            raise AccountDeletionError("Could not delete the account.") from e

        current_app.logger.info(
            f"Account {uid} deleted completely: "
            f"{report.groups_deleted} records deleted, "
            f"{report.groups_updated} updated, "
            f"{len(report.failed_groups)} failed"
        )
        return report

    def _resolve_records(self, uid: str, report: DeletionReport) -> None:
        """Resolve every game record listing ``uid``, one at a time."""
        records_query = self.db.collection(GAME_RECORDS_COLLECTION).where(
            filter=firestore.FieldFilter(RECORD_MEMBER_IDS, "array_contains", uid)
        )
        for record_doc in list(records_query.stream()):
            try:
                report.record(self.resolver.resolve(record_doc, uid))
            except Exception as e:
                current_app.logger.error(
                    f"Failed to resolve record {record_doc.id} for {uid}: {e}"
                )
                report.failed_groups.append(record_doc.id)

    def _delete_pending_requests(self, uid: str) -> int:
        """Delete the user's outstanding join requests across all records."""
        requests_query = self.db.collection_group(PENDING_MEMBERS_COLLECTION).where(
            filter=firestore.FieldFilter(PENDING_MEMBER_ID, "==", uid)
        )
        deleted = 0
        for request_doc in list(requests_query.stream()):
            request_doc.reference.delete()
            deleted += 1
        return deleted
