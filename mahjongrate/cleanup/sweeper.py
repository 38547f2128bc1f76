"""Periodic removal of sign-ups that never verified their email."""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Any

from flask import current_app

from mahjongrate.core.constants import (
    LIST_USERS_PAGE_SIZE,
    UNVERIFIED_USER_MAX_AGE_MINUTES,
)


@dataclass
class SweepReport:
    """Counts from one sweep."""

    scanned: int = 0
    deleted: int = 0
    failed: int = 0


def is_stale_unverified(user: Any, cutoff_ms: int) -> bool:
    """Return True for an enabled, unverified user created before the cutoff."""
    if user.disabled or user.email_verified:
        return False
    metadata = getattr(user, "user_metadata", None)
    created_ms = getattr(metadata, "creation_timestamp", None)
    if created_ms is None:
        return False
    return created_ms < cutoff_ms


class StaleIdentitySweeper:
    """Delete Auth users that signed up but never verified their email.

    Unverified users cannot join game records and never get a 'members'
    document, so deleting the Auth user is all the cleanup they need.
    """

    def __init__(
        self,
        identity: Any,
        max_age: datetime.timedelta = datetime.timedelta(
            minutes=UNVERIFIED_USER_MAX_AGE_MINUTES
        ),
        page_size: int = LIST_USERS_PAGE_SIZE,
    ) -> None:
        self.identity = identity
        self.max_age = max_age
        self.page_size = page_size

    def sweep(self, now: datetime.datetime | None = None) -> SweepReport:
        """Scan every page of users and bulk-delete the stale ones."""
        if now is None:
            now = datetime.datetime.now(datetime.timezone.utc)
        cutoff = now - self.max_age
        cutoff_ms = int(cutoff.timestamp() * 1000)

        report = SweepReport()
        page_token = None
        while True:
            page = self.identity.list_users(
                page_token=page_token, max_results=self.page_size
            )
            users = list(page.users)
            report.scanned += len(users)

            uids = [user.uid for user in users if is_stale_unverified(user, cutoff_ms)]
            if uids:
                self._delete_uids(uids, cutoff, report)

            page_token = page.next_page_token
            if not page_token:
                break

        current_app.logger.info(
            f"Unverified user sweep finished: scanned={report.scanned} "
            f"deleted={report.deleted} failed={report.failed}"
        )
        return report

    def _delete_uids(
        self, uids: list[str], cutoff: datetime.datetime, report: SweepReport
    ) -> None:
        current_app.logger.info(
            f"Deleting {len(uids)} unverified users created before "
            f"{cutoff.isoformat()}: {uids}"
        )
        result = self.identity.delete_users(uids)
        report.deleted += result.success_count
        report.failed += result.failure_count
        for error in result.errors:
            current_app.logger.warning(
                f"Failed to delete unverified user {uids[error.index]}: {error.reason}"
            )
