"""Core data types for the mahjongrate application."""

from typing import Any, List, Optional, TypedDict  # noqa: UP035


class ProfileDocument(TypedDict, total=False):
    """A 'members/{uid}' document."""

    name: str
    email: Optional[str]  # noqa: UP007
    iconURL: Optional[str]  # noqa: UP007
    iconPath: Optional[str]  # noqa: UP007


class _GameRecordBase(TypedDict):
    createdBy: str
    memberIDs: List[str]  # noqa: UP006


class GameRecordDocument(_GameRecordBase, total=False):
    """A 'gameRecords/{recordId}' document."""

    title: str
    description: Optional[str]  # noqa: UP007
    inviteCode: Optional[str]  # noqa: UP007
    date: Any
    updatedAt: Any
