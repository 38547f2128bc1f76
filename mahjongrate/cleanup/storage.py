"""Resolve and delete profile images in Cloud Storage."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from flask import current_app
from google.api_core.exceptions import NotFound

from mahjongrate.core.constants import GS_URL_SCHEME, MEMBER_ICON_PATH, MEMBER_ICON_URL
from mahjongrate.core.types import ProfileDocument


@dataclass(frozen=True)
class ObjectPath:
    """A blob location. ``bucket`` is None for the default bucket."""

    bucket: Optional[str]
    name: str


def resolve_object_path(value: Optional[str]) -> Optional[ObjectPath]:
    """Parse ``gs://bucket/path/to/file`` or a bare ``path/to/file``.

    Returns None when the value cannot name an object.
    """
    if not value or not value.strip():
        return None
    value = value.strip()

    if not value.startswith(GS_URL_SCHEME):
        return ObjectPath(bucket=None, name=value)

    bucket_name, _, object_name = value[len(GS_URL_SCHEME) :].partition("/")
    if not bucket_name or not object_name:
        return None
    return ObjectPath(bucket=bucket_name, name=object_name)


def delete_object(storage: Any, value: Optional[str]) -> bool:
    """Delete the object named by a gs:// URL or bare path.

    An object that is already gone is not an error.

    Returns:
        bool: True if an object was deleted.
    """
    path = resolve_object_path(value)
    if path is None:
        current_app.logger.info(f"Skipping unresolvable storage path: {value!r}")
        return False

    bucket = storage.bucket(path.bucket) if path.bucket else storage.bucket()
    try:
        bucket.blob(path.name).delete()
    except NotFound:
        current_app.logger.info(f"Storage object already absent: {path.name}")
        return False
    return True


def delete_profile_icon(storage: Any, profile: ProfileDocument, uid: str) -> bool:
    """Delete the image referenced by a 'members' document.

    ``iconPath`` is preferred. Older documents only carry ``iconURL``, which
    is only trusted when it is a gs:// URL; https download URLs are left
    alone.
    """
    icon_path = profile.get(MEMBER_ICON_PATH)
    if icon_path:
        return delete_object(storage, icon_path)

    icon_url = profile.get(MEMBER_ICON_URL)
    if not icon_url:
        return False
    if icon_url.startswith(GS_URL_SCHEME):
        return delete_object(storage, icon_url)

    current_app.logger.info(f"iconURL for {uid} is not a gs:// URL, skipping delete")
    return False
