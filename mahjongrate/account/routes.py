"""Callable endpoints for the signed-in user's own account."""

from firebase_admin import auth, firestore, storage
from flask import current_app, g

from mahjongrate.auth.decorators import id_token_required
from mahjongrate.cleanup.account import AccountDeletionService
from mahjongrate.cleanup.storage import delete_profile_icon
from mahjongrate.core.constants import (
    DELETE_ACCOUNT_CONFIRMATION,
    MEMBER_ICON_PATH,
    MEMBER_ICON_URL,
    MEMBERS_COLLECTION,
)
from mahjongrate.core.updates import DeleteField, to_update_data
from mahjongrate.errors import NotFoundError, ValidationError
from mahjongrate.utils import callable_data, callable_result

from . import bp


@bp.route("/deleteMyAccount", methods=["POST"])
@id_token_required
def delete_my_account():
    """Delete the caller's account and all of their data.

    The client re-authenticates before calling this, and must send
    ``{"data": {"confirm": "DELETE"}}``.
    """
    confirm = callable_data().get("confirm", "")
    if confirm != DELETE_ACCOUNT_CONFIRMATION:
        raise ValidationError("confirm is invalid.")

    service = AccountDeletionService(
        firestore.client(),
        storage,
        auth,
        batch_size=current_app.config["PRUNE_BATCH_SIZE"],
    )
    service.delete_account(g.uid)
    return callable_result({"ok": True})


@bp.route("/removeProfileIcon", methods=["POST"])
@id_token_required
def remove_profile_icon():
    """Delete the caller's profile image and clear it from their profile."""
    db = firestore.client()
    member_ref = db.collection(MEMBERS_COLLECTION).document(g.uid)
    member_doc = member_ref.get()
    if not member_doc.exists:
        raise NotFoundError("Profile not found.")

    profile = member_doc.to_dict() or {}
    removed = delete_profile_icon(storage, profile, g.uid)

    cleared = [
        DeleteField(name)
        for name in (MEMBER_ICON_URL, MEMBER_ICON_PATH)
        if profile.get(name) is not None
    ]
    if cleared:
        member_ref.update(to_update_data(cleared))
    return callable_result({"ok": True, "removed": removed})
