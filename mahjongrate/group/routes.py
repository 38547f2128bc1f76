"""Callable endpoints for game records."""

from firebase_admin import firestore
from flask import current_app, g

from mahjongrate.auth.decorators import id_token_required
from mahjongrate.cleanup.groups import GroupCascadeResolver
from mahjongrate.core.constants import GAME_RECORDS_COLLECTION, RECORD_MEMBER_IDS
from mahjongrate.errors import NotFoundError, PermissionDeniedError
from mahjongrate.utils import callable_result

from . import bp


@bp.route("/<string:record_id>/leave", methods=["POST"])
@id_token_required
def leave_record(record_id):
    """Leave a game record, deleting it if the caller is the last member."""
    db = firestore.client()
    record_doc = db.collection(GAME_RECORDS_COLLECTION).document(record_id).get()
    if not record_doc.exists:
        raise NotFoundError("Game record not found.")

    members = (record_doc.to_dict() or {}).get(RECORD_MEMBER_IDS) or []
    if g.uid not in members:
        raise PermissionDeniedError("You are not a member of this game record.")

    resolver = GroupCascadeResolver(db, current_app.config["PRUNE_BATCH_SIZE"])
    outcome = resolver.resolve(record_doc, g.uid)
    return callable_result({"outcome": outcome.value})
