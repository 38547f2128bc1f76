"""Batched deletion of every document in a Firestore collection."""

from __future__ import annotations

from typing import TYPE_CHECKING, Union

from mahjongrate.core.constants import PRUNE_BATCH_SIZE

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client
    from google.cloud.firestore_v1.collection import CollectionReference


def prune_collection(
    db: Client,
    collection: Union[str, CollectionReference],
    batch_size: int = PRUNE_BATCH_SIZE,
) -> int:
    """Delete all documents in a collection, ``batch_size`` at a time.

    The Admin SDK has no "delete collection" call, so this queries a slice,
    deletes it in one batch and repeats until a query comes back empty. Each
    batch commit is atomic; the loop as a whole is not, but it can simply be
    called again to finish a collection left half-pruned.

    Subcollections of the deleted documents are not touched.

    Returns:
        int: the number of documents deleted.
    """
    if batch_size <= 0:
        raise ValueError("batch_size must be positive.")
    if isinstance(collection, str):
        collection = db.collection(collection)

    deleted = 0
    while True:
        docs = list(collection.limit(batch_size).stream())
        if not docs:
            return deleted

        batch = db.batch()
        for doc in docs:
            batch.delete(doc.reference)
        batch.commit()
        deleted += len(docs)
