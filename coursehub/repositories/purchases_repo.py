"""Firestore accessors for purchases collection.

Purchases are keyed by Stripe Checkout session id so a replayed webhook
finds the earlier record.
"""


def doc_ref(db, stripe_session_id):
    return db.collection('purchases').document(stripe_session_id)


def get_doc(db, stripe_session_id, transaction=None):
    return doc_ref(db, stripe_session_id).get(transaction=transaction)
