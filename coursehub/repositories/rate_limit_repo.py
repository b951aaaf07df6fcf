"""Firestore accessors for rate limit counters."""


def counter_doc_ref(db, collection_name, counter_id):
    return db.collection(collection_name).document(counter_id)


def get_counter(db, collection_name, counter_id, transaction=None):
    return counter_doc_ref(db, collection_name, counter_id).get(transaction=transaction)
