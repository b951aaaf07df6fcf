"""Shared Firestore query helpers.

Uses keyword-based filters to avoid positional-argument warnings in newer
Firestore SDK versions. Falls back to positional style for simple test doubles
that do not support keyword filters.
"""

from google.cloud.firestore_v1.base_query import FieldFilter


def apply_where(query, field_path, op_string, value):
    try:
        return query.where(filter=FieldFilter(field_path, op_string, value))
    except TypeError:
        return query.where(field_path, op_string, value)


def apply_equals(query, **fields):
    """Chain one equality filter per keyword, in keyword order."""
    for field_path, value in fields.items():
        query = apply_where(query, field_path, '==', value)
    return query


def first_doc(query):
    for doc in query.limit(1).stream():
        return doc
    return None


def snapshot_to_dict(snapshot):
    if snapshot is None or not snapshot.exists:
        return None
    return snapshot.to_dict() or {}
