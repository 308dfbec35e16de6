"""
Firestore query helpers.

NOTE: For firebase_admin SDK, we use positional arguments which still work.
The deprecation warning is just a warning - the functionality is still supported.
"""

from typing import Any, Dict, Optional


def where_filter(query, field_path: str, op_string: str, value):
    """
    Helper function for Firestore queries.

    Usage:
        query = where_filter(collection, "spot_id", "==", "spot_42")
        query = where_filter(query, "status", "==", "pending")
    """
    return query.where(field_path, op_string, value)


def apply_equality_filters(query, filters: Optional[Dict[str, Any]]):
    """Chain one '==' clause per filter entry."""
    for field_path, value in (filters or {}).items():
        query = where_filter(query, field_path, "==", value)
    return query
