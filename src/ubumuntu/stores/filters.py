# src/ubumuntu/stores/filters.py
"""Metadata filter grammar shared by every vector store.

A filter is a plain dict:

    {"owner_id": "u1"}                                  # equality
    {"access": {"$ne": "personal"}}                     # $eq, $ne, $in, $nin
    {"$and": [{...}, {...}]}, {"$or": [{...}, {...}]}   # combinators
    {"categories": {"$in": ["work", "health"]}}         # set membership

Several keys in one dict are combined with AND. On the ``categories`` field,
``$eq``/``$ne`` test membership of one name and ``$in``/``$nin`` test whether
any of the names is present.
"""

from collections.abc import Iterable
from typing import Any, Literal

from ubumuntu.exceptions import InvalidFilterError
from ubumuntu.models.content import normalize_tags

Filter = dict[str, Any]
AccessScope = Literal["all", "personal", "public"]

CATEGORY_FIELD = "categories"
COMPARISONS = ("$eq", "$ne", "$in", "$nin")
COMBINATORS = ("$and", "$or")
SCALAR_TYPES = (str, int, float, bool)


def validate_filter(where: Filter | None) -> None:
    """Raise InvalidFilterError unless ``where`` follows the grammar."""
    if where is None:
        return
    if not isinstance(where, dict) or not where:
        raise InvalidFilterError(f"Filter must be a non-empty dict, got {where!r}")

    for key, value in where.items():
        if key in COMBINATORS:
            if not isinstance(value, list) or not value:
                raise InvalidFilterError(f"{key} expects a non-empty list of filters")
            for clause in value:
                validate_filter(clause)
        elif key.startswith("$"):
            raise InvalidFilterError(f"Unknown filter operator: {key}")
        elif isinstance(value, dict):
            _validate_comparison(key, value)
        elif not isinstance(value, SCALAR_TYPES):
            raise InvalidFilterError(f"Unsupported value for {key}: {value!r}")


def _validate_comparison(field: str, comparison: dict[str, Any]) -> None:
    if len(comparison) != 1:
        raise InvalidFilterError(f"Comparison on {field} must have exactly one operator")
    op, operand = next(iter(comparison.items()))
    if op not in COMPARISONS:
        raise InvalidFilterError(f"Unknown comparison operator on {field}: {op}")
    if op in ("$in", "$nin"):
        if not isinstance(operand, list | tuple | set | frozenset) or not operand:
            raise InvalidFilterError(f"{op} on {field} expects a non-empty list")
        if not all(isinstance(v, SCALAR_TYPES) for v in operand):
            raise InvalidFilterError(f"{op} on {field} expects scalar values")
    elif not isinstance(operand, SCALAR_TYPES):
        raise InvalidFilterError(f"{op} on {field} expects a scalar value")


def matches(where: Filter | None, metadata: dict[str, Any]) -> bool:
    """Evaluate a (valid) filter against one metadata document."""
    if not where:
        return True

    for key, value in where.items():
        if key == "$and":
            if not all(matches(clause, metadata) for clause in value):
                return False
        elif key == "$or":
            if not any(matches(clause, metadata) for clause in value):
                return False
        else:
            op, operand = next(iter(value.items())) if isinstance(value, dict) else ("$eq", value)
            if not _compare(key, op, operand, metadata):
                return False
    return True


def _compare(field: str, op: str, operand: Any, metadata: dict[str, Any]) -> bool:
    if field == CATEGORY_FIELD:
        present = normalize_tags(metadata.get(field))
        wanted = normalize_tags([operand] if op in ("$eq", "$ne") else operand)
        hit = bool(present & wanted)
        return hit if op in ("$eq", "$in") else not hit

    if field not in metadata:
        return op in ("$ne", "$nin")
    actual = metadata[field]
    if op == "$eq":
        return actual == operand
    if op == "$ne":
        return actual != operand
    if op == "$in":
        return actual in operand
    return actual not in operand


def all_of(*clauses: Filter | None) -> Filter | None:
    """AND together the non-empty clauses, collapsing trivial cases."""
    present = [c for c in clauses if c]
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    return {"$and": present}


def access_filter(owner_id: str, scope: AccessScope = "all") -> Filter:
    """Build the visibility filter for one user.

    ``all`` admits the user's own records and public records, ``personal``
    only the user's own, ``public`` only public ones. Another user's personal
    records are never admitted.
    """
    if scope == "personal":
        return {"owner_id": owner_id}
    if scope == "public":
        return {"access": "public"}
    if scope == "all":
        return {"$or": [{"owner_id": owner_id}, {"access": "public"}]}
    raise InvalidFilterError(f"Unknown access scope: {scope!r}")


def category_filter(categories: Iterable[str] | str | None) -> Filter | None:
    """Match records sharing at least one of the given categories."""
    names = normalize_tags(categories)
    if not names:
        return None
    return {CATEGORY_FIELD: {"$in": sorted(names)}}


def parent_filter(parent_ids: Iterable[str] | None) -> Filter | None:
    """Match records belonging to any of the given parents."""
    ids = sorted({p.strip() for p in parent_ids or () if p and p.strip()})
    if not ids:
        return None
    if len(ids) == 1:
        return {"parent_id": ids[0]}
    return {"parent_id": {"$in": ids}}


def owned_parent_filter(parent_id: str, owner_id: str) -> Filter:
    """Every chunk of one parent document, restricted to its owner."""
    return {"$and": [{"parent_id": parent_id}, {"owner_id": owner_id}]}
