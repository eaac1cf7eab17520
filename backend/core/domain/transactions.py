"""
core.domain.transactions — Helpers for safe concurrent writes.

Every assignment in the case lifecycle is contended: many responders'
devices hit the API at the same time and there is no serialization point
in the application.  Correctness therefore comes from the database, using
two primitives exposed here:

* ``conditional_update`` — a single ``UPDATE ... WHERE <precondition>``
  (compare-and-set).  The row count tells the caller whether it won.
* ``atomic_increment`` — ``UPDATE ... SET f = f + n`` through ``F()``
  expressions, never a read-modify-write of a plain value.

Usage::

    from core.domain.transactions import atomic_increment, conditional_update

    won = conditional_update(
        Case,
        pk=case_id,
        precondition={"status": "pending", "assigned_responder__isnull": True},
        fields={"status": "accepted", "assigned_responder": user},
    )

    atomic_increment(ResponderProfile, {"user_id": uid}, points=10, resolved_count=1)
"""

from __future__ import annotations

from typing import Any, Mapping

from django.db import models
from django.db.models import F
from django.utils import timezone


def conditional_update(
    model_class: type[models.Model],
    *,
    pk: Any,
    precondition: Mapping[str, Any],
    fields: Mapping[str, Any],
) -> bool:
    """
    Atomically apply ``fields`` to row ``pk`` only if ``precondition`` holds.

    The filter and the write are one SQL statement, so two concurrent
    callers with the same precondition cannot both succeed.  ``updated_at``
    is refreshed when the model has one (``QuerySet.update`` skips
    ``auto_now``).

    Args:
        model_class:  The Django model class.
        pk:           Primary key of the target row.
        precondition: ORM lookups that must match for the write to apply.
        fields:       Field values to write.

    Returns:
        ``True`` if exactly one row was updated, ``False`` if the
        precondition failed (or the row no longer exists).
    """
    values = dict(fields)
    field_names = {f.name for f in model_class._meta.get_fields()}
    if "updated_at" in field_names:
        values.setdefault("updated_at", timezone.now())

    updated = (
        model_class.objects
        .filter(pk=pk, **precondition)
        .update(**values)
    )
    return updated == 1


def atomic_increment(
    model_class: type[models.Model],
    lookup: Mapping[str, Any],
    **deltas: int,
) -> int:
    """
    Increment integer fields with ``F()`` expressions.

    Args:
        model_class: The Django model class.
        lookup:      ORM lookups selecting the row(s) to increment.
        **deltas:    ``field_name=amount`` pairs; amounts must be >= 0.

    Returns:
        Number of rows updated.

    Raises:
        ValueError: If a delta is negative (counters only ever grow).
    """
    for name, amount in deltas.items():
        if amount < 0:
            raise ValueError(f"Refusing to decrement '{name}' by {amount}.")

    return (
        model_class.objects
        .filter(**lookup)
        .update(**{name: F(name) + amount for name, amount in deltas.items()})
    )

