"""Presence/absence relations flipped by a single logical operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from services.errors import InternalError


TOGGLE_ATTEMPTS = 2


@dataclass
class ToggleResult:
    created: Optional[Any] = None
    removed: bool = False


async def toggle_relation(db: AsyncSession, model, **match: Any) -> ToggleResult:
    """
    Remove the row matching ``match`` if it exists, otherwise create it.

    The delete is a single conditional statement and creation relies on the
    table's unique constraint, so two concurrent toggles on the same pair can
    never leave duplicate rows behind. A toggle that loses the insert race
    retries and removes the row the winner created.
    """
    conditions = [getattr(model, column) == value for column, value in match.items()]

    for _ in range(TOGGLE_ATTEMPTS):
        result = await db.execute(delete(model).where(*conditions))
        if result.rowcount:
            await db.commit()
            return ToggleResult(removed=True)

        row = model(**match)
        db.add(row)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            continue
        return ToggleResult(created=row)

    raise InternalError("Something went wrong")
