"""Ticket number assignment for ticketed models."""
import logging
from typing import Callable, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_random

from fieldops.core.exceptions import ConflictError
from fieldops.utils.tickets import next_ticket_number, parse_ticket_sequence

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 5

ModelType = TypeVar("ModelType")


class TicketCollisionError(ConflictError):
    """Concurrent inserts kept taking the ticket number first."""

    def __init__(self, ticket_number: str):
        super().__init__(f"Could not allocate ticket number {ticket_number}, please retry")
        self.ticket_number = ticket_number


def newest_ticket_first(column):
    """ORDER BY terms putting the highest sequence first.

    Padding is a minimum width, so a longer number is always a later one.
    """
    return func.length(column).desc(), column.desc()


def is_ticket_clash(exc: IntegrityError) -> bool:
    """True when the violated constraint is the unique ticket number."""
    return "ticket_number" in str(exc.orig)


async def current_ticket_count(db: AsyncSession, model, prefix: str) -> int:
    """Number of tickets already issued for ``model``.

    This is the count of non-null ticket numbers, raised to the highest
    issued sequence so that deleted rows never free a number for reuse.
    """
    count = (
        await db.execute(select(func.count(model.ticket_number)).where(model.ticket_number.isnot(None)))
    ).scalar_one()
    highest = (
        await db.execute(
            select(model.ticket_number)
            .where(model.ticket_number.like(f"{prefix}-%"))
            .order_by(*newest_ticket_first(model.ticket_number))
            .limit(1)
        )
    ).scalar_one_or_none()
    return max(count, parse_ticket_sequence(highest, prefix) or 0)


async def create_with_ticket(
    db: AsyncSession,
    model: Type[ModelType],
    prefix: str,
    build: Callable[[str], ModelType],
) -> ModelType:
    """Insert the object produced by ``build(ticket_number)``.

    The unique constraint on ``ticket_number`` decides races; on a collision
    the transaction is rolled back and the number recomputed. Any other
    integrity error is raised as is.
    """

    @retry(
        stop=stop_after_attempt(MAX_ATTEMPTS),
        wait=wait_random(min=0, max=0.05),
        retry=retry_if_exception_type(TicketCollisionError),
        reraise=True,
    )
    async def _attempt() -> ModelType:
        ticket_number = next_ticket_number(prefix, await current_ticket_count(db, model, prefix))
        obj = build(ticket_number)
        db.add(obj)
        try:
            await db.commit()
        except IntegrityError as exc:
            await db.rollback()
            if not is_ticket_clash(exc):
                raise
            logger.warning("Ticket %s already taken, retrying", ticket_number)
            raise TicketCollisionError(ticket_number) from exc
        await db.refresh(obj)
        return obj

    return await _attempt()
