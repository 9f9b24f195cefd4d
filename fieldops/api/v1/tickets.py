"""Ticket lookup endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.database import get_db
from fieldops.schemas.common import PaginatedResponse
from fieldops.schemas.ticket import TicketEntry, TicketStatistics, TicketType
from fieldops.services import ticketing_service

router = APIRouter()


@router.get("", response_model=PaginatedResponse[TicketEntry])
async def list_tickets(
    type: Optional[TicketType] = None,
    search: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    """Ticketed tasks, assignments and reports."""
    entries = await ticketing_service.list_tickets(db, ticket_type=type, search=search)
    return PaginatedResponse[TicketEntry](
        total=len(entries),
        skip=skip,
        limit=limit,
        items=entries[skip:skip + limit],
    )


@router.get("/statistics", response_model=TicketStatistics)
async def ticket_statistics(
    db: AsyncSession = Depends(get_db),
):
    """Ticket counts and the latest numbers issued."""
    return await ticketing_service.statistics(db)


@router.get("/search", response_model=PaginatedResponse[TicketEntry])
async def search_tickets(
    q: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
):
    """Search ticket numbers (at least two characters)."""
    entries = await ticketing_service.search_tickets(db, q)
    return PaginatedResponse[TicketEntry](total=len(entries), skip=0, limit=len(entries), items=entries)


@router.get("/number/{ticket_number}", response_model=TicketEntry)
async def get_ticket(
    ticket_number: str,
    db: AsyncSession = Depends(get_db),
):
    """Look up a task, assignment or report by ticket number."""
    return await ticketing_service.get_by_number(db, ticket_number)
