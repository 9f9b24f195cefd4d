"""Ticket lookup schemas."""
from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel

TicketType = Literal["task", "assignment", "report"]


class TicketEntry(BaseModel):
    """A ticketed record of any kind; reports carry no status."""

    ticket_number: str
    type: TicketType
    id: UUID
    title: Optional[str] = None
    status: Optional[str] = None
    created_at: datetime


class TicketStatistics(BaseModel):
    total_tickets: int
    task_tickets: int
    assignment_tickets: int
    report_tickets: int
    latest_task_ticket: Optional[str] = None
    latest_assignment_ticket: Optional[str] = None
    latest_report_ticket: Optional[str] = None
