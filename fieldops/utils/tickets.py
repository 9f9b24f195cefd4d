"""Ticket number formatting.

Ticket numbers look like ``TSK-000123``: a prefix, a dash and a sequence
zero-padded to six digits.
"""
import re
from typing import Optional

TICKET_WIDTH = 6


def next_ticket_number(prefix: str, existing_count: int) -> str:
    """Ticket number following ``existing_count`` issued numbers."""
    if existing_count < 0:
        raise ValueError("existing_count must not be negative")
    return f"{prefix}-{existing_count + 1:0{TICKET_WIDTH}d}"


def parse_ticket_sequence(ticket: Optional[str], prefix: str) -> Optional[int]:
    """Numeric part of ``ticket`` or None when it does not carry ``prefix``."""
    if not ticket:
        return None
    match = re.fullmatch(rf"{re.escape(prefix)}-(\d+)", ticket)
    if match is None:
        return None
    return int(match.group(1))
