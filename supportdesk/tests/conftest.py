"""
Shared fixtures: mocked Supabase client, ticket factories and a fake
ticket service for the status flow
"""
import asyncio
from datetime import datetime, timezone
from typing import Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from supportdesk.models.ticket import StatusUpdateRow, Ticket, TicketCategory, TicketStatus
from supportdesk.repositories.base_repository import RemoteServiceError


@pytest.fixture
def mock_supabase():
    """Fixture for mock Supabase client; every builder call returns the client"""
    client = MagicMock()
    client.table.return_value = client
    client.select.return_value = client
    client.insert.return_value = client
    client.update.return_value = client
    client.eq.return_value = client
    client.in_.return_value = client
    client.order.return_value = client
    client.limit.return_value = client
    client.single.return_value = client
    client.rpc.return_value = client
    client.execute.return_value = MagicMock(data=[], count=0)
    return client


def make_ticket(ticket_id: str = "1", status: TicketStatus = TicketStatus.OPEN, **overrides) -> Ticket:
    """Build a ticket with sensible defaults"""
    data = {
        "id": ticket_id,
        "status": status,
        "project": "Website",
        "category": TicketCategory.BUG,
        "description": "The login button does nothing",
        "name": "Ana Gomez",
        "email": "ana@example.com",
        "user_id": f"user-{ticket_id}",
        "created_at": datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    }
    data.update(overrides)
    return Ticket(**data)


def ticket_row(ticket_id: str = "1", status: str = "Open", **overrides) -> Dict:
    """Raw `tickets` row as PostgREST returns it, joined with its user"""
    row = {
        "id": ticket_id,
        "status": status,
        "project": "Website",
        "category": "Bug",
        "description": "The login button does nothing",
        "title": "Bug - Website",
        "user_id": "user-1",
        "created_at": "2024-05-01T12:00:00+00:00",
        "updated_at": "2024-05-01T12:00:00+00:00",
        "users": {"name": "Ana Gomez", "email": "ana@example.com"},
    }
    row.update(overrides)
    return row


class FakeTicketService:
    """
    In-memory stand-in for the ticket repository

    `update_status` echoes the requested status unless an error, a custom
    response or a gate is configured for the ticket.
    """

    def __init__(self, tickets: Optional[List[Ticket]] = None):
        self.tickets: List[Ticket] = list(tickets or [])
        self.calls: List[tuple] = []
        self.errors: Dict[str, Exception] = {}
        self.responses: Dict[str, List[StatusUpdateRow]] = {}
        self.gates: Dict[str, asyncio.Event] = {}
        self.delay: float = 0.0
        self.list_calls = 0
        self.list_error: Optional[RemoteServiceError] = None
        self.server_updated_at = datetime(2024, 6, 1, 9, 30, tzinfo=timezone.utc)

    async def update_status(self, ticket_id: str, status: TicketStatus, updated_at: str) -> List[StatusUpdateRow]:
        self.calls.append((ticket_id, status, updated_at))
        gate = self.gates.get(ticket_id)
        if gate is not None:
            await gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if ticket_id in self.errors:
            raise self.errors[ticket_id]
        if ticket_id in self.responses:
            return self.responses[ticket_id]

        self.tickets = [
            t.model_copy(update={"status": status, "updated_at": self.server_updated_at})
            if t.id == ticket_id else t
            for t in self.tickets
        ]
        return [StatusUpdateRow(id=ticket_id, status=status, updated_at=self.server_updated_at)]

    async def list_all(self) -> List[Ticket]:
        self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        return list(self.tickets)


@pytest.fixture
def fake_remote():
    return FakeTicketService([
        make_ticket("1", TicketStatus.OPEN),
        make_ticket("2", TicketStatus.IN_PROGRESS),
        make_ticket("3", TicketStatus.CLOSED),
    ])
