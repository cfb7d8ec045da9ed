"""
Ticket Store

In-memory ticket collection for one dashboard session. Every write builds a
new snapshot and swaps it in one assignment, so readers never observe a
partially applied update.
"""
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from supportdesk.models.ticket import Ticket
from supportdesk.utils.logger import get_logger

logger = get_logger(__name__)


class TicketNotInStoreError(KeyError):
    """Raised when patching a ticket the store does not hold"""


class TicketStore:
    """Ordered tickets keyed by unique id"""

    def __init__(self, tickets: Iterable[Ticket] = ()):
        self._snapshot: Tuple[Ticket, ...] = ()
        self._index: Dict[str, int] = {}
        self.version = 0
        self.loaded = False
        if tickets:
            self.replace_all(tickets)

    def __len__(self) -> int:
        return len(self._snapshot)

    def __iter__(self) -> Iterator[Ticket]:
        return iter(self._snapshot)

    def __contains__(self, ticket_id: object) -> bool:
        return ticket_id in self._index

    def snapshot(self) -> Tuple[Ticket, ...]:
        """Current tickets in display order"""
        return self._snapshot

    def get(self, ticket_id: str) -> Optional[Ticket]:
        position = self._index.get(ticket_id)
        return None if position is None else self._snapshot[position]

    def replace_all(self, tickets: Iterable[Ticket]) -> None:
        """
        Rebuild the store from a full listing

        Order is preserved; a repeated id keeps its first occurrence.
        """
        ordered: List[Ticket] = []
        index: Dict[str, int] = {}
        for ticket in tickets:
            if ticket.id in index:
                logger.warning(f"Duplicate ticket id {ticket.id} in listing, keeping first")
                continue
            index[ticket.id] = len(ordered)
            ordered.append(ticket)

        self._commit(tuple(ordered), index)
        self.loaded = True

    def replace(self, ticket: Ticket) -> Ticket:
        """
        Swap one entry for a new version of the same ticket

        Raises:
            TicketNotInStoreError: If the id is unknown
        """
        position = self._index.get(ticket.id)
        if position is None:
            raise TicketNotInStoreError(ticket.id)

        updated = self._snapshot[:position] + (ticket,) + self._snapshot[position + 1:]
        self._commit(updated, self._index)
        return ticket

    def patch(self, ticket_id: str, **changes: Any) -> Ticket:
        """Replace an entry with a copy carrying the given field changes"""
        current = self.get(ticket_id)
        if current is None:
            raise TicketNotInStoreError(ticket_id)
        return self.replace(current.model_copy(update=changes))

    def _commit(self, snapshot: Tuple[Ticket, ...], index: Dict[str, int]) -> None:
        self._snapshot, self._index = snapshot, index
        self.version += 1
