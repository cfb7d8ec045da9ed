"""
Dashboard filtering, search and statistics over a ticket snapshot
"""
from typing import Iterable, List

from supportdesk.models.schemas import FilterOptions, TicketFilterParams, TicketStats
from supportdesk.models.ticket import Ticket, TicketStatus
from supportdesk.utils.validators import email_domain

# Select values that mean "no filter"
ALL_VALUES = {"", "all", "all_projects", "all_users", "all_domains"}


def _active(value: str) -> bool:
    return value.strip() not in ALL_VALUES


def apply_filters(tickets: Iterable[Ticket], params: TicketFilterParams) -> List[Ticket]:
    """
    Filter tickets by status, project, user name, email domain and search term

    Search is case-insensitive over id, name, email and description.
    """
    result = list(tickets)

    if _active(params.status):
        result = [t for t in result if t.status.value == params.status]

    if _active(params.project):
        result = [t for t in result if t.project == params.project]

    if _active(params.user):
        result = [t for t in result if t.name == params.user]

    if _active(params.email_domain):
        domain = params.email_domain.strip().lstrip("@").lower()
        result = [t for t in result if email_domain(t.email) == domain]

    term = params.search.strip().lower()
    if term:
        result = [
            t for t in result
            if term in t.id.lower()
            or term in t.name.lower()
            or term in t.email.lower()
            or term in t.description.lower()
        ]

    return result


def compute_stats(tickets: Iterable[Ticket]) -> TicketStats:
    """Count tickets per status"""
    stats = TicketStats()
    for ticket in tickets:
        stats.total += 1
        if ticket.status == TicketStatus.OPEN:
            stats.open += 1
        elif ticket.status == TicketStatus.IN_PROGRESS:
            stats.in_progress += 1
        else:
            stats.closed += 1
    return stats


def filter_options(tickets: Iterable[Ticket]) -> FilterOptions:
    """Distinct projects, user names and email domains, sorted"""
    tickets = list(tickets)
    return FilterOptions(
        projects=sorted({t.project for t in tickets if t.project}),
        users=sorted({t.name for t in tickets if t.name}),
        email_domains=sorted({email_domain(t.email) for t in tickets if email_domain(t.email)}),
    )
