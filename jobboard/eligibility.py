"""
Eligibility rules: who may claim, read, or plan to visit which board.

Pure predicates with no side effects. Proximity is checked by the
seeker; these functions only look at ownership.
"""

from __future__ import annotations

from jobboard.board import Board, BoardKind
from jobboard.state import AgentIdentity
from jobboard.ticket import Ticket, TicketScope


def is_eligible(ticket: Ticket, board: Board, identity: AgentIdentity) -> bool:
    """May `identity` claim `ticket` from `board`?"""
    if ticket.scope is TicketScope.FAMILY_ONLY:
        return board.kind is BoardKind.HOME and board.owner_id == identity.family_id

    if ticket.scope is TicketScope.WORKPLACE_ONLY:
        return (
            board.kind is BoardKind.WORK
            and identity.workplace_id != 0
            and board.owner_id == identity.workplace_id
        )

    return True


def can_read(board: Board, identity: AgentIdentity) -> bool:
    """Own-family home boards, and any workplace board (claiming is still gated)."""
    if board.kind is BoardKind.HOME:
        return board.owner_id == identity.family_id
    return True


def can_plan_visit(board: Board, identity: AgentIdentity) -> bool:
    """Boards worth walking to: own-family homes and, if employed, the agent's own workplace."""
    if board.kind is BoardKind.HOME:
        return board.owner_id == identity.family_id
    return identity.is_employed and board.owner_id == identity.workplace_id
