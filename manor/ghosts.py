"""Ghost event arbiter: the dead vote on how to meddle with the living."""

import logging
from collections import Counter
from typing import Optional

from manor.ledger import GhostVoteRecord
from manor.rules import GhostEvent
from manor.state import GameState

logger = logging.getLogger(__name__)

_ORDER = {event: i for i, event in enumerate(GhostEvent)}


def cast(state: GameState, voter_pin: str, event: GhostEvent) -> GhostVoteRecord:
    """Record a ghost vote for the current round, replacing the voter's earlier one."""
    record = GhostVoteRecord(round_index=state.round_index, voter_pin=voter_pin, event=GhostEvent(event))
    state.ledger.record_ghost_vote(record)
    return record


def is_resolution_round(state: GameState, round_index: Optional[int] = None) -> bool:
    if round_index is None:
        round_index = state.round_index
    return round_index % state.settings.ghost_event_interval == 0


def pending_tally(state: GameState, through_round: Optional[int] = None) -> Counter:
    """Votes cast since the last checkpoint, up to through_round (default: current round)."""
    if through_round is None:
        through_round = state.round_index
    votes = state.ledger.ghost_votes_between(state.ghosts.checkpoint, through_round)
    return Counter(v.event for v in votes)


def pick_winner(tally: Counter, exclude: Optional[GhostEvent] = None) -> Optional[GhostEvent]:
    """Most-voted event other than exclude; ties go to the event declared first."""
    candidates = [(count, event) for event, count in tally.items() if event != exclude and count > 0]
    if not candidates:
        return None
    best = max(count for count, _ in candidates)
    return min((event for count, event in candidates if count == best), key=_ORDER.__getitem__)


def resolve(state: GameState) -> Optional[GhostEvent]:
    """Pick this interval's event and consume the votes that chose it.

    Counts votes from every fully elapsed round since the last checkpoint. The
    event triggered last time cannot win again. Applying the effect is up to the caller.
    """
    arbiter = state.ghosts
    through = state.round_index - 1
    winner = pick_winner(pending_tally(state, through), exclude=arbiter.last_event)
    arbiter.checkpoint = through
    state.ledger.prune_ghost_votes(through)
    if winner is not None:
        arbiter.last_event = winner
        arbiter.last_event_round = state.round_index
        logger.info("Round %d: ghosts chose %s", state.round_index, winner.value)
    else:
        logger.info("Round %d: no ghost event", state.round_index)
    return winner
