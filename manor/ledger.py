"""Turn ledger: append-only per-round log of moves, votes, kills and ghost votes.

The ledger stores facts only; callers validate before recording. Alongside the
append-only lists it keeps a per-round index so "has X acted this round"
queries never rescan history.
"""

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Optional

from manor.rules import GhostEvent, KillReason, Role

if TYPE_CHECKING:
    from manor.state import Player


@dataclass(frozen=True)
class MoveRecord:
    """One move. from_room == to_room marks a Killer stay."""

    round_index: int
    pin: str
    from_room: str
    to_room: str

    @property
    def is_real(self) -> bool:
        return self.from_room != self.to_room


@dataclass(frozen=True)
class VoteRecord:
    round_index: int
    voter_pin: str
    target_pin: str


@dataclass(frozen=True)
class KillRecord:
    round_index: int
    room: str
    victim_pin: str
    resolved: bool
    reason: KillReason


@dataclass(frozen=True)
class GhostVoteRecord:
    round_index: int
    voter_pin: str
    event: GhostEvent


@dataclass
class TurnLedger:
    moves: list[MoveRecord] = field(default_factory=list)
    votes: list[VoteRecord] = field(default_factory=list)
    kills: list[KillRecord] = field(default_factory=list)
    # round -> pin -> record; a later ghost vote in the same round replaces the earlier one
    ghost_votes: dict[int, dict[str, GhostVoteRecord]] = field(default_factory=dict)
    _moves_by_round: dict[int, dict[str, list[MoveRecord]]] = field(
        default_factory=lambda: defaultdict(lambda: defaultdict(list))
    )
    _votes_by_round: dict[int, dict[str, VoteRecord]] = field(default_factory=lambda: defaultdict(dict))
    _kills_by_round: dict[int, list[KillRecord]] = field(default_factory=lambda: defaultdict(list))

    # --- appends ---

    def record_move(self, record: MoveRecord) -> None:
        self.moves.append(record)
        self._moves_by_round[record.round_index][record.pin].append(record)

    def record_vote(self, record: VoteRecord) -> None:
        self.votes.append(record)
        self._votes_by_round[record.round_index][record.voter_pin] = record

    def record_kill(self, record: KillRecord) -> None:
        self.kills.append(record)
        self._kills_by_round[record.round_index].append(record)

    def record_ghost_vote(self, record: GhostVoteRecord) -> None:
        self.ghost_votes.setdefault(record.round_index, {})[record.voter_pin] = record

    # --- move queries ---

    def moves_for(self, round_index: int, pin: str) -> list[MoveRecord]:
        by_pin = self._moves_by_round.get(round_index)
        if not by_pin:
            return []
        return list(by_pin.get(pin, ()))

    def has_moved(self, round_index: int, pin: str) -> bool:
        return bool(self.moves_for(round_index, pin))

    def move_count(self, round_index: int, pin: str) -> int:
        return len(self.moves_for(round_index, pin))

    def real_move_count(self, round_index: int, pin: str) -> int:
        """Moves that changed room (stays excluded)."""
        return sum(1 for m in self.moves_for(round_index, pin) if m.is_real)

    def all_living_have_moved(self, round_index: int, players: Iterable["Player"]) -> bool:
        """True when there is at least one living player and every living player has moved."""
        living = [p for p in players if p.alive]
        return bool(living) and all(self.has_moved(round_index, p.pin) for p in living)

    def all_living_victims_have_moved(self, round_index: int, players: Iterable["Player"]) -> bool:
        victims = [p for p in players if p.alive and p.role == Role.VICTIM]
        return all(self.has_moved(round_index, p.pin) for p in victims)

    # --- vote queries ---

    def has_voted(self, round_index: int, pin: str) -> bool:
        return pin in self._votes_by_round.get(round_index, {})

    def votes_in(self, round_index: int) -> list[VoteRecord]:
        return list(self._votes_by_round.get(round_index, {}).values())

    def vote_tally(self, round_index: int) -> Counter:
        return Counter(v.target_pin for v in self.votes_in(round_index))

    def majority_target(self, round_index: int) -> Optional[str]:
        """Pin with a strict single maximum of votes this round; None on any tie or no votes."""
        counts = self.vote_tally(round_index)
        if not counts:
            return None
        max_votes = max(counts.values())
        leaders = [pin for pin, c in counts.items() if c == max_votes]
        if len(leaders) != 1:
            return None
        return leaders[0]

    # --- kill queries ---

    def kills_in(self, round_index: int) -> list[KillRecord]:
        return list(self._kills_by_round.get(round_index, ()))

    def has_any_kill(self, round_index: int) -> bool:
        return bool(self._kills_by_round.get(round_index))

    def kills_in_room(self, round_index: int, room: str) -> list[KillRecord]:
        return [k for k in self.kills_in(round_index) if k.room == room]

    def last_direct_kill(self) -> Optional[KillRecord]:
        for k in reversed(self.kills):
            if k.reason == KillReason.DIRECT:
                return k
        return None

    # --- ghost votes ---

    def ghost_vote_for(self, round_index: int, pin: str) -> Optional[GhostVoteRecord]:
        return self.ghost_votes.get(round_index, {}).get(pin)

    def ghost_votes_between(self, after_round: int, through_round: int) -> list[GhostVoteRecord]:
        """Ghost votes with after_round < round <= through_round, oldest round first."""
        return [
            record
            for r in sorted(self.ghost_votes)
            if after_round < r <= through_round
            for record in self.ghost_votes[r].values()
        ]

    def prune_ghost_votes(self, through_round: int) -> None:
        for r in [r for r in self.ghost_votes if r <= through_round]:
            del self.ghost_votes[r]

    # --- cascade ---

    def purge_pin(self, pin: str) -> None:
        """Drop every record that mentions pin (player removed by the GM)."""
        self.moves = [m for m in self.moves if m.pin != pin]
        self.votes = [v for v in self.votes if v.voter_pin != pin and v.target_pin != pin]
        self.kills = [k for k in self.kills if k.victim_pin != pin]
        for by_pin in self.ghost_votes.values():
            by_pin.pop(pin, None)
        self._reindex()

    def _reindex(self) -> None:
        self._moves_by_round = defaultdict(lambda: defaultdict(list))
        self._votes_by_round = defaultdict(dict)
        self._kills_by_round = defaultdict(list)
        for m in self.moves:
            self._moves_by_round[m.round_index][m.pin].append(m)
        for v in self.votes:
            self._votes_by_round[v.round_index][v.voter_pin] = v
        for k in self.kills:
            self._kills_by_round[k.round_index].append(k)
