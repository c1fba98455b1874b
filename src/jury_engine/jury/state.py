from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable

from jury_engine._defaults import CONFIDENCE_RANGE, ENGAGEMENT_RANGE, OPINION_RANGE
from jury_engine.personas.base import JurorPersona
from jury_engine.utils import clamp

_BOUNDS = {
    "opinion": OPINION_RANGE,
    "confidence": CONFIDENCE_RANGE,
    "engagement": ENGAGEMENT_RANGE,
}


class Expression(str, Enum):
    NEUTRAL = "neutral"
    SKEPTICAL = "skeptical"
    SYMPATHETIC = "sympathetic"
    ANGRY = "angry"
    CONFUSED = "confused"
    BORED = "bored"
    SHOCKED = "shocked"


class Vote(str, Enum):
    GUILTY = "guilty"
    NOT_GUILTY = "not_guilty"


@dataclass(slots=True)
class JurorMemory:
    turn: int
    description: str
    impact: float
    emotional: bool
    phase: str = "trial"


@dataclass(slots=True)
class OpinionSnapshot:
    turn: int
    opinion: float


@dataclass(slots=True)
class JurorState:
    """Mutable per-juror state.

    ``opinion`` runs from -100 (guilty) to +100 (not guilty); ``confidence``
    and ``engagement`` run from 0 to 100. All three are clamped on every
    assignment, so no caller can push them out of range.
    """

    persona: JurorPersona
    opinion: float = 0.0
    confidence: float = 0.0
    engagement: float = 0.0
    expression: Expression = Expression.NEUTRAL
    memories: list[JurorMemory] = field(default_factory=list)
    opinion_history: list[OpinionSnapshot] = field(default_factory=list)
    seat_index: int = 0
    is_alternate: bool = False
    is_removed: bool = False
    removal_reason: str | None = None

    def __setattr__(self, name: str, value: object) -> None:
        bounds = _BOUNDS.get(name)
        if bounds is not None:
            value = clamp(value, *bounds)
        object.__setattr__(self, name, value)

    @property
    def id(self) -> str:
        return self.persona.id

    @property
    def name(self) -> str:
        return self.persona.name

    def copy(self) -> JurorState:
        return replace(
            self,
            memories=list(self.memories),
            opinion_history=list(self.opinion_history),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "seat_index": self.seat_index,
            "opinion": self.opinion,
            "confidence": self.confidence,
            "engagement": self.engagement,
            "expression": self.expression.value,
            "is_alternate": self.is_alternate,
            "is_removed": self.is_removed,
            "removal_reason": self.removal_reason,
            "memories": [
                {
                    "turn": m.turn,
                    "phase": m.phase,
                    "description": m.description,
                    "impact": m.impact,
                    "emotional": m.emotional,
                }
                for m in self.memories
            ],
        }


@dataclass(slots=True)
class JurorVote:
    juror_id: str
    juror_name: str
    vote: Vote
    confidence: float
    seat_index: int


def vote_of(juror: JurorState) -> Vote:
    """Project a juror's vote from the sign of their opinion."""
    return Vote.NOT_GUILTY if juror.opinion > 0 else Vote.GUILTY


def active(jurors: Iterable[JurorState]) -> list[JurorState]:
    return [juror for juror in jurors if not juror.is_removed]


def cast_votes(jurors: Iterable[JurorState]) -> list[JurorVote]:
    return [
        JurorVote(
            juror_id=juror.id,
            juror_name=juror.name,
            vote=vote_of(juror),
            confidence=juror.confidence,
            seat_index=juror.seat_index,
        )
        for juror in active(jurors)
    ]


def is_unanimous(votes: list[JurorVote]) -> bool:
    return bool(votes) and len({vote.vote for vote in votes}) == 1


def count_votes(votes: list[JurorVote]) -> tuple[int, int]:
    """Return ``(guilty, not_guilty)`` counts."""
    guilty = sum(1 for vote in votes if vote.vote == Vote.GUILTY)
    return guilty, len(votes) - guilty


@dataclass(slots=True)
class JuryBox:
    """Seated jurors plus the alternate bench for one trial.

    Seat indices identify seats, not people: when a seated juror is removed
    the next alternate is promoted into the same seat index. Alternates are
    only ever consumed, never created.
    """

    seated: list[JurorState]
    alternates: list[JurorState] = field(default_factory=list)
    dismissed: list[JurorState] = field(default_factory=list)
    applied_event_ids: set[str] = field(default_factory=set)

    @property
    def active(self) -> list[JurorState]:
        return active(self.seated)

    def occupant(self, seat_index: int) -> JurorState | None:
        for juror in self.seated:
            if juror.seat_index == seat_index:
                return juror
        return None

    def put(self, juror: JurorState) -> None:
        """Store *juror* in the seated slot or alternate slot matching its seat index."""
        for roster in (self.seated, self.alternates):
            for idx, current in enumerate(roster):
                if current.seat_index == juror.seat_index:
                    roster[idx] = juror
                    return
        raise KeyError(f"No seat with index {juror.seat_index}")

    def remove_juror(
        self,
        seat_index: int,
        reason: str,
        juror_id: str | None = None,
    ) -> tuple[JurorState | None, JurorState | None]:
        """Remove the juror in *seat_index* and promote the next alternate.

        Returns ``(removed, replacement)``. Removing an empty, already-removed,
        or (when *juror_id* is given) differently occupied seat is a no-op
        returning ``(None, None)``.
        """
        for idx, juror in enumerate(self.seated):
            if juror.seat_index != seat_index:
                continue
            if juror.is_removed or (juror_id is not None and juror.id != juror_id):
                return None, None

            removed = replace(juror, is_removed=True, removal_reason=reason)
            self.dismissed.append(removed)

            if not self.alternates:
                self.seated[idx] = removed
                return removed, None

            alternate = self.alternates.pop(0)
            replacement = replace(alternate, seat_index=seat_index, is_alternate=False)
            self.seated[idx] = replacement
            return removed, replacement
        return None, None

    def copy(self) -> JuryBox:
        return JuryBox(
            seated=[juror.copy() for juror in self.seated],
            alternates=[juror.copy() for juror in self.alternates],
            dismissed=list(self.dismissed),
            applied_event_ids=set(self.applied_event_ids),
        )

    def update_from(self, other: JuryBox) -> None:
        self.seated = other.seated
        self.alternates = other.alternates
        self.dismissed = other.dismissed
        self.applied_event_ids = other.applied_event_ids
