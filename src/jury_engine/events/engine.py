from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from jury_engine.jury.state import JurorState, JuryBox, active
from jury_engine.randomness import IdGenerator, pick, resolve_rng, shuffled

logger = logging.getLogger(__name__)


class JuryEventType(str, Enum):
    ILLNESS = "illness"
    MISCONDUCT = "misconduct"
    TAMPERING = "tampering"
    CONFLICT = "conflict"
    HOLDOUT = "holdout"


class ConsequenceKind(str, Enum):
    REMOVE_JUROR = "remove_juror"
    OPINION_SHIFT = "opinion_shift"
    ENGAGEMENT_CHANGE = "engagement_change"
    MISTRIAL_RISK = "mistrial_risk"
    NONE = "none"


@dataclass(frozen=True, slots=True)
class JuryEventConsequence:
    kind: ConsequenceKind
    seat_index: int | None = None
    juror_id: str | None = None
    reason: str | None = None
    shift: float = 0.0
    delta: float = 0.0
    probability: float = 0.0

    @classmethod
    def none(cls) -> JuryEventConsequence:
        return cls(kind=ConsequenceKind.NONE)


@dataclass(frozen=True, slots=True)
class JuryEvent:
    id: str
    type: JuryEventType
    target_seat_index: int
    description: str
    consequence: JuryEventConsequence
    secondary_seat_index: int | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "target_seat_index": self.target_seat_index,
            "secondary_seat_index": self.secondary_seat_index,
            "description": self.description,
            "consequence": {
                "kind": self.consequence.kind.value,
                "seat_index": self.consequence.seat_index,
                "juror_id": self.consequence.juror_id,
                "reason": self.consequence.reason,
                "shift": self.consequence.shift,
                "delta": self.consequence.delta,
                "probability": self.consequence.probability,
            },
        }


@dataclass(slots=True)
class JuryEventConfig:
    tampering_removal_chance: float = 0.5
    tampering_shift: float = 15
    fence_sitter_threshold: float = 15
    conflict_shift_span: float = 10
    holdout_engagement_delta: float = -20


@dataclass(slots=True)
class ConsequenceContext:
    target: JurorState
    jurors: list[JurorState]
    rng: random.Random
    config: JuryEventConfig


ConsequenceFactory = Callable[[ConsequenceContext], JuryEventConsequence]


@dataclass(frozen=True, slots=True)
class JuryEventTemplate:
    type: JuryEventType
    probability: float
    min_turn: int
    deliberation_only: bool
    descriptions: tuple[str, ...]
    consequence: ConsequenceFactory = field(compare=False)

    def allowed(self, turn: int, is_deliberation: bool) -> bool:
        return turn >= self.min_turn and self.deliberation_only == is_deliberation


def _removal(reason: str) -> ConsequenceFactory:
    def _build(ctx: ConsequenceContext) -> JuryEventConsequence:
        return JuryEventConsequence(
            kind=ConsequenceKind.REMOVE_JUROR,
            seat_index=ctx.target.seat_index,
            juror_id=ctx.target.id,
            reason=reason,
        )

    return _build


def _tampering(ctx: ConsequenceContext) -> JuryEventConsequence:
    if ctx.rng.random() < ctx.config.tampering_removal_chance:
        return _removal("potential tampering")(ctx)
    shift = ctx.config.tampering_shift if ctx.rng.random() > 0.5 else -ctx.config.tampering_shift
    return JuryEventConsequence(
        kind=ConsequenceKind.OPINION_SHIFT,
        seat_index=ctx.target.seat_index,
        juror_id=ctx.target.id,
        shift=shift,
    )


def _conflict(ctx: ConsequenceContext) -> JuryEventConsequence:
    # Arguments between two jurors can tip a fence-sitter either way.
    fence_sitters = [
        juror
        for juror in active(ctx.jurors)
        if abs(juror.opinion) < ctx.config.fence_sitter_threshold and juror.seat_index != ctx.target.seat_index
    ]
    if not fence_sitters:
        return JuryEventConsequence.none()
    bystander = pick(ctx.rng, fence_sitters)
    half_span = ctx.config.conflict_shift_span / 2
    return JuryEventConsequence(
        kind=ConsequenceKind.OPINION_SHIFT,
        seat_index=bystander.seat_index,
        juror_id=bystander.id,
        shift=ctx.rng.uniform(-half_span, half_span),
    )


def _holdout(ctx: ConsequenceContext) -> JuryEventConsequence:
    return JuryEventConsequence(
        kind=ConsequenceKind.ENGAGEMENT_CHANGE,
        seat_index=ctx.target.seat_index,
        juror_id=ctx.target.id,
        delta=ctx.config.holdout_engagement_delta,
    )


EVENT_TEMPLATES: tuple[JuryEventTemplate, ...] = (
    JuryEventTemplate(
        type=JuryEventType.ILLNESS,
        probability=0.02,
        min_turn=3,
        deliberation_only=False,
        descriptions=(
            "Juror {name} has fallen ill and cannot continue serving.",
            "Juror {name} has a medical emergency and must be excused.",
            "Juror {name} reports feeling too unwell to continue.",
        ),
        consequence=_removal("illness"),
    ),
    JuryEventTemplate(
        type=JuryEventType.MISCONDUCT,
        probability=0.015,
        min_turn=5,
        deliberation_only=False,
        descriptions=(
            "Juror {name} was caught researching the case online.",
            "Juror {name} was seen discussing the case with a non-juror.",
            "Juror {name} posted about the trial on social media.",
        ),
        consequence=_removal("misconduct"),
    ),
    JuryEventTemplate(
        type=JuryEventType.TAMPERING,
        probability=0.008,
        min_turn=8,
        deliberation_only=False,
        descriptions=(
            "Reports suggest someone attempted to contact Juror {name} about the case.",
            "A suspicious note was found near Juror {name}'s belongings.",
            "Juror {name} received an anonymous message related to the trial.",
        ),
        consequence=_tampering,
    ),
    JuryEventTemplate(
        type=JuryEventType.CONFLICT,
        probability=0.08,
        min_turn=1,
        deliberation_only=True,
        descriptions=(
            "Juror {name} and Juror {name2} get into a heated argument.",
            "Tensions flare between Juror {name} and Juror {name2} over the evidence.",
            "Juror {name} accuses Juror {name2} of not taking this seriously.",
        ),
        consequence=_conflict,
    ),
    JuryEventTemplate(
        type=JuryEventType.HOLDOUT,
        probability=0.1,
        min_turn=3,
        deliberation_only=True,
        descriptions=(
            "Juror {name} refuses to change their position, growing more entrenched.",
            'Juror {name} crosses their arms: "I know what I saw in that evidence."',
            "Juror {name} declares they won't be bullied into changing their vote.",
        ),
        consequence=_holdout,
    ),
)


@dataclass(slots=True)
class AppliedEvent:
    event: JuryEvent
    applied: bool
    removed: JurorState | None = None
    replacement: JurorState | None = None


class JuryEventSystem:
    """Random per-turn disruptions to the jury: at most one event per check."""

    def __init__(
        self,
        templates: tuple[JuryEventTemplate, ...] | list[JuryEventTemplate] = EVENT_TEMPLATES,
        config: JuryEventConfig | None = None,
        rng: random.Random | None = None,
        id_generator: Callable[[], str] | None = None,
    ) -> None:
        self.templates = tuple(templates)
        self.config = config or JuryEventConfig()
        self.rng = resolve_rng(rng)
        self.next_id = id_generator or IdGenerator("event")

    def check(
        self,
        jurors: list[JurorState],
        turn: int,
        is_deliberation: bool,
    ) -> JuryEvent | None:
        candidates = active(jurors)
        if not candidates:
            return None

        for template in shuffled(self.rng, self.templates):
            if not template.allowed(turn, is_deliberation):
                continue
            if self.rng.random() >= template.probability:
                continue

            target = pick(self.rng, candidates)
            description = pick(self.rng, template.descriptions).replace("{name}", target.name)

            secondary_seat: int | None = None
            if template.type == JuryEventType.CONFLICT:
                others = [juror for juror in candidates if juror.seat_index != target.seat_index]
                if not others:
                    continue
                secondary = pick(self.rng, others)
                secondary_seat = secondary.seat_index
                description = description.replace("{name2}", secondary.name)

            consequence = template.consequence(
                ConsequenceContext(target=target, jurors=jurors, rng=self.rng, config=self.config)
            )
            event = JuryEvent(
                id=self.next_id(),
                type=template.type,
                target_seat_index=target.seat_index,
                secondary_seat_index=secondary_seat,
                description=description,
                consequence=consequence,
            )
            logger.debug("Jury event %s fired on turn %d: %s", event.type.value, turn, description)
            return event

        return None

    def apply(self, box: JuryBox, event: JuryEvent) -> AppliedEvent:
        """Apply *event*'s consequence to *box*.

        Re-applying an event already recorded in ``box.applied_event_ids`` is a
        no-op, as is any consequence aimed at a removed juror or at a seat whose
        occupant has changed since the event was generated.
        """
        if event.id in box.applied_event_ids:
            return AppliedEvent(event=event, applied=False)
        box.applied_event_ids.add(event.id)

        cons = event.consequence
        if cons.kind == ConsequenceKind.REMOVE_JUROR and cons.seat_index is not None:
            removed, replacement = box.remove_juror(cons.seat_index, cons.reason or "", juror_id=cons.juror_id)
            if removed is None:
                return AppliedEvent(event=event, applied=False)
            if replacement is not None:
                logger.info(
                    "Juror %s removed from seat %d (%s); alternate %s seated",
                    removed.name,
                    cons.seat_index,
                    cons.reason,
                    replacement.name,
                )
            else:
                logger.info(
                    "Juror %s removed from seat %d (%s); no alternates left, seat vacant",
                    removed.name,
                    cons.seat_index,
                    cons.reason,
                )
            return AppliedEvent(event=event, applied=True, removed=removed, replacement=replacement)

        if cons.kind in (ConsequenceKind.OPINION_SHIFT, ConsequenceKind.ENGAGEMENT_CHANGE):
            juror = box.occupant(cons.seat_index) if cons.seat_index is not None else None
            if juror is None or juror.is_removed or (cons.juror_id is not None and juror.id != cons.juror_id):
                return AppliedEvent(event=event, applied=False)
            updated = juror.copy()
            if cons.kind == ConsequenceKind.OPINION_SHIFT:
                updated.opinion = juror.opinion + cons.shift
            else:
                updated.engagement = juror.engagement + cons.delta
            box.put(updated)
            return AppliedEvent(event=event, applied=True)

        return AppliedEvent(event=event, applied=False)
