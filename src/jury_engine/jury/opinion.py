"""Opinion model: how a single courtroom event moves a single juror.

Both :func:`update_opinion` and :func:`calculate_expression` are pure. The
update returns a new :class:`JurorState`; the input state is never touched.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum

from .state import Expression, JurorMemory, JurorState, OpinionSnapshot


class EventCategory(str, Enum):
    EMOTIONAL = "emotional"
    ANALYTICAL = "analytical"
    PROCEDURAL = "procedural"

    @classmethod
    def coerce(cls, value: object) -> EventCategory:
        try:
            return cls(value)
        except (TypeError, ValueError):
            return cls.PROCEDURAL


class Side(str, Enum):
    PROSECUTION = "prosecution"
    DEFENSE = "defense"
    NEUTRAL = "neutral"

    @classmethod
    def coerce(cls, value: object) -> Side:
        try:
            return cls(value)
        except (TypeError, ValueError):
            return cls.NEUTRAL


@dataclass(slots=True)
class CourtEvent:
    description: str
    category: EventCategory | str = EventCategory.PROCEDURAL
    base_impact: float = 0.0
    favors: Side | str = Side.NEUTRAL
    tags: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        self.category = EventCategory.coerce(self.category)
        self.favors = Side.coerce(self.favors)
        try:
            self.base_impact = float(self.base_impact)
        except (TypeError, ValueError):
            self.base_impact = 0.0
        if not math.isfinite(self.base_impact):
            self.base_impact = 0.0
        tags = self.tags or ()
        if isinstance(tags, str) or not hasattr(tags, "__iter__"):
            tags = (tags,)
        self.tags = frozenset(str(tag) for tag in tags)

    @classmethod
    def from_dict(cls, data: dict) -> CourtEvent:
        return cls(
            description=str(data.get("description", "")),
            category=data.get("category", data.get("type", EventCategory.PROCEDURAL)),
            base_impact=data.get("base_impact", data.get("impact", 0.0)),
            favors=data.get("favors", data.get("favors_side", Side.NEUTRAL)),
            tags=data.get("tags"),
        )


@dataclass(slots=True)
class OpinionModelConfig:
    disposition_multiplier: float = 1.5
    emotional_threshold: float = 60
    analytical_threshold: float = 40
    side_bias_divisor: float = 10
    topic_bias_divisor: float = 10
    trigger_multiplier: float = 2.0
    confidence_gain: float = 0.5
    significance_threshold: float = 3
    engagement_gain: float = 5
    engagement_decay: float = 2
    # expression thresholds
    bored_engagement: float = 20
    shock_swing: float = 15
    swing_threshold: float = 5
    confused_confidence: float = 30
    skeptic_threshold: float = 70
    skeptic_confidence: float = 60
    lean_threshold: float = 30


DEFAULT_OPINION_CONFIG = OpinionModelConfig()


def compute_impact(
    juror: JurorState,
    event: CourtEvent,
    config: OpinionModelConfig = DEFAULT_OPINION_CONFIG,
) -> float:
    """Return the signed, direction-resolved impact of *event* on *juror*.

    Positive always moves the juror toward acquittal.
    """
    persona = juror.persona
    impact = event.base_impact

    if event.category == EventCategory.EMOTIONAL and persona.analytical_vs_emotional > config.emotional_threshold:
        impact *= config.disposition_multiplier
    elif event.category == EventCategory.ANALYTICAL and persona.analytical_vs_emotional < config.analytical_threshold:
        impact *= config.disposition_multiplier

    if event.favors == Side.PROSECUTION:
        impact += persona.prosecution_bias / config.side_bias_divisor
    elif event.favors == Side.DEFENSE:
        impact -= persona.prosecution_bias / config.side_bias_divisor

    for tag in event.tags:
        bias = persona.topic_biases.get(tag)
        if bias:
            impact += bias / config.topic_bias_divisor

    impact *= juror.engagement / 100

    if event.tags.intersection(persona.triggers):
        impact *= config.trigger_multiplier

    return -impact if event.favors == Side.PROSECUTION else impact


def update_opinion(
    juror: JurorState,
    event: CourtEvent,
    turn: int,
    config: OpinionModelConfig = DEFAULT_OPINION_CONFIG,
) -> JurorState:
    if juror.is_removed:
        return juror

    impact = compute_impact(juror, event, config)
    significant = abs(impact) > config.significance_threshold

    memories = list(juror.memories)
    if significant:
        memories.append(
            JurorMemory(
                turn=turn,
                description=event.description,
                impact=impact,
                emotional=event.category == EventCategory.EMOTIONAL,
            )
        )

    updated = replace(
        juror,
        opinion=juror.opinion + impact,
        confidence=juror.confidence + abs(impact) * config.confidence_gain,
        engagement=juror.engagement + (config.engagement_gain if significant else -config.engagement_decay),
        memories=memories,
        opinion_history=list(juror.opinion_history),
    )
    updated.opinion_history.append(OpinionSnapshot(turn=turn, opinion=updated.opinion))
    updated.expression = calculate_expression(updated, config)
    return updated


def calculate_expression(
    juror: JurorState,
    config: OpinionModelConfig = DEFAULT_OPINION_CONFIG,
) -> Expression:
    if juror.engagement < config.bored_engagement:
        return Expression.BORED

    history = juror.opinion_history
    if len(history) >= 2:
        change = history[-1].opinion - history[-2].opinion
        if abs(change) > config.shock_swing:
            return Expression.SHOCKED
        if change > config.swing_threshold:
            return Expression.SYMPATHETIC if juror.opinion > 0 else Expression.ANGRY
        if change < -config.swing_threshold:
            return Expression.ANGRY if juror.opinion > 0 else Expression.SYMPATHETIC

    if juror.confidence < config.confused_confidence:
        return Expression.CONFUSED
    if juror.persona.skepticism > config.skeptic_threshold and juror.confidence < config.skeptic_confidence:
        return Expression.SKEPTICAL
    if juror.opinion > config.lean_threshold:
        return Expression.SYMPATHETIC
    if juror.opinion < -config.lean_threshold:
        return Expression.SKEPTICAL
    return Expression.NEUTRAL
