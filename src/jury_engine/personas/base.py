from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class TriggerDirection(str, Enum):
    SYMPATHETIC = "sympathetic"
    HOSTILE = "hostile"


TraitRange = tuple[int, int]


@dataclass(frozen=True, slots=True)
class JurorTemplate:
    """Catalog entry describing one juror archetype.

    Trait values are 0-100 ranges. ``leader_follower`` runs from 0 (strong
    leader) to 100 (follower). Topic biases are signed: positive leans toward
    the prosecution on that topic, negative toward the defense.
    """

    id: str
    archetype: str
    description: str
    personality_traits: tuple[str, ...]
    occupations: tuple[str, ...]
    age_range: TraitRange
    analytical_vs_emotional: TraitRange
    trust_level: TraitRange
    skepticism: TraitRange
    leader_follower: TraitRange
    attention_span: TraitRange
    persuasion_resistance: TraitRange
    bias_tendencies: dict[str, float]
    trigger_topics: tuple[str, ...]
    trigger_direction: TriggerDirection
    leadership_score: int
    deliberation_style: str


@dataclass(frozen=True, slots=True)
class JurorPersona:
    id: str
    name: str
    age: int
    occupation: str
    background: str
    archetype_id: str
    archetype: str

    analytical_vs_emotional: int
    trust_level: int
    skepticism: int
    leader_follower: int
    attention_span: int

    prosecution_bias: float
    topic_biases: dict[str, float]

    triggers: tuple[str, ...]
    trigger_direction: TriggerDirection

    persuasion_resistance: int
    leadership_score: int
    deliberation_style: str
    personality_traits: tuple[str, ...] = field(default_factory=tuple)

    @property
    def summary(self) -> str:
        return f"{self.name}, {self.age}, {self.occupation} ({self.archetype})"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "age": self.age,
            "occupation": self.occupation,
            "background": self.background,
            "archetype_id": self.archetype_id,
            "archetype": self.archetype,
            "analytical_vs_emotional": self.analytical_vs_emotional,
            "trust_level": self.trust_level,
            "skepticism": self.skepticism,
            "leader_follower": self.leader_follower,
            "attention_span": self.attention_span,
            "prosecution_bias": self.prosecution_bias,
            "topic_biases": dict(self.topic_biases),
            "triggers": list(self.triggers),
            "trigger_direction": self.trigger_direction.value,
            "persuasion_resistance": self.persuasion_resistance,
            "leadership_score": self.leadership_score,
            "deliberation_style": self.deliberation_style,
            "personality_traits": list(self.personality_traits),
        }
