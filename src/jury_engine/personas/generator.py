from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import Iterable

from jury_engine._defaults import ALTERNATE_COUNT, POOL_SIZE, PROSECUTION_BIAS_RANGE, SEATED_COUNT
from jury_engine.jury.state import JurorState, OpinionSnapshot
from jury_engine.randomness import pick, resolve_rng
from jury_engine.utils import clamp

from .base import JurorPersona, JurorTemplate
from .catalog import BACKGROUNDS, FIRST_NAMES_F, FIRST_NAMES_M, LAST_NAMES

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PersonaConfig:
    pool_size: int = POOL_SIZE
    seated_count: int = SEATED_COUNT
    alternate_count: int = ALTERNATE_COUNT
    bias_scale: float = 0.8
    bias_jitter: float = 10
    topic_jitter: float = 5
    case_offset_span: int = 11
    name_attempts: int = 100
    initial_opinion_bias_fraction: float = 0.2
    initial_opinion_jitter: float = 5
    initial_confidence: tuple[int, int] = (20, 40)
    initial_engagement_fraction: float = 0.8
    initial_engagement_jitter: float = 10


@dataclass(slots=True)
class JurySelection:
    seated: list[JurorState]
    alternates: list[JurorState]


def case_offset(case_id: str, index: int, span: int = 11) -> int:
    """Small per-persona bias offset derived from a case identifier.

    Summing character codes keeps the offset stable across reruns of the same
    case; it is a flavour knob, not a hash.
    """
    total = sum(ord(char) for char in case_id)
    return (total + index) % span - span // 2


class PersonaGenerator:
    """Builds juror pools from archetype templates using an injected random source."""

    def __init__(
        self,
        templates: list[JurorTemplate],
        config: PersonaConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.templates = templates
        self.config = config or PersonaConfig()
        self.rng = resolve_rng(rng)

    def generate_pool(self, size: int | None = None, case_id: str | None = None) -> list[JurorPersona]:
        size = self.config.pool_size if size is None else size
        if size > len(self.templates):
            raise ValueError(
                f"Cannot draw {size} distinct archetypes from a catalog of {len(self.templates)}"
            )

        selected = self.rng.sample(self.templates, size)
        used_names: set[str] = set()
        pool = [
            self._persona_from_template(template, index, used_names)
            for index, template in enumerate(selected)
        ]

        if case_id:
            low, high = PROSECUTION_BIAS_RANGE
            pool = [
                _with_bias(
                    persona,
                    clamp(persona.prosecution_bias + case_offset(case_id, i, self.config.case_offset_span), low, high),
                )
                for i, persona in enumerate(pool)
            ]

        logger.debug("Generated jury pool of %d personas (case=%s)", len(pool), case_id)
        return pool

    def select_jury(
        self,
        pool: list[JurorPersona],
        struck_ids: Iterable[str] = (),
    ) -> JurySelection:
        struck = set(struck_ids)
        available = [persona for persona in pool if persona.id not in struck]
        seated_count = self.config.seated_count
        alternate_end = seated_count + self.config.alternate_count

        seated = [
            self.create_juror_state(persona, seat)
            for seat, persona in enumerate(available[:seated_count])
        ]
        alternates = [
            self.create_juror_state(persona, seated_count + offset, is_alternate=True)
            for offset, persona in enumerate(available[seated_count:alternate_end])
        ]
        return JurySelection(seated=seated, alternates=alternates)

    def create_juror_state(
        self,
        persona: JurorPersona,
        seat_index: int,
        is_alternate: bool = False,
    ) -> JurorState:
        cfg = self.config
        opinion = persona.prosecution_bias * cfg.initial_opinion_bias_fraction + self.rng.uniform(
            -cfg.initial_opinion_jitter, cfg.initial_opinion_jitter
        )
        state = JurorState(
            persona=persona,
            opinion=opinion,
            confidence=self.rng.randint(*cfg.initial_confidence),
            engagement=persona.attention_span * cfg.initial_engagement_fraction
            + self.rng.uniform(-cfg.initial_engagement_jitter, cfg.initial_engagement_jitter),
            seat_index=seat_index,
            is_alternate=is_alternate,
        )
        state.opinion_history.append(OpinionSnapshot(turn=0, opinion=state.opinion))
        return state

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _persona_from_template(
        self,
        template: JurorTemplate,
        index: int,
        used_names: set[str],
    ) -> JurorPersona:
        rng = self.rng
        cfg = self.config

        biases = list(template.bias_tendencies.values())
        average = sum(biases) / len(biases) if biases else 0.0
        low, high = PROSECUTION_BIAS_RANGE
        prosecution_bias = clamp(
            average * cfg.bias_scale + rng.uniform(-cfg.bias_jitter, cfg.bias_jitter), low, high
        )

        topic_biases = {
            topic: value + rng.uniform(-cfg.topic_jitter, cfg.topic_jitter)
            for topic, value in template.bias_tendencies.items()
        }

        return JurorPersona(
            id=f"juror-{index}-{template.id}",
            name=self._unique_name(used_names),
            age=rng.randint(*template.age_range),
            occupation=pick(rng, template.occupations),
            background=pick(rng, BACKGROUNDS),
            archetype_id=template.id,
            archetype=template.archetype,
            analytical_vs_emotional=rng.randint(*template.analytical_vs_emotional),
            trust_level=rng.randint(*template.trust_level),
            skepticism=rng.randint(*template.skepticism),
            leader_follower=rng.randint(*template.leader_follower),
            attention_span=rng.randint(*template.attention_span),
            prosecution_bias=prosecution_bias,
            topic_biases=topic_biases,
            triggers=tuple(template.trigger_topics),
            trigger_direction=template.trigger_direction,
            persuasion_resistance=rng.randint(*template.persuasion_resistance),
            leadership_score=template.leadership_score,
            deliberation_style=template.deliberation_style,
            personality_traits=tuple(template.personality_traits),
        )

    def _unique_name(self, used_names: set[str]) -> str:
        for _ in range(self.config.name_attempts):
            first_names = FIRST_NAMES_M if self.rng.random() > 0.5 else FIRST_NAMES_F
            full = f"{pick(self.rng, first_names)} {pick(self.rng, LAST_NAMES)}"
            if full not in used_names:
                used_names.add(full)
                return full

        placeholder_index = len(used_names) + 1
        placeholder = f"Juror {placeholder_index}"
        while placeholder in used_names:
            placeholder_index += 1
            placeholder = f"Juror {placeholder_index}"
        used_names.add(placeholder)
        return placeholder


def _with_bias(persona: JurorPersona, bias: float) -> JurorPersona:
    return replace(persona, prosecution_bias=bias)
