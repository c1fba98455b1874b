from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Iterable

from jury_engine.deliberation.arguments import ArgumentGenerator
from jury_engine.deliberation.engine import (
    DeliberationCallbacks,
    DeliberationConfig,
    DeliberationEngine,
    DeliberationResult,
    DeliberationSession,
)
from jury_engine.events.engine import AppliedEvent, JuryEvent, JuryEventConfig, JuryEventSystem
from jury_engine.personas.base import JurorPersona, JurorTemplate
from jury_engine.personas.generator import PersonaConfig, PersonaGenerator
from jury_engine.randomness import IdGenerator, resolve_rng
from jury_engine.reading.skill import mood_summary

from .opinion import DEFAULT_OPINION_CONFIG, CourtEvent, OpinionModelConfig, update_opinion
from .state import JurorState, JuryBox


@dataclass(slots=True)
class JuryStats:
    events_presented: int = 0
    jury_events: int = 0
    removals: int = 0
    replacements: int = 0

    @property
    def vacancies(self) -> int:
        return self.removals - self.replacements


class Jury:
    """Session-scoped owner of one trial's jury.

    Holds the jury box, the single random source and the id generator shared
    by every component, so a seed replays the whole trial and deliberation.
    """

    def __init__(
        self,
        box: JuryBox,
        pool: list[JurorPersona] | None = None,
        rng: random.Random | None = None,
        opinion_config: OpinionModelConfig | None = None,
        event_config: JuryEventConfig | None = None,
        deliberation_config: DeliberationConfig | None = None,
        argument_generator: ArgumentGenerator | None = None,
        callbacks: DeliberationCallbacks | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.box = box
        self.pool = pool or []
        self.rng = resolve_rng(rng)
        self.opinion_config = opinion_config or DEFAULT_OPINION_CONFIG
        self.event_system = JuryEventSystem(
            config=event_config,
            rng=self.rng,
            id_generator=IdGenerator("event"),
        )
        self.deliberation_engine = DeliberationEngine(
            config=deliberation_config,
            argument_generator=argument_generator,
            event_system=self.event_system,
            rng=self.rng,
            callbacks=callbacks,
        )
        self.logger = logger or logging.getLogger(__name__)
        self.events: list[JuryEvent] = []
        self._stats = JuryStats()

    @classmethod
    def empanel(
        cls,
        templates: list[JurorTemplate],
        case_id: str | None = None,
        struck_ids: Iterable[str] = (),
        rng: random.Random | None = None,
        persona_config: PersonaConfig | None = None,
        **kwargs,
    ) -> Jury:
        """Generate a pool, strike the given ids, and seat a jury with alternates."""
        rng = resolve_rng(rng)
        generator = PersonaGenerator(templates, config=persona_config, rng=rng)
        pool = generator.generate_pool(case_id=case_id)
        selection = generator.select_jury(pool, struck_ids)
        box = JuryBox(seated=selection.seated, alternates=selection.alternates)
        return cls(box, pool=pool, rng=rng, **kwargs)

    @property
    def seated(self) -> list[JurorState]:
        return self.box.seated

    @property
    def alternates(self) -> list[JurorState]:
        return self.box.alternates

    def present(self, event: CourtEvent, turn: int) -> list[JurorState]:
        """Run the opinion model over every active seated juror and every alternate."""
        self._stats.events_presented += 1
        self.box.seated = [
            update_opinion(juror, event, turn, self.opinion_config) for juror in self.box.seated
        ]
        self.box.alternates = [
            update_opinion(juror, event, turn, self.opinion_config) for juror in self.box.alternates
        ]
        return self.box.seated

    def check_events(self, turn: int) -> AppliedEvent | None:
        """Run one trial-phase jury event check and apply whatever fires."""
        event = self.event_system.check(self.box.seated, turn, is_deliberation=False)
        if event is None:
            return None
        return self.apply_event(event)

    def apply_event(self, event: JuryEvent) -> AppliedEvent:
        outcome = self.event_system.apply(self.box, event)
        if outcome.applied:
            self.events.append(event)
            self._stats.jury_events += 1
            if outcome.removed is not None:
                self._stats.removals += 1
            if outcome.replacement is not None:
                self._stats.replacements += 1
            self.logger.debug("Applied jury event %s: %s", event.id, event.description)
        return outcome

    def start_deliberation(self) -> DeliberationSession:
        """Step through deliberation by hand; pass the finished result to :meth:`record_deliberation`."""
        return self.deliberation_engine.start(self.box)

    async def deliberate(self) -> DeliberationResult:
        result = await self.deliberation_engine.deliberate(self.box)
        self.record_deliberation(result)
        return result

    def record_deliberation(self, result: DeliberationResult) -> None:
        """Fold jury events that fired during deliberation into the trial log and stats."""
        seen = {event.id for event in self.events}
        for rnd in result.rounds:
            for event in rnd.events:
                if event.id in seen:
                    continue
                seen.add(event.id)
                self.events.append(event)
                self._stats.jury_events += 1

    def mood_summary(self, reading_level: int) -> str:
        return mood_summary(self.box.active, reading_level)

    @property
    def stats(self) -> JuryStats:
        return self._stats
