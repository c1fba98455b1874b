from __future__ import annotations

import asyncio
import json
import logging
import math
import random
from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Callable

from jury_engine.events.engine import JuryEvent, JuryEventSystem
from jury_engine.jury.state import (
    JurorState,
    JurorVote,
    JuryBox,
    Vote,
    active,
    cast_votes,
    count_votes,
    is_unanimous,
    vote_of,
)
from jury_engine.randomness import resolve_rng
from jury_engine.utils import json_serializable

from .arguments import (
    ArgumentGenerator,
    PersuasionTarget,
    build_request,
    fallback_statement,
)

logger = logging.getLogger(__name__)


class Verdict(str, Enum):
    GUILTY = "guilty"
    NOT_GUILTY = "not_guilty"
    HUNG = "hung"


@dataclass(slots=True)
class DeliberationConfig:
    max_rounds: int = 10
    min_speakers: int = 3
    early_rounds: int = 2
    early_speaker_fraction: float = 0.8
    late_speaker_fraction: float = 0.5
    leadership_weight: float = 0.6
    confidence_weight: float = 0.4
    persuasion_amplifier: float = 3.0
    follower_bonus: float = 0.5
    ally_threshold: float = 30
    ally_dampening: float = 0.2
    persuasion_confidence_gain: float = 0.3
    argument_timeout_s: float | None = 10.0
    memory_window: int = 5

    def __post_init__(self) -> None:
        if self.max_rounds < 1:
            raise ValueError("max_rounds must be at least 1")


@dataclass(slots=True)
class DeliberationArgument:
    juror_id: str
    juror_name: str
    archetype: str
    statement: str
    vote: Vote
    persuasion_power: float
    seat_index: int
    persuasion_target: PersuasionTarget = PersuasionTarget.UNDECIDED
    used_fallback: bool = False


@dataclass(slots=True)
class DeliberationRound:
    round_number: int
    votes: list[JurorVote]
    arguments: list[DeliberationArgument]
    events: list[JuryEvent]
    guilty_count: int
    not_guilty_count: int
    is_unanimous: bool


@dataclass(slots=True)
class DeliberationResult:
    verdict: Verdict
    unanimous: bool
    rounds: list[DeliberationRound]
    total_rounds: int
    foreperson_id: str | None
    foreperson_name: str | None
    final_votes: list[JurorVote]

    @property
    def final_tally(self) -> tuple[int, int]:
        """``(guilty, not_guilty)`` in the final vote."""
        return count_votes(self.final_votes)

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=json_serializable, ensure_ascii=True)


@dataclass(slots=True)
class DeliberationCallbacks:
    on_round_start: Callable[[int], None] | None = None
    on_argument: Callable[[DeliberationArgument], None] | None = None
    on_vote_update: Callable[[list[JurorVote]], None] | None = None
    on_event: Callable[[JuryEvent], None] | None = None
    on_round_end: Callable[[DeliberationRound], None] | None = None


# ----------------------------------------------------------------------
# Pure helpers
# ----------------------------------------------------------------------


def select_foreperson(jurors: list[JurorState]) -> JurorState | None:
    """The active juror with the lowest leader/follower value leads deliberation."""
    candidates = active(jurors)
    if not candidates:
        return None
    return min(candidates, key=lambda juror: juror.persona.leader_follower)


def calculate_persuasion_power(juror: JurorState, config: DeliberationConfig) -> float:
    leadership = 100 - juror.persona.leader_follower
    power = (leadership * config.leadership_weight + juror.confidence * config.confidence_weight) / 100
    return max(0.0, min(1.0, power))


def persuasion_shift(target: JurorState, argument: DeliberationArgument, config: DeliberationConfig) -> float:
    """Signed opinion shift *argument* exerts on *target* (positive toward acquittal)."""
    susceptibility = 1 - target.persona.persuasion_resistance / 100
    follower = target.persona.leader_follower / 100
    shift = argument.persuasion_power * susceptibility * (1 + follower * config.follower_bonus)
    shift *= config.persuasion_amplifier if argument.vote == Vote.NOT_GUILTY else -config.persuasion_amplifier

    strong_ally = (argument.vote == Vote.NOT_GUILTY and target.opinion > config.ally_threshold) or (
        argument.vote == Vote.GUILTY and target.opinion < -config.ally_threshold
    )
    if strong_ally:
        shift *= config.ally_dampening
    return shift


def apply_persuasion(target: JurorState, argument: DeliberationArgument, config: DeliberationConfig) -> JurorState:
    if target.is_removed:
        return target
    shift = persuasion_shift(target, argument, config)
    return replace(
        target,
        opinion=target.opinion + shift,
        confidence=target.confidence + abs(shift) * config.persuasion_confidence_gain,
    )


def speaker_count(active_count: int, round_number: int, config: DeliberationConfig) -> int:
    fraction = config.early_speaker_fraction if round_number <= config.early_rounds else config.late_speaker_fraction
    return min(active_count, max(config.min_speakers, math.floor(active_count * fraction)))


# ----------------------------------------------------------------------
# Engine
# ----------------------------------------------------------------------


class DeliberationSession:
    """One deliberation in flight over a :class:`JuryBox`.

    Each call to :meth:`next_round` runs a whole round against a working copy
    of the box and commits it in one step, so a host that stops between
    rounds (or cancels the task mid-round) never sees a half-applied round.
    """

    def __init__(self, engine: DeliberationEngine, box: JuryBox) -> None:
        self.engine = engine
        self.box = box
        self.foreperson = select_foreperson(box.seated)
        self.rounds: list[DeliberationRound] = []
        self.verdict: Verdict | None = None

    @property
    def round_number(self) -> int:
        return len(self.rounds)

    @property
    def finished(self) -> bool:
        return self.verdict is not None

    async def next_round(self) -> DeliberationRound:
        if self.finished:
            raise RuntimeError("Deliberation has already reached a verdict")

        engine = self.engine
        callbacks = engine.callbacks
        round_number = self.round_number + 1
        if callbacks.on_round_start:
            callbacks.on_round_start(round_number)

        working = self.box.copy()
        votes = cast_votes(working.seated)
        if callbacks.on_vote_update:
            callbacks.on_vote_update(votes)

        if is_unanimous(votes):
            return self._commit(working, _round(round_number, votes, [], []), votes[0].vote)

        speakers = sorted(working.active, key=lambda juror: juror.persona.leader_follower)
        speakers = speakers[: speaker_count(len(speakers), round_number, engine.config)]

        arguments: list[DeliberationArgument] = []
        for speaker in speakers:
            current = working.occupant(speaker.seat_index)
            if current is None or current.is_removed:
                continue
            argument = await engine.argue(current, votes, round_number)
            arguments.append(argument)
            if callbacks.on_argument:
                callbacks.on_argument(argument)

            for idx, juror in enumerate(working.seated):
                if juror.is_removed or juror.seat_index == current.seat_index:
                    continue
                working.seated[idx] = apply_persuasion(juror, argument, engine.config)

        events: list[JuryEvent] = []
        event = engine.event_system.check(working.seated, round_number, True)
        if event is not None:
            events.append(event)
            if callbacks.on_event:
                callbacks.on_event(event)
            engine.event_system.apply(working, event)

        votes = cast_votes(working.seated)
        if callbacks.on_vote_update:
            callbacks.on_vote_update(votes)

        record = _round(round_number, votes, arguments, events)
        if record.is_unanimous:
            verdict: Verdict | None = Verdict(votes[0].vote.value)
        elif round_number >= engine.config.max_rounds:
            verdict = Verdict.HUNG
        else:
            verdict = None
        return self._commit(working, record, verdict)

    def result(self) -> DeliberationResult:
        verdict = self.verdict
        if verdict is None:
            raise RuntimeError("Deliberation is still in progress")
        return DeliberationResult(
            verdict=verdict,
            unanimous=verdict != Verdict.HUNG,
            rounds=list(self.rounds),
            total_rounds=self.round_number,
            foreperson_id=self.foreperson.id if self.foreperson else None,
            foreperson_name=self.foreperson.name if self.foreperson else None,
            final_votes=cast_votes(self.box.seated),
        )

    def _commit(
        self,
        working: JuryBox,
        record: DeliberationRound,
        verdict: Verdict | Vote | None,
    ) -> DeliberationRound:
        self.box.update_from(working)
        self.rounds.append(record)
        if verdict is not None:
            self.verdict = Verdict(verdict.value)
        logger.debug(
            "Round %d: %d guilty / %d not guilty%s",
            record.round_number,
            record.guilty_count,
            record.not_guilty_count,
            " (unanimous)" if record.is_unanimous else "",
        )
        if self.engine.callbacks.on_round_end:
            self.engine.callbacks.on_round_end(record)
        return record


class DeliberationEngine:
    def __init__(
        self,
        config: DeliberationConfig | None = None,
        argument_generator: ArgumentGenerator | None = None,
        event_system: JuryEventSystem | None = None,
        rng: random.Random | None = None,
        callbacks: DeliberationCallbacks | None = None,
    ) -> None:
        self.config = config or DeliberationConfig()
        self.rng = resolve_rng(rng)
        self.argument_generator = argument_generator
        self.event_system = event_system or JuryEventSystem(rng=self.rng)
        self.callbacks = callbacks or DeliberationCallbacks()

    def start(self, box: JuryBox) -> DeliberationSession:
        return DeliberationSession(self, box)

    async def deliberate(self, box: JuryBox) -> DeliberationResult:
        session = self.start(box)
        while not session.finished:
            await session.next_round()
        result = session.result()
        guilty, not_guilty = result.final_tally
        logger.info(
            "Deliberation ended after %d round(s): %s (%d guilty / %d not guilty)",
            result.total_rounds,
            result.verdict.value,
            guilty,
            not_guilty,
        )
        return result

    async def argue(self, juror: JurorState, votes: list[JurorVote], round_number: int) -> DeliberationArgument:
        """Produce one juror's argument, falling back to canned text on any generator failure."""
        vote = vote_of(juror)
        argument = DeliberationArgument(
            juror_id=juror.id,
            juror_name=juror.name,
            archetype=juror.persona.archetype,
            statement="",
            vote=vote,
            persuasion_power=calculate_persuasion_power(juror, self.config),
            seat_index=juror.seat_index,
        )

        if self.argument_generator is not None:
            request = build_request(juror, votes, round_number, self.config.memory_window)
            try:
                reply = await asyncio.wait_for(
                    self.argument_generator.generate(request),
                    timeout=self.config.argument_timeout_s,
                )
            except asyncio.TimeoutError:
                logger.warning(
                    "Argument generation for juror %s timed out after %ss; using fallback.",
                    juror.name,
                    self.config.argument_timeout_s,
                )
            except Exception as exc:
                logger.warning("Argument generation for juror %s failed (%s); using fallback.", juror.name, exc)
            else:
                argument.statement = reply.statement
                argument.persuasion_target = reply.persuasion_target
                return argument

        argument.statement = fallback_statement(juror, vote, self.rng)
        argument.used_fallback = True
        return argument


def _round(
    round_number: int,
    votes: list[JurorVote],
    arguments: list[DeliberationArgument],
    events: list[JuryEvent],
) -> DeliberationRound:
    guilty, not_guilty = count_votes(votes)
    return DeliberationRound(
        round_number=round_number,
        votes=votes,
        arguments=arguments,
        events=events,
        guilty_count=guilty,
        not_guilty_count=not_guilty,
        is_unanimous=is_unanimous(votes),
    )
