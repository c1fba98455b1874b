from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from jury_engine._defaults import DEFAULT_MODEL
from jury_engine.jury.state import JurorState, JurorVote, Vote, count_votes, vote_of
from jury_engine.llm.client import LLMClient, LiteLLMClient
from jury_engine.randomness import pick, resolve_rng
from jury_engine.utils import safe_json_parse, strip_markdown_fences

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT = (
    "You are a juror deliberating in a criminal trial. Stay in character. "
    'Respond ONLY with JSON: { "statement": "your argument", '
    '"persuasionTarget": "undecided" | "opposition" | "allies" }'
)


class PersuasionTarget(str, Enum):
    UNDECIDED = "undecided"
    OPPOSITION = "opposition"
    ALLIES = "allies"


@dataclass(slots=True)
class ArgumentRequest:
    juror: JurorState
    vote: Vote
    votes: list[JurorVote]
    round_number: int
    memory_window: int = 5

    @property
    def recent_memories(self) -> list[str]:
        if self.memory_window <= 0:
            return []
        return [memory.description for memory in self.juror.memories[-self.memory_window:]]


@dataclass(slots=True)
class ArgumentReply:
    statement: str
    persuasion_target: PersuasionTarget = PersuasionTarget.UNDECIDED


class ArgumentGenerator(Protocol):
    async def generate(self, request: ArgumentRequest) -> ArgumentReply: ...


# ----------------------------------------------------------------------
# Canned statements
# ----------------------------------------------------------------------

FALLBACK_STATEMENTS: dict[Vote, tuple[str, ...]] = {
    Vote.GUILTY: (
        "The evidence is clear. We all saw the forensics.",
        "I don't buy the defense's story. Too many holes.",
        "Look at the witness testimony. It all points one way.",
        "We can't let emotions cloud our judgment here. The facts say guilty.",
        "I've been thinking about this carefully, and I keep coming back to the same conclusion.",
    ),
    Vote.NOT_GUILTY: (
        "There's reasonable doubt here, plain and simple.",
        "The prosecution didn't prove their case beyond a reasonable doubt.",
        "I keep thinking about what the defense attorney said about the timeline.",
        "Something doesn't add up with the prosecution's key witness.",
        "We need to be absolutely certain, and I'm not there yet.",
    ),
}

STYLE_STATEMENTS: dict[tuple[str, Vote], tuple[str, ...]] = {
    ("analytical", Vote.GUILTY): (
        "Line the facts up in order and there is only one explanation that fits all of them.",
    ),
    ("analytical", Vote.NOT_GUILTY): (
        "The numbers don't reconcile. Until they do, I can't sign off on guilty.",
    ),
    ("forceful", Vote.GUILTY): (
        "We've gone around in circles long enough. He did it, and we all know it.",
    ),
    ("forceful", Vote.NOT_GUILTY): (
        "I'm not sending someone to prison on a maybe. Nobody in this room should.",
    ),
    ("empathetic", Vote.GUILTY): (
        "I feel for the family of the accused, but think about what the victim went through.",
    ),
    ("empathetic", Vote.NOT_GUILTY): (
        "That's a real person's life we're deciding. I need more than what we were given.",
    ),
    ("questioning", Vote.GUILTY): (
        "Has anyone heard an innocent explanation that actually holds together? I haven't.",
    ),
    ("questioning", Vote.NOT_GUILTY): (
        "Why did nobody check the alibi? Doesn't that bother anyone else?",
    ),
}


def fallback_statement(juror: JurorState, vote: Vote, rng: random.Random) -> str:
    """Pick a canned statement for *vote*, preferring the juror's deliberation style."""
    styled = STYLE_STATEMENTS.get((juror.persona.deliberation_style, vote), ())
    return pick(rng, styled + FALLBACK_STATEMENTS[vote])


class StaticArgumentGenerator:
    """Offline generator that only ever returns canned statements."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = resolve_rng(rng)

    async def generate(self, request: ArgumentRequest) -> ArgumentReply:
        return ArgumentReply(statement=fallback_statement(request.juror, request.vote, self.rng))


# ----------------------------------------------------------------------
# LLM-backed generator
# ----------------------------------------------------------------------


class LLMArgumentGenerator:
    def __init__(
        self,
        llm_client: LLMClient | None = None,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.8,
        max_tokens: int = 150,
        system_prompt: str | None = None,
    ) -> None:
        self.llm_client = llm_client or LiteLLMClient()
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.system_prompt = system_prompt or _SYSTEM_PROMPT

    async def generate(self, request: ArgumentRequest) -> ArgumentReply:
        payload = await self.llm_client.complete(
            model=self.model,
            system_prompt=self.system_prompt,
            prompt=self.build_prompt(request),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return self.parse_reply(str(payload.get("content", "") or ""), request.juror.name)

    @staticmethod
    def build_prompt(request: ArgumentRequest) -> str:
        juror = request.juror
        persona = juror.persona
        guilty, not_guilty = count_votes(request.votes)
        memories = "; ".join(request.recent_memories) or "General impression of the evidence"
        stance = "firm about guilt" if request.vote == Vote.GUILTY else "firm about reasonable doubt"
        traits = ", ".join(persona.personality_traits) or "unremarkable"

        return "\n".join(
            [
                f"You are Juror {persona.name}, a {persona.occupation} ({persona.archetype}).",
                f"Personality: {traits}.",
                f"Deliberation style: {persona.deliberation_style}",
                "",
                f"Your current vote: {request.vote.value.upper()}",
                f"Your opinion strength: {abs(juror.opinion):.0f}/100",
                f"Your confidence: {juror.confidence:.0f}/100",
                "",
                f"Key memories from trial: {memories}",
                "",
                f"Current vote count: {guilty} guilty, {not_guilty} not guilty",
                f"Deliberation round: {request.round_number}",
                "",
                "Make a brief argument (1-2 sentences) for your position. "
                f"Stay in character. Be {stance}.",
            ]
        )

    @staticmethod
    def parse_reply(raw: str, juror_name: str) -> ArgumentReply:
        payload = safe_json_parse(strip_markdown_fences(raw))
        if payload is None:
            logger.warning("Juror %s argument was not valid JSON.", juror_name)
            raise ValueError(f"Invalid argument payload for juror {juror_name}: {raw[:200]}")

        statement = str(payload.get("statement", "") or "").strip()
        if not statement:
            raise ValueError(f"Empty argument statement for juror {juror_name}")

        target_raw = payload.get("persuasionTarget", payload.get("persuasion_target"))
        try:
            target = PersuasionTarget(target_raw)
        except ValueError:
            target = PersuasionTarget.UNDECIDED
        return ArgumentReply(statement=statement, persuasion_target=target)


def build_request(
    juror: JurorState,
    votes: list[JurorVote],
    round_number: int,
    memory_window: int = 5,
) -> ArgumentRequest:
    return ArgumentRequest(
        juror=juror,
        vote=vote_of(juror),
        votes=list(votes),
        round_number=round_number,
        memory_window=memory_window,
    )
