from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any

from jury_engine.jury.state import JurorState, JuryBox, OpinionSnapshot
from jury_engine.personas.base import JurorPersona, TriggerDirection


@dataclass
class FakeLLMReply:
    content: str
    tokens: int = 10
    cost_usd: float = 0.001


class FakeLLMClient:
    """Returns canned replies keyed by juror name (or model), else a generic statement."""

    def __init__(self, responses: dict[str, FakeLLMReply] | None = None):
        self.responses = responses or {}
        self.calls: list[dict[str, Any]] = []

    async def complete(
        self,
        model: str,
        system_prompt: str,
        prompt: str,
        temperature: float | None = 0.0,
        max_tokens: int | None = None,
    ) -> dict[str, Any]:
        self.calls.append(
            {
                "model": model,
                "system_prompt": system_prompt,
                "prompt": prompt,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )

        reply = self.responses.get(model)
        if reply is None:
            for key, candidate in self.responses.items():
                if key in prompt:
                    reply = candidate
                    break

        if reply is not None:
            return {"content": reply.content, "tokens": reply.tokens, "cost_usd": reply.cost_usd}

        default = {"statement": "I need to hear more before I decide.", "persuasionTarget": "undecided"}
        return {"content": json.dumps(default), "tokens": 10, "cost_usd": 0.001}


class FailingLLMClient:
    def __init__(self, exc: Exception | None = None):
        self.exc = exc or ConnectionError("provider unavailable")
        self.calls = 0

    async def complete(self, model, system_prompt, prompt, temperature=0.0, max_tokens=None):
        self.calls += 1
        raise self.exc


class SlowLLMClient:
    def __init__(self, delay_s: float = 1.0):
        self.delay_s = delay_s

    async def complete(self, model, system_prompt, prompt, temperature=0.0, max_tokens=None):
        await asyncio.sleep(self.delay_s)
        return {"content": json.dumps({"statement": "Too late."}), "tokens": 0, "cost_usd": None}


def make_persona(index: int = 0, **overrides: Any) -> JurorPersona:
    fields: dict[str, Any] = {
        "id": f"juror-{index}-test",
        "name": f"Test Juror {index}",
        "age": 40,
        "occupation": "clerk",
        "background": "Born and raised locally, deep community roots.",
        "archetype_id": "test",
        "archetype": "Test Archetype",
        "analytical_vs_emotional": 50,
        "trust_level": 50,
        "skepticism": 50,
        "leader_follower": 50,
        "attention_span": 70,
        "prosecution_bias": 0.0,
        "topic_biases": {},
        "triggers": (),
        "trigger_direction": TriggerDirection.SYMPATHETIC,
        "persuasion_resistance": 50,
        "leadership_score": 50,
        "deliberation_style": "reserved",
        "personality_traits": ("calm",),
    }
    fields.update(overrides)
    return JurorPersona(**fields)


def make_state(
    index: int = 0,
    opinion: float = 0.0,
    confidence: float = 50.0,
    engagement: float = 100.0,
    seat_index: int | None = None,
    is_alternate: bool = False,
    **persona_overrides: Any,
) -> JurorState:
    state = JurorState(
        persona=make_persona(index, **persona_overrides),
        opinion=opinion,
        confidence=confidence,
        engagement=engagement,
        seat_index=index if seat_index is None else seat_index,
        is_alternate=is_alternate,
    )
    state.opinion_history.append(OpinionSnapshot(turn=0, opinion=state.opinion))
    return state


def make_box(opinions: list[float], alternates: int = 0, **persona_overrides: Any) -> JuryBox:
    seated = [make_state(i, opinion=op, **persona_overrides) for i, op in enumerate(opinions)]
    bench = [
        make_state(len(opinions) + i, opinion=0.0, is_alternate=True, **persona_overrides)
        for i in range(alternates)
    ]
    return JuryBox(seated=seated, alternates=bench)
