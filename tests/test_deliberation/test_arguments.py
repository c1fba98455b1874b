from __future__ import annotations

import json
import random
import unittest

from jury_engine.deliberation.arguments import (
    FALLBACK_STATEMENTS,
    STYLE_STATEMENTS,
    LLMArgumentGenerator,
    PersuasionTarget,
    StaticArgumentGenerator,
    build_request,
    fallback_statement,
)
from jury_engine.jury.state import JurorMemory, JurorVote, Vote
from tests.helpers import FakeLLMClient, FakeLLMReply, make_state


def _votes(guilty: int, not_guilty: int) -> list[JurorVote]:
    votes = [JurorVote(f"g{i}", f"G{i}", Vote.GUILTY, 50.0, i) for i in range(guilty)]
    votes += [JurorVote(f"n{i}", f"N{i}", Vote.NOT_GUILTY, 50.0, guilty + i) for i in range(not_guilty)]
    return votes


class PromptBuildingTests(unittest.TestCase):
    def test_prompt_carries_persona_and_tally(self) -> None:
        juror = make_state(0, opinion=-42.0, confidence=61.0, deliberation_style="forceful")
        juror.memories.append(JurorMemory(turn=3, description="Fingerprints on the safe", impact=-9.0, emotional=False))
        prompt = LLMArgumentGenerator.build_prompt(build_request(juror, _votes(7, 5), round_number=2))

        self.assertIn("Test Juror 0", prompt)
        self.assertIn("Deliberation style: forceful", prompt)
        self.assertIn("Your current vote: GUILTY", prompt)
        self.assertIn("Your opinion strength: 42/100", prompt)
        self.assertIn("Fingerprints on the safe", prompt)
        self.assertIn("7 guilty, 5 not guilty", prompt)
        self.assertIn("Deliberation round: 2", prompt)
        self.assertIn("firm about guilt", prompt)

    def test_memory_window_keeps_latest(self) -> None:
        juror = make_state(0)
        for turn in range(8):
            juror.memories.append(JurorMemory(turn=turn, description=f"m{turn}", impact=5.0, emotional=False))
        request = build_request(juror, [], 1, memory_window=3)
        self.assertEqual(request.recent_memories, ["m5", "m6", "m7"])

    def test_zero_memory_window_keeps_nothing(self) -> None:
        juror = make_state(0)
        juror.memories.append(JurorMemory(turn=1, description="m1", impact=5.0, emotional=False))
        self.assertEqual(build_request(juror, [], 1, memory_window=0).recent_memories, [])

    def test_empty_memories_use_placeholder(self) -> None:
        prompt = LLMArgumentGenerator.build_prompt(build_request(make_state(0, opinion=10.0), [], 1))
        self.assertIn("General impression of the evidence", prompt)
        self.assertIn("firm about reasonable doubt", prompt)


class ReplyParsingTests(unittest.TestCase):
    def test_fenced_json_is_accepted(self) -> None:
        raw = "```json\n" + json.dumps({"statement": "It doesn't add up.", "persuasionTarget": "allies"}) + "\n```"
        reply = LLMArgumentGenerator.parse_reply(raw, "Ann")
        self.assertEqual(reply.statement, "It doesn't add up.")
        self.assertEqual(reply.persuasion_target, PersuasionTarget.ALLIES)

    def test_unknown_target_defaults_to_undecided(self) -> None:
        reply = LLMArgumentGenerator.parse_reply(json.dumps({"statement": "Hm.", "persuasionTarget": "everyone"}), "Ann")
        self.assertEqual(reply.persuasion_target, PersuasionTarget.UNDECIDED)
        reply = LLMArgumentGenerator.parse_reply(json.dumps({"statement": "Hm."}), "Ann")
        self.assertEqual(reply.persuasion_target, PersuasionTarget.UNDECIDED)

    def test_invalid_payloads_raise(self) -> None:
        with self.assertRaises(ValueError):
            LLMArgumentGenerator.parse_reply("I think he did it.", "Ann")
        with self.assertRaises(ValueError):
            LLMArgumentGenerator.parse_reply(json.dumps({"statement": "   "}), "Ann")
        with self.assertRaises(ValueError):
            LLMArgumentGenerator.parse_reply(json.dumps(["statement"]), "Ann")


class GeneratorTests(unittest.IsolatedAsyncioTestCase):
    async def test_llm_generator_sends_sampling_settings(self) -> None:
        client = FakeLLMClient({"gpt-test": FakeLLMReply(json.dumps({"statement": "Reasonable doubt."}))})
        generator = LLMArgumentGenerator(llm_client=client, model="gpt-test")
        reply = await generator.generate(build_request(make_state(0, opinion=5.0), [], 1))

        self.assertEqual(reply.statement, "Reasonable doubt.")
        self.assertEqual(len(client.calls), 1)
        call = client.calls[0]
        self.assertEqual(call["temperature"], 0.8)
        self.assertEqual(call["max_tokens"], 150)
        self.assertIn("Stay in character", call["system_prompt"])

    async def test_static_generator_matches_vote(self) -> None:
        generator = StaticArgumentGenerator(rng=random.Random(0))
        juror = make_state(0, opinion=-20.0, deliberation_style="questioning")
        reply = await generator.generate(build_request(juror, [], 1))
        pool = STYLE_STATEMENTS[("questioning", Vote.GUILTY)] + FALLBACK_STATEMENTS[Vote.GUILTY]
        self.assertIn(reply.statement, pool)


class FallbackStatementTests(unittest.TestCase):
    def test_unknown_style_uses_generic_pool(self) -> None:
        juror = make_state(0, deliberation_style="mumbling")
        rng = random.Random(2)
        for _ in range(10):
            self.assertIn(fallback_statement(juror, Vote.NOT_GUILTY, rng), FALLBACK_STATEMENTS[Vote.NOT_GUILTY])

    def test_statement_never_contradicts_vote(self) -> None:
        juror = make_state(0, deliberation_style="analytical")
        rng = random.Random(3)
        guilty_pool = STYLE_STATEMENTS[("analytical", Vote.GUILTY)] + FALLBACK_STATEMENTS[Vote.GUILTY]
        for _ in range(10):
            self.assertIn(fallback_statement(juror, Vote.GUILTY, rng), guilty_pool)


if __name__ == "__main__":
    unittest.main()
