from __future__ import annotations

import asyncio
import json
import random
import unittest

from jury_engine.deliberation.arguments import ArgumentReply, LLMArgumentGenerator, PersuasionTarget
from jury_engine.deliberation.engine import (
    DeliberationArgument,
    DeliberationCallbacks,
    DeliberationConfig,
    DeliberationEngine,
    Verdict,
    apply_persuasion,
    calculate_persuasion_power,
    persuasion_shift,
    select_foreperson,
    speaker_count,
)
from jury_engine.events.engine import (
    ConsequenceKind,
    JuryEventConsequence,
    JuryEventSystem,
    JuryEventTemplate,
    JuryEventType,
)
from jury_engine.jury.state import Vote
from tests.helpers import FailingLLMClient, FakeLLMClient, FakeLLMReply, SlowLLMClient, make_box, make_state


def _quiet_engine(seed: int = 0, **kwargs) -> DeliberationEngine:
    rng = random.Random(seed)
    return DeliberationEngine(event_system=JuryEventSystem(templates=(), rng=rng), rng=rng, **kwargs)


def _argument(vote: Vote, power: float = 1.0) -> DeliberationArgument:
    return DeliberationArgument(
        juror_id="speaker",
        juror_name="Speaker",
        archetype="Test",
        statement="...",
        vote=vote,
        persuasion_power=power,
        seat_index=99,
    )


class PersuasionMathTests(unittest.TestCase):
    def setUp(self) -> None:
        self.config = DeliberationConfig()

    def test_persuasion_power(self) -> None:
        leader = make_state(confidence=100.0, leader_follower=0)
        middling = make_state(confidence=50.0, leader_follower=50)
        self.assertAlmostEqual(calculate_persuasion_power(leader, self.config), 1.0)
        self.assertAlmostEqual(calculate_persuasion_power(middling, self.config), 0.5)

    def test_shift_direction_follows_vote(self) -> None:
        target = make_state(opinion=0.0, persuasion_resistance=50, leader_follower=50)
        self.assertAlmostEqual(persuasion_shift(target, _argument(Vote.NOT_GUILTY), self.config), 1.875)
        self.assertAlmostEqual(persuasion_shift(target, _argument(Vote.GUILTY), self.config), -1.875)

    def test_strong_allies_barely_move(self) -> None:
        ally = make_state(opinion=40.0, persuasion_resistance=50, leader_follower=50)
        self.assertAlmostEqual(persuasion_shift(ally, _argument(Vote.NOT_GUILTY), self.config), 0.375)
        opponent = make_state(opinion=-40.0, persuasion_resistance=50, leader_follower=50)
        self.assertAlmostEqual(persuasion_shift(opponent, _argument(Vote.NOT_GUILTY), self.config), 1.875)

    def test_fully_resistant_juror_is_unmoved(self) -> None:
        rock = make_state(opinion=-10.0, persuasion_resistance=100)
        self.assertEqual(persuasion_shift(rock, _argument(Vote.NOT_GUILTY), self.config), 0.0)

    def test_apply_persuasion_builds_confidence(self) -> None:
        target = make_state(opinion=0.0, confidence=40.0, persuasion_resistance=50, leader_follower=50)
        updated = apply_persuasion(target, _argument(Vote.GUILTY), self.config)
        self.assertAlmostEqual(updated.opinion, -1.875)
        self.assertAlmostEqual(updated.confidence, 40.0 + 1.875 * 0.3)
        self.assertEqual(target.opinion, 0.0)

    def test_speaker_count(self) -> None:
        self.assertEqual(speaker_count(12, 1, self.config), 9)
        self.assertEqual(speaker_count(12, 2, self.config), 9)
        self.assertEqual(speaker_count(12, 3, self.config), 6)
        self.assertEqual(speaker_count(4, 5, self.config), 3)
        self.assertEqual(speaker_count(2, 1, self.config), 2)

    def test_foreperson_is_strongest_active_leader(self) -> None:
        box = make_box([10, 20, 30])
        box.seated[0] = make_state(0, leader_follower=5)
        box.seated[2] = make_state(2, leader_follower=20)
        self.assertEqual(select_foreperson(box.seated).id, "juror-0-test")
        box.remove_juror(0, "illness")
        self.assertEqual(select_foreperson(box.seated).id, "juror-2-test")

    def test_invalid_round_cap(self) -> None:
        with self.assertRaises(ValueError):
            DeliberationConfig(max_rounds=0)


class DeliberationOutcomeTests(unittest.IsolatedAsyncioTestCase):
    async def test_unanimous_acquittal_ends_immediately(self) -> None:
        box = make_box([50.0] * 12)
        result = await _quiet_engine().deliberate(box)
        self.assertEqual(result.verdict, Verdict.NOT_GUILTY)
        self.assertTrue(result.unanimous)
        self.assertEqual(result.total_rounds, 1)
        self.assertEqual(result.rounds[0].arguments, [])
        self.assertEqual(result.final_tally, (0, 12))

    async def test_unanimous_conviction(self) -> None:
        result = await _quiet_engine().deliberate(make_box([-50.0] * 12))
        self.assertEqual(result.verdict, Verdict.GUILTY)
        self.assertEqual(result.final_tally, (12, 0))

    async def test_entrenched_blocs_hang_at_round_cap(self) -> None:
        box = make_box([60.0] * 6 + [-60.0] * 6, persuasion_resistance=95)
        engine = _quiet_engine(config=DeliberationConfig(max_rounds=3))
        result = await engine.deliberate(box)
        self.assertEqual(result.verdict, Verdict.HUNG)
        self.assertFalse(result.unanimous)
        self.assertEqual(result.total_rounds, 3)
        self.assertEqual(result.final_tally, (6, 6))
        self.assertEqual([len(r.arguments) for r in result.rounds], [9, 9, 6])

    async def test_persuadable_minority_comes_around(self) -> None:
        majority = [make_state(i, opinion=70.0, confidence=90.0, leader_follower=5) for i in range(9)]
        minority = [
            make_state(i, opinion=-3.0, confidence=30.0, leader_follower=95, persuasion_resistance=0)
            for i in range(9, 12)
        ]
        box = make_box([])
        box.seated = majority + minority
        result = await _quiet_engine(config=DeliberationConfig(max_rounds=5)).deliberate(box)
        self.assertEqual(result.verdict, Verdict.NOT_GUILTY)
        self.assertTrue(all(juror.opinion > 0 for juror in box.seated))

    async def test_strongest_leaders_speak_first(self) -> None:
        box = make_box([])
        box.seated = [
            make_state(0, opinion=30.0, leader_follower=80, persuasion_resistance=100),
            make_state(1, opinion=-30.0, leader_follower=10, persuasion_resistance=100),
            make_state(2, opinion=30.0, leader_follower=40, persuasion_resistance=100),
            make_state(3, opinion=-30.0, leader_follower=60, persuasion_resistance=100),
        ]
        result = await _quiet_engine(config=DeliberationConfig(max_rounds=1)).deliberate(box)
        self.assertEqual([a.seat_index for a in result.rounds[0].arguments], [1, 2, 3])
        self.assertEqual(result.foreperson_id, "juror-1-test")

    async def test_same_seed_replays_the_same_deliberation(self) -> None:
        async def run(seed: int) -> str:
            box = make_box([20.0, -15.0, 5.0, -8.0, 30.0, -25.0])
            return (await _quiet_engine(seed).deliberate(box)).to_json()

        self.assertEqual(await run(5), await run(5))

    async def test_result_serialises(self) -> None:
        result = await _quiet_engine().deliberate(make_box([10.0, -10.0], persuasion_resistance=100))
        payload = json.loads(result.to_json())
        self.assertEqual(payload["verdict"], "hung")
        self.assertEqual(payload["rounds"][0]["votes"][0]["vote"], "not_guilty")


class DeliberationEventTests(unittest.IsolatedAsyncioTestCase):
    def _collapse_system(self) -> JuryEventSystem:
        def _remove(ctx):
            return JuryEventConsequence(
                kind=ConsequenceKind.REMOVE_JUROR,
                seat_index=ctx.target.seat_index,
                juror_id=ctx.target.id,
                reason="illness",
            )

        template = JuryEventTemplate(
            type=JuryEventType.ILLNESS,
            probability=1.0,
            min_turn=1,
            deliberation_only=True,
            descriptions=("Juror {name} collapses.",),
            consequence=_remove,
        )
        return JuryEventSystem(templates=(template,), rng=random.Random(1))

    async def test_removed_juror_leaves_the_vote(self) -> None:
        box = make_box([40.0, 40.0, -40.0, -40.0], persuasion_resistance=100)
        engine = DeliberationEngine(
            config=DeliberationConfig(max_rounds=1),
            event_system=self._collapse_system(),
            rng=random.Random(1),
        )
        result = await engine.deliberate(box)
        round_one = result.rounds[0]
        self.assertEqual(len(round_one.events), 1)
        self.assertEqual(len(round_one.votes), 3)
        self.assertEqual(len(box.dismissed), 1)
        self.assertEqual(len(box.active), 3)

    async def test_alternate_joins_deliberation(self) -> None:
        box = make_box([40.0, 40.0, -40.0, -40.0], alternates=1, persuasion_resistance=100)
        alternate_id = box.alternates[0].id
        engine = DeliberationEngine(
            config=DeliberationConfig(max_rounds=1),
            event_system=self._collapse_system(),
            rng=random.Random(1),
        )
        result = await engine.deliberate(box)
        self.assertEqual(len(result.final_votes), 4)
        self.assertIn(alternate_id, {vote.juror_id for vote in result.final_votes})


class SessionTests(unittest.IsolatedAsyncioTestCase):
    async def test_rounds_can_be_stepped(self) -> None:
        box = make_box([10.0, -10.0, 10.0], persuasion_resistance=100)
        session = _quiet_engine(config=DeliberationConfig(max_rounds=2)).start(box)
        with self.assertRaises(RuntimeError):
            session.result()

        first = await session.next_round()
        self.assertEqual(first.round_number, 1)
        self.assertFalse(session.finished)
        await session.next_round()
        self.assertTrue(session.finished)
        self.assertEqual(session.result().verdict, Verdict.HUNG)
        with self.assertRaises(RuntimeError):
            await session.next_round()

    async def test_callbacks_fire_in_order(self) -> None:
        seen: list[str] = []
        callbacks = DeliberationCallbacks(
            on_round_start=lambda n: seen.append(f"start:{n}"),
            on_argument=lambda a: seen.append("argument"),
            on_vote_update=lambda votes: seen.append(f"votes:{len(votes)}"),
            on_round_end=lambda r: seen.append(f"end:{r.round_number}"),
        )
        box = make_box([10.0, -10.0, 10.0], persuasion_resistance=100)
        await _quiet_engine(config=DeliberationConfig(max_rounds=1), callbacks=callbacks).deliberate(box)
        self.assertEqual(
            seen,
            ["start:1", "votes:3", "argument", "argument", "argument", "votes:3", "end:1"],
        )

    async def test_cancelled_round_leaves_box_untouched(self) -> None:
        started = asyncio.Event()

        class _Blocking:
            async def generate(self, request):
                started.set()
                await asyncio.Event().wait()
                return ArgumentReply(statement="never")

        box = make_box([30.0, -30.0, 30.0])
        before = [juror.to_dict() for juror in box.seated]
        session = _quiet_engine(argument_generator=_Blocking()).start(box)
        task = asyncio.create_task(session.next_round())
        await started.wait()
        task.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await task

        self.assertEqual([juror.to_dict() for juror in box.seated], before)
        self.assertEqual(session.rounds, [])


class ArgumentFallbackTests(unittest.IsolatedAsyncioTestCase):
    async def test_llm_statement_is_used(self) -> None:
        client = FakeLLMClient(
            {
                "Test Juror 0": FakeLLMReply(
                    json.dumps({"statement": "The timeline is impossible.", "persuasionTarget": "opposition"})
                )
            }
        )
        engine = _quiet_engine(argument_generator=LLMArgumentGenerator(llm_client=client))
        juror = make_state(0, opinion=25.0)
        argument = await engine.argue(juror, [], 1)
        self.assertEqual(argument.statement, "The timeline is impossible.")
        self.assertEqual(argument.persuasion_target, PersuasionTarget.OPPOSITION)
        self.assertEqual(argument.vote, Vote.NOT_GUILTY)
        self.assertFalse(argument.used_fallback)

    async def test_provider_failure_falls_back(self) -> None:
        client = FailingLLMClient()
        engine = _quiet_engine(argument_generator=LLMArgumentGenerator(llm_client=client))
        with self.assertLogs("jury_engine.deliberation.engine", level="WARNING"):
            argument = await engine.argue(make_state(0, opinion=-25.0), [], 1)
        self.assertTrue(argument.used_fallback)
        self.assertTrue(argument.statement)
        self.assertEqual(argument.vote, Vote.GUILTY)
        self.assertEqual(client.calls, 1)

    async def test_malformed_reply_falls_back(self) -> None:
        client = FakeLLMClient({"Test Juror 0": FakeLLMReply("not json at all")})
        engine = _quiet_engine(argument_generator=LLMArgumentGenerator(llm_client=client))
        argument = await engine.argue(make_state(0, opinion=25.0), [], 1)
        self.assertTrue(argument.used_fallback)

    async def test_slow_generator_times_out(self) -> None:
        engine = _quiet_engine(
            config=DeliberationConfig(argument_timeout_s=0.01),
            argument_generator=LLMArgumentGenerator(llm_client=SlowLLMClient(delay_s=1.0)),
        )
        argument = await engine.argue(make_state(0, opinion=25.0), [], 1)
        self.assertTrue(argument.used_fallback)

    async def test_no_generator_uses_canned_text(self) -> None:
        argument = await _quiet_engine().argue(make_state(0, opinion=25.0), [], 1)
        self.assertTrue(argument.used_fallback)
        self.assertTrue(argument.statement)


if __name__ == "__main__":
    unittest.main()
