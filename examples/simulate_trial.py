"""Seat a jury, run a short trial, and deliberate to a verdict.

Runs offline with canned juror arguments. Pass ``--llm`` to have jurors argue
through an LLM (requires jury-engine[llm] and OPENAI_API_KEY in your environment).
"""
from __future__ import annotations

import asyncio
import random
import sys

from jury_engine import CourtEvent, DeliberationCallbacks, DeliberationConfig, Jury, LLMArgumentGenerator, TemplateCatalog

TRIAL = [
    CourtEvent("The prosecution describes a desperate defendant drowning in debt", "emotional", 10, "prosecution", {"financial"}),
    CourtEvent("A neighbour testifies she heard shouting that night", "emotional", 8, "prosecution", {"eyewitness"}),
    CourtEvent("Fingerprints on the safe match the defendant", "analytical", 15, "prosecution", {"forensics"}),
    CourtEvent("The defense shows the lab skipped a contamination check", "analytical", 14, "defense", {"forensics"}),
    CourtEvent("Phone records place the defendant across town", "analytical", 18, "defense", {"alibi"}),
    CourtEvent("The detective admits the lineup was suggestive", "procedural", 9, "defense", {"police"}),
]


async def main() -> None:
    use_llm = "--llm" in sys.argv
    jury = Jury.empanel(
        TemplateCatalog.default(),
        case_id="state-v-ellison",
        rng=random.Random(2024),
        deliberation_config=DeliberationConfig(max_rounds=6),
        argument_generator=LLMArgumentGenerator() if use_llm else None,
        callbacks=DeliberationCallbacks(
            on_argument=lambda arg: print(f"    {arg.juror_name} ({arg.vote.value}): {arg.statement}"),
            on_event=lambda event: print(f"    ! {event.description}"),
        ),
    )

    print("Seated jurors:")
    for juror in jury.seated:
        print(f"  [{juror.seat_index:2d}] {juror.persona.summary}")

    for turn, event in enumerate(TRIAL, start=1):
        jury.present(event, turn)
        outcome = jury.check_events(turn)
        if outcome is not None and outcome.applied:
            print(f"Turn {turn}: {outcome.event.description}")
        print(f"Turn {turn}: {jury.mood_summary(4)}")

    print("\nDeliberation:")
    session = jury.start_deliberation()
    while not session.finished:
        rnd = await session.next_round()
        print(f"  Round {rnd.round_number}: {rnd.guilty_count} guilty / {rnd.not_guilty_count} not guilty")

    result = session.result()
    jury.record_deliberation(result)
    print(f"\nVerdict:     {result.verdict.value}")
    print(f"Foreperson:  {result.foreperson_name}")
    print(f"Rounds:      {result.total_rounds}")
    print(f"Removals:    {jury.stats.removals} ({jury.stats.vacancies} vacant)")


if __name__ == "__main__":
    asyncio.run(main())
