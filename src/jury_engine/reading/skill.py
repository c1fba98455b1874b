"""Jury-reading skill: how much of the jury's state a player can see.

Higher reading levels progressively reveal more seats, subtler expressions
and more of each juror's hidden profile. Exact opinions are never revealed.
"""
from __future__ import annotations

from dataclasses import dataclass

from jury_engine._defaults import SEATED_COUNT
from jury_engine.jury.state import Expression, JurorState
from jury_engine.personas.base import JurorPersona

_STRONG_EXPRESSIONS = frozenset({Expression.SHOCKED, Expression.ANGRY, Expression.SYMPATHETIC})


@dataclass(slots=True)
class JurorVisibility:
    expression: Expression
    show_name: bool
    show_occupation: bool
    show_age: bool
    show_background: bool
    show_personality: bool
    show_trend: bool
    show_approx_opinion: bool
    show_exact_opinion: bool
    show_bias_direction: bool
    show_triggers: bool
    dimmed: bool
    approx_opinion: int | None = None


@dataclass(slots=True)
class VoirDireInfo:
    name: bool
    age: bool
    occupation: bool
    background: bool
    personality: bool
    bias_direction: bool
    triggers: bool


def visible_seats(level: int) -> frozenset[int]:
    if level <= 1:
        return frozenset({0, 5, 8})
    if level == 2:
        return frozenset({0, 2, 4, 7, 9, 11})
    return frozenset(range(SEATED_COUNT))


def filter_expression(expression: Expression, level: int, seat_visible: bool) -> Expression:
    if not seat_visible:
        return Expression.NEUTRAL
    if level <= 1:
        return expression if expression in _STRONG_EXPRESSIONS else Expression.NEUTRAL
    return expression


def visible_juror_info(juror: JurorState, level: int) -> JurorVisibility:
    seat_visible = juror.seat_index in visible_seats(level)
    return JurorVisibility(
        expression=filter_expression(juror.expression, level, seat_visible),
        show_name=True,
        show_occupation=True,
        show_age=True,
        show_background=level >= 2,
        show_personality=level >= 3,
        show_trend=level >= 4,
        show_approx_opinion=level >= 5,
        show_exact_opinion=False,
        show_bias_direction=level >= 4,
        show_triggers=level >= 5,
        dimmed=not seat_visible and level < 3,
        approx_opinion=int(round(juror.opinion / 10) * 10) if level >= 5 else None,
    )


def voir_dire_info(persona: JurorPersona, level: int, has_consultant: bool = False) -> VoirDireInfo:
    """What a player learns about a prospective juror during selection."""
    return VoirDireInfo(
        name=True,
        age=True,
        occupation=True,
        background=level >= 2,
        personality=has_consultant or level >= 3,
        bias_direction=has_consultant or level >= 4,
        triggers=level >= 5,
    )


def jury_visibility(jurors: list[JurorState], level: int) -> list[JurorVisibility]:
    return [visible_juror_info(juror, level) for juror in jurors]


def mood_summary(jurors: list[JurorState], level: int) -> str:
    if level < 2:
        return "The jury is hard to read."
    if not jurors:
        return "The jury box is empty."

    avg_opinion = sum(juror.opinion for juror in jurors) / len(jurors)
    avg_engagement = sum(juror.engagement for juror in jurors) / len(jurors)

    if avg_opinion > 20:
        mood = "The jury seems sympathetic to your case."
    elif avg_opinion > 5:
        mood = "The jury appears cautiously receptive."
    elif avg_opinion > -5:
        mood = "The jury seems undecided."
    elif avg_opinion > -20:
        mood = "The jury appears skeptical."
    else:
        mood = "The jury seems hostile to your position."

    if level >= 3:
        if avg_engagement < 40:
            mood += " Several jurors look disengaged."
        elif avg_engagement > 80:
            mood += " The jury is highly attentive."

    if level >= 4:
        favorable = sum(1 for juror in jurors if juror.opinion > 10)
        unfavorable = sum(1 for juror in jurors if juror.opinion < -10)
        undecided = len(jurors) - favorable - unfavorable
        mood += f" ({favorable} favorable, {unfavorable} unfavorable, {undecided} undecided)"

    return mood
