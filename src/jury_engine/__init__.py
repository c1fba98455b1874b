from ._version import __version__
from .deliberation.arguments import LLMArgumentGenerator, StaticArgumentGenerator
from .deliberation.engine import (
    DeliberationCallbacks,
    DeliberationConfig,
    DeliberationEngine,
    DeliberationResult,
    Verdict,
)
from .events.engine import JuryEvent, JuryEventSystem
from .jury.core import Jury, JuryStats
from .jury.opinion import CourtEvent, calculate_expression, update_opinion
from .jury.state import Expression, JurorState, JuryBox, Vote
from .personas.base import JurorPersona, JurorTemplate
from .personas.catalog import TemplateCatalog
from .personas.generator import PersonaGenerator

__all__ = [
    "__version__",
    "CourtEvent",
    "DeliberationCallbacks",
    "DeliberationConfig",
    "DeliberationEngine",
    "DeliberationResult",
    "Expression",
    "JurorPersona",
    "JurorState",
    "JurorTemplate",
    "Jury",
    "JuryBox",
    "JuryEvent",
    "JuryEventSystem",
    "JuryStats",
    "LLMArgumentGenerator",
    "PersonaGenerator",
    "StaticArgumentGenerator",
    "TemplateCatalog",
    "Verdict",
    "Vote",
    "calculate_expression",
    "update_opinion",
]
