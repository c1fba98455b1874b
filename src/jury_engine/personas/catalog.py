from __future__ import annotations

import json
from pathlib import Path

from .base import JurorTemplate, TriggerDirection

FIRST_NAMES_M = (
    "James", "Robert", "Michael", "David", "William", "Marcus", "Thomas", "Daniel",
    "Christopher", "Joseph", "Anthony", "Steven", "Kevin", "Brian", "George", "Edward",
    "Ronald", "Timothy", "Jason", "Jeffrey", "Ryan", "Jacob", "Gary", "Nicholas",
    "Eric", "Raymond", "Carlos", "Miguel", "Hiroshi", "Wei", "Ahmed", "Ivan",
)

FIRST_NAMES_F = (
    "Mary", "Patricia", "Jennifer", "Linda", "Barbara", "Sarah", "Karen", "Nancy",
    "Lisa", "Betty", "Dorothy", "Sandra", "Ashley", "Kimberly", "Emily", "Donna",
    "Michelle", "Carol", "Amanda", "Melissa", "Angela", "Stephanie", "Nicole", "Laura",
    "Yuki", "Mei", "Fatima", "Olga", "Maria", "Rosa", "Priya", "Aisha",
)

LAST_NAMES = (
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis",
    "Rodriguez", "Martinez", "Anderson", "Taylor", "Thomas", "Jackson", "White", "Harris",
    "Clark", "Lewis", "Robinson", "Walker", "Young", "Allen", "King", "Wright",
    "Kim", "Patel", "Chen", "Nguyen", "Tanaka", "Okafor", "Petrov", "Santos",
)

BACKGROUNDS = (
    "Grew up in a small town, moved to the city for work.",
    "College-educated, first in their family to attend university.",
    "Born and raised locally, deep community roots.",
    "Immigrant family, came to the country as a teenager.",
    "Military family, moved around frequently as a child.",
    "Raised by a single parent, learned independence early.",
    "Suburban upbringing, active in local organizations.",
    "Grew up in the inner city, understands urban challenges.",
    "Rural background, values hard work and self-reliance.",
    "Academic household, parents were both educators.",
    "Working-class family, started working at age 16.",
    "Divorced, raising two children on their own.",
)

_REQUIRED_KEYS = (
    "id",
    "archetype",
    "description",
    "occupations",
    "age_range",
    "analytical_vs_emotional",
    "trust_level",
    "skepticism",
    "leader_follower",
    "attention_span",
    "persuasion_resistance",
)


class TemplateCatalog:
    @staticmethod
    def default() -> list[JurorTemplate]:
        return [
            JurorTemplate(
                id="retired-cop",
                archetype="Retired Police Officer",
                description="Spent thirty years on the force and trusts the people who wear the badge.",
                personality_traits=("disciplined", "blunt", "procedural"),
                occupations=("retired police sergeant", "security consultant"),
                age_range=(55, 72),
                analytical_vs_emotional=(30, 55),
                trust_level=(60, 85),
                skepticism=(40, 65),
                leader_follower=(10, 30),
                attention_span=(60, 85),
                persuasion_resistance=(65, 85),
                bias_tendencies={"police": 30, "drugs": 20, "authority": 25},
                trigger_topics=("police_misconduct",),
                trigger_direction=TriggerDirection.HOSTILE,
                leadership_score=80,
                deliberation_style="forceful",
            ),
            JurorTemplate(
                id="public-defender-sibling",
                archetype="Civil Liberties Advocate",
                description="Has watched a family member fight the system and distrusts easy convictions.",
                personality_traits=("principled", "vocal", "suspicious of authority"),
                occupations=("community organizer", "paralegal", "nonprofit coordinator"),
                age_range=(24, 45),
                analytical_vs_emotional=(40, 70),
                trust_level=(15, 35),
                skepticism=(65, 90),
                leader_follower=(20, 45),
                attention_span=(65, 90),
                persuasion_resistance=(55, 80),
                bias_tendencies={"police": -30, "authority": -25, "confession": -20},
                trigger_topics=("police_misconduct", "coerced_confession"),
                trigger_direction=TriggerDirection.SYMPATHETIC,
                leadership_score=65,
                deliberation_style="passionate",
            ),
            JurorTemplate(
                id="engineer",
                archetype="Analytical Engineer",
                description="Wants the numbers to add up and dismisses anything that cannot be measured.",
                personality_traits=("methodical", "reserved", "detail-oriented"),
                occupations=("civil engineer", "software engineer", "quality analyst"),
                age_range=(28, 60),
                analytical_vs_emotional=(5, 30),
                trust_level=(40, 60),
                skepticism=(60, 85),
                leader_follower=(30, 55),
                attention_span=(75, 95),
                persuasion_resistance=(60, 85),
                bias_tendencies={"forensics": 15, "expert_testimony": 10, "eyewitness": -15},
                trigger_topics=("statistics",),
                trigger_direction=TriggerDirection.HOSTILE,
                leadership_score=55,
                deliberation_style="analytical",
            ),
            JurorTemplate(
                id="nurse",
                archetype="Compassionate Nurse",
                description="Sees the human cost on every side and reads people for pain.",
                personality_traits=("empathetic", "patient", "observant"),
                occupations=("emergency room nurse", "hospice nurse", "home health aide"),
                age_range=(30, 62),
                analytical_vs_emotional=(60, 85),
                trust_level=(50, 75),
                skepticism=(25, 50),
                leader_follower=(45, 70),
                attention_span=(55, 80),
                persuasion_resistance=(30, 55),
                bias_tendencies={"violence": 15, "mental_health": -20, "children": 20},
                trigger_topics=("child_victim", "medical_testimony"),
                trigger_direction=TriggerDirection.SYMPATHETIC,
                leadership_score=40,
                deliberation_style="empathetic",
            ),
            JurorTemplate(
                id="small-business-owner",
                archetype="Small Business Owner",
                description="Runs a tight shop, values responsibility and has been robbed before.",
                personality_traits=("practical", "stubborn", "hard-working"),
                occupations=("restaurant owner", "hardware store owner", "contractor"),
                age_range=(35, 65),
                analytical_vs_emotional=(35, 60),
                trust_level=(35, 60),
                skepticism=(45, 70),
                leader_follower=(15, 40),
                attention_span=(45, 70),
                persuasion_resistance=(60, 85),
                bias_tendencies={"theft": 30, "financial": 15, "corporate": -10},
                trigger_topics=("property_crime",),
                trigger_direction=TriggerDirection.HOSTILE,
                leadership_score=70,
                deliberation_style="forceful",
            ),
            JurorTemplate(
                id="college-student",
                archetype="Idealistic Student",
                description="Full of theory, short on patience, quick to question the powerful.",
                personality_traits=("curious", "idealistic", "restless"),
                occupations=("graduate student", "undergraduate", "barista"),
                age_range=(18, 26),
                analytical_vs_emotional=(40, 70),
                trust_level=(25, 50),
                skepticism=(55, 80),
                leader_follower=(45, 75),
                attention_span=(30, 60),
                persuasion_resistance=(25, 50),
                bias_tendencies={"police": -15, "youth": -20, "technology": 5},
                trigger_topics=("racial_profiling",),
                trigger_direction=TriggerDirection.SYMPATHETIC,
                leadership_score=35,
                deliberation_style="questioning",
            ),
            JurorTemplate(
                id="retired-teacher",
                archetype="Retired Schoolteacher",
                description="Patient and fair-minded, used to hearing both sides of a story.",
                personality_traits=("patient", "organized", "fair-minded"),
                occupations=("retired teacher", "school librarian", "tutor"),
                age_range=(58, 78),
                analytical_vs_emotional=(40, 65),
                trust_level=(50, 70),
                skepticism=(35, 60),
                leader_follower=(20, 45),
                attention_span=(60, 85),
                persuasion_resistance=(40, 65),
                bias_tendencies={"children": 20, "youth": -10},
                trigger_topics=("child_victim",),
                trigger_direction=TriggerDirection.SYMPATHETIC,
                leadership_score=70,
                deliberation_style="consensus-building",
            ),
            JurorTemplate(
                id="accountant",
                archetype="Meticulous Accountant",
                description="Trusts paperwork over people and notices when figures do not reconcile.",
                personality_traits=("precise", "cautious", "quiet"),
                occupations=("accountant", "auditor", "bookkeeper"),
                age_range=(30, 65),
                analytical_vs_emotional=(5, 25),
                trust_level=(35, 55),
                skepticism=(60, 85),
                leader_follower=(50, 75),
                attention_span=(70, 95),
                persuasion_resistance=(55, 80),
                bias_tendencies={"financial": 25, "corporate": 10, "alibi": -10},
                trigger_topics=("fraud",),
                trigger_direction=TriggerDirection.HOSTILE,
                leadership_score=40,
                deliberation_style="analytical",
            ),
            JurorTemplate(
                id="church-volunteer",
                archetype="Devout Volunteer",
                description="Believes in redemption but also in consequences.",
                personality_traits=("kind", "moralistic", "forgiving"),
                occupations=("church administrator", "food bank volunteer", "retired clerk"),
                age_range=(40, 75),
                analytical_vs_emotional=(60, 85),
                trust_level=(60, 85),
                skepticism=(20, 45),
                leader_follower=(50, 80),
                attention_span=(50, 75),
                persuasion_resistance=(35, 60),
                bias_tendencies={"drugs": 20, "violence": 15, "poverty": -15},
                trigger_topics=("remorse",),
                trigger_direction=TriggerDirection.SYMPATHETIC,
                leadership_score=35,
                deliberation_style="empathetic",
            ),
            JurorTemplate(
                id="tech-worker",
                archetype="Skeptical Tech Worker",
                description="Understands how digital evidence gets made and how it gets faked.",
                personality_traits=("sharp", "sarcastic", "independent"),
                occupations=("data scientist", "IT administrator", "product manager"),
                age_range=(24, 45),
                analytical_vs_emotional=(10, 35),
                trust_level=(25, 50),
                skepticism=(65, 90),
                leader_follower=(35, 60),
                attention_span=(40, 70),
                persuasion_resistance=(55, 80),
                bias_tendencies={"technology": -15, "forensics": 10, "expert_testimony": -5},
                trigger_topics=("digital_evidence",),
                trigger_direction=TriggerDirection.HOSTILE,
                leadership_score=50,
                deliberation_style="questioning",
            ),
            JurorTemplate(
                id="single-parent",
                archetype="Overworked Single Parent",
                description="Tired, distracted by home, and protective of kids above all.",
                personality_traits=("protective", "tired", "pragmatic"),
                occupations=("warehouse worker", "retail supervisor", "home care aide"),
                age_range=(25, 50),
                analytical_vs_emotional=(55, 80),
                trust_level=(40, 60),
                skepticism=(40, 60),
                leader_follower=(55, 80),
                attention_span=(25, 55),
                persuasion_resistance=(30, 55),
                bias_tendencies={"children": 30, "domestic": 20, "poverty": -10},
                trigger_topics=("child_victim", "domestic_violence"),
                trigger_direction=TriggerDirection.HOSTILE,
                leadership_score=30,
                deliberation_style="emotional",
            ),
            JurorTemplate(
                id="veteran",
                archetype="Military Veteran",
                description="Values duty and clear rules; has seen what violence does to people.",
                personality_traits=("disciplined", "loyal", "terse"),
                occupations=("logistics manager", "corrections officer", "veteran services officer"),
                age_range=(30, 70),
                analytical_vs_emotional=(30, 55),
                trust_level=(55, 80),
                skepticism=(35, 60),
                leader_follower=(10, 35),
                attention_span=(55, 80),
                persuasion_resistance=(65, 90),
                bias_tendencies={"authority": 20, "violence": 15, "self_defense": -20},
                trigger_topics=("combat_trauma",),
                trigger_direction=TriggerDirection.SYMPATHETIC,
                leadership_score=75,
                deliberation_style="forceful",
            ),
            JurorTemplate(
                id="social-worker",
                archetype="Social Worker",
                description="Sees defendants as products of their circumstances.",
                personality_traits=("empathetic", "patient", "systemic thinker"),
                occupations=("social worker", "case manager", "counselor"),
                age_range=(27, 60),
                analytical_vs_emotional=(55, 80),
                trust_level=(40, 65),
                skepticism=(40, 65),
                leader_follower=(35, 60),
                attention_span=(55, 80),
                persuasion_resistance=(40, 65),
                bias_tendencies={"poverty": -25, "mental_health": -25, "youth": -15},
                trigger_topics=("mental_illness", "abuse_history"),
                trigger_direction=TriggerDirection.SYMPATHETIC,
                leadership_score=50,
                deliberation_style="empathetic",
            ),
            JurorTemplate(
                id="corporate-executive",
                archetype="Corporate Executive",
                description="Used to running the room and making decisions quickly.",
                personality_traits=("confident", "decisive", "impatient"),
                occupations=("regional director", "vice president of sales", "operations executive"),
                age_range=(40, 65),
                analytical_vs_emotional=(25, 50),
                trust_level=(40, 65),
                skepticism=(45, 70),
                leader_follower=(5, 25),
                attention_span=(35, 65),
                persuasion_resistance=(60, 85),
                bias_tendencies={"corporate": -20, "financial": 10, "authority": 10},
                trigger_topics=("whistleblower",),
                trigger_direction=TriggerDirection.HOSTILE,
                leadership_score=85,
                deliberation_style="forceful",
            ),
            JurorTemplate(
                id="artist",
                archetype="Free-Spirited Artist",
                description="Intuitive and emotional, moved by stories more than statistics.",
                personality_traits=("intuitive", "expressive", "nonconformist"),
                occupations=("painter", "musician", "graphic designer"),
                age_range=(22, 55),
                analytical_vs_emotional=(70, 95),
                trust_level=(30, 55),
                skepticism=(40, 65),
                leader_follower=(55, 85),
                attention_span=(25, 55),
                persuasion_resistance=(20, 45),
                bias_tendencies={"police": -15, "authority": -20},
                trigger_topics=("injustice",),
                trigger_direction=TriggerDirection.SYMPATHETIC,
                leadership_score=25,
                deliberation_style="emotional",
            ),
            JurorTemplate(
                id="truck-driver",
                archetype="Long-Haul Trucker",
                description="Plain-spoken, independent, and suspicious of slick talkers.",
                personality_traits=("plain-spoken", "independent", "wary"),
                occupations=("truck driver", "delivery driver", "dispatcher"),
                age_range=(30, 65),
                analytical_vs_emotional=(40, 65),
                trust_level=(30, 55),
                skepticism=(55, 80),
                leader_follower=(40, 65),
                attention_span=(40, 65),
                persuasion_resistance=(55, 80),
                bias_tendencies={"drugs": 15, "expert_testimony": -15, "corporate": -15},
                trigger_topics=("lawyer_tricks",),
                trigger_direction=TriggerDirection.HOSTILE,
                leadership_score=45,
                deliberation_style="stubborn",
            ),
            JurorTemplate(
                id="lab-scientist",
                archetype="Laboratory Scientist",
                description="Knows how forensic testing works and where chains of custody break.",
                personality_traits=("rigorous", "measured", "literal"),
                occupations=("lab technician", "chemist", "research scientist"),
                age_range=(26, 60),
                analytical_vs_emotional=(5, 25),
                trust_level=(40, 60),
                skepticism=(65, 90),
                leader_follower=(40, 65),
                attention_span=(75, 95),
                persuasion_resistance=(60, 85),
                bias_tendencies={"forensics": 20, "expert_testimony": 15, "eyewitness": -20},
                trigger_topics=("contaminated_evidence",),
                trigger_direction=TriggerDirection.SYMPATHETIC,
                leadership_score=50,
                deliberation_style="analytical",
            ),
            JurorTemplate(
                id="homemaker",
                archetype="Community Homemaker",
                description="Knows every neighbor and cares what the neighborhood thinks.",
                personality_traits=("sociable", "agreeable", "traditional"),
                occupations=("homemaker", "PTA organizer", "part-time receptionist"),
                age_range=(30, 65),
                analytical_vs_emotional=(55, 80),
                trust_level=(55, 80),
                skepticism=(25, 45),
                leader_follower=(60, 90),
                attention_span=(45, 70),
                persuasion_resistance=(15, 40),
                bias_tendencies={"violence": 20, "drugs": 20, "children": 15},
                trigger_topics=("neighborhood_safety",),
                trigger_direction=TriggerDirection.HOSTILE,
                leadership_score=25,
                deliberation_style="agreeable",
            ),
            JurorTemplate(
                id="immigrant-shopkeeper",
                archetype="First-Generation Immigrant",
                description="Built a life from nothing and has seen how systems treat outsiders.",
                personality_traits=("resilient", "cautious", "family-oriented"),
                occupations=("grocery owner", "taxi driver", "tailor"),
                age_range=(30, 65),
                analytical_vs_emotional=(40, 65),
                trust_level=(30, 55),
                skepticism=(45, 70),
                leader_follower=(45, 75),
                attention_span=(50, 75),
                persuasion_resistance=(45, 70),
                bias_tendencies={"immigration": -25, "theft": 20, "police": -10},
                trigger_topics=("immigration_status",),
                trigger_direction=TriggerDirection.SYMPATHETIC,
                leadership_score=40,
                deliberation_style="reserved",
            ),
            JurorTemplate(
                id="retired-judge-clerk",
                archetype="Former Court Clerk",
                description="Has seen a thousand trials and trusts the process more than the players.",
                personality_traits=("procedural", "unflappable", "precise"),
                occupations=("retired court clerk", "legal secretary", "records manager"),
                age_range=(50, 75),
                analytical_vs_emotional=(20, 45),
                trust_level=(45, 70),
                skepticism=(50, 75),
                leader_follower=(15, 40),
                attention_span=(70, 90),
                persuasion_resistance=(55, 80),
                bias_tendencies={"confession": 15, "alibi": -5},
                trigger_topics=("procedural_error",),
                trigger_direction=TriggerDirection.SYMPATHETIC,
                leadership_score=70,
                deliberation_style="procedural",
            ),
            JurorTemplate(
                id="gig-worker",
                archetype="Disengaged Gig Worker",
                description="Just wants to get back to work and goes along with the room.",
                personality_traits=("distracted", "easygoing", "impatient"),
                occupations=("rideshare driver", "food courier", "freelance photographer"),
                age_range=(20, 40),
                analytical_vs_emotional=(45, 70),
                trust_level=(35, 55),
                skepticism=(35, 60),
                leader_follower=(70, 95),
                attention_span=(15, 40),
                persuasion_resistance=(10, 35),
                bias_tendencies={"drugs": -10, "youth": -10},
                trigger_topics=("long_testimony",),
                trigger_direction=TriggerDirection.HOSTILE,
                leadership_score=15,
                deliberation_style="agreeable",
            ),
            JurorTemplate(
                id="crime-victim",
                archetype="Former Crime Victim",
                description="Was assaulted years ago and has never forgotten how it felt.",
                personality_traits=("guarded", "intense", "protective"),
                occupations=("office manager", "bank teller", "pharmacy technician"),
                age_range=(28, 65),
                analytical_vs_emotional=(60, 90),
                trust_level=(30, 55),
                skepticism=(40, 65),
                leader_follower=(35, 65),
                attention_span=(60, 85),
                persuasion_resistance=(60, 85),
                bias_tendencies={"violence": 35, "domestic": 25, "self_defense": -10},
                trigger_topics=("violent_assault", "victim_testimony"),
                trigger_direction=TriggerDirection.HOSTILE,
                leadership_score=45,
                deliberation_style="passionate",
            ),
            JurorTemplate(
                id="philosophy-professor",
                archetype="Philosophy Professor",
                description="Treats reasonable doubt as a question worth an hour of debate.",
                personality_traits=("erudite", "contrarian", "verbose"),
                occupations=("professor", "lecturer", "retired academic"),
                age_range=(40, 75),
                analytical_vs_emotional=(15, 40),
                trust_level=(30, 55),
                skepticism=(70, 95),
                leader_follower=(20, 45),
                attention_span=(65, 90),
                persuasion_resistance=(55, 80),
                bias_tendencies={"eyewitness": -20, "confession": -15, "motive": -10},
                trigger_topics=("circumstantial_evidence",),
                trigger_direction=TriggerDirection.SYMPATHETIC,
                leadership_score=65,
                deliberation_style="questioning",
            ),
            JurorTemplate(
                id="farmer",
                archetype="Rural Farmer",
                description="Judges character by handshake and distrusts city lawyers.",
                personality_traits=("steady", "self-reliant", "taciturn"),
                occupations=("farmer", "ranch hand", "agricultural supplier"),
                age_range=(35, 75),
                analytical_vs_emotional=(40, 60),
                trust_level=(45, 70),
                skepticism=(45, 70),
                leader_follower=(35, 60),
                attention_span=(50, 75),
                persuasion_resistance=(65, 90),
                bias_tendencies={"theft": 20, "self_defense": -20, "drugs": 15},
                trigger_topics=("home_invasion",),
                trigger_direction=TriggerDirection.SYMPATHETIC,
                leadership_score=50,
                deliberation_style="stubborn",
            ),
        ]

    @staticmethod
    def custom(templates: list[dict]) -> list[JurorTemplate]:
        return [_template_from_dict(item) for item in templates]

    @staticmethod
    def from_json(path: str | Path) -> list[JurorTemplate]:
        """Load a catalog from a JSON file holding a list (or ``{"templates": [...]}``)."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if isinstance(data, dict):
            data = data.get("templates", [])
        if not isinstance(data, list):
            raise ValueError(f"Template catalog at {path} must be a list of templates")
        return TemplateCatalog.custom(data)


def _template_from_dict(item: dict) -> JurorTemplate:
    missing = [key for key in _REQUIRED_KEYS if key not in item]
    if missing:
        raise ValueError(f"Template {item.get('id', '<unknown>')} is missing keys: {', '.join(missing)}")

    def _range(key: str) -> tuple[int, int]:
        low, high = item[key]
        return (int(min(low, high)), int(max(low, high)))

    return JurorTemplate(
        id=str(item["id"]),
        archetype=str(item["archetype"]),
        description=str(item["description"]),
        personality_traits=tuple(item.get("personality_traits", ())),
        occupations=tuple(item["occupations"]),
        age_range=_range("age_range"),
        analytical_vs_emotional=_range("analytical_vs_emotional"),
        trust_level=_range("trust_level"),
        skepticism=_range("skepticism"),
        leader_follower=_range("leader_follower"),
        attention_span=_range("attention_span"),
        persuasion_resistance=_range("persuasion_resistance"),
        bias_tendencies={str(k): float(v) for k, v in item.get("bias_tendencies", {}).items()},
        trigger_topics=tuple(item.get("trigger_topics", ())),
        trigger_direction=TriggerDirection(item.get("trigger_direction", TriggerDirection.SYMPATHETIC.value)),
        leadership_score=int(item.get("leadership_score", 50)),
        deliberation_style=str(item.get("deliberation_style", "reserved")),
    )
