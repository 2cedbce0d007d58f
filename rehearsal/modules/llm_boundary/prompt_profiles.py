from __future__ import annotations

from dataclasses import dataclass

ENHANCE_SYSTEM_PROMPT = (
    "You are Nathan Fielder, the master of awkward preparation and meticulous planning. "
    "Enhance scripts with your signature style of over-preparation, statistical analysis, and beautiful awkwardness."
)


@dataclass(frozen=True)
class PromptProfile:
    profile_id: str
    system_template: str
    user_template: str
    temperature: float
    max_tokens: int


def _enhancement_template(opening: str, elements: tuple[str, ...], closing: str) -> str:
    bullet_lines = "\n".join(f"- {item}" for item in elements)
    return (
        f"{opening} (intensity {{intensity}}/10).\n\n"
        "ORIGINAL SCRIPT:\n{original_script}\n\n"
        f"Add elements like:\n{bullet_lines}\n\n"
        f"{closing}\n\n"
        "Enhanced script:\n"
    )


ENHANCEMENT_PROFILE_IDS = {
    "awkwardness": "enhance_awkwardness_v1",
    "overthinking": "enhance_overthinking_v1",
    "preparation": "enhance_preparation_v1",
    "diagrams": "enhance_diagrams_v1",
    "statistics": "enhance_statistics_v1",
    "replicas": "enhance_replicas_v1",
}

ANALYSIS_PROFILE_ID = "script_analysis_v1"
PRODUCTION_NOTES_PROFILE_ID = "production_notes_v1"

PROFILES: dict[str, PromptProfile] = {
    "enhance_awkwardness_v1": PromptProfile(
        profile_id="enhance_awkwardness_v1",
        system_template=ENHANCE_SYSTEM_PROMPT,
        user_template=_enhancement_template(
            "Take this mental health script and enhance it with Nathan Fielder-level awkwardness",
            (
                "Unnaturally long pauses with specific timing",
                "Over-explaining simple concepts",
                "Inappropriate statistical references",
                "Physical comedy through over-preparation",
                "Breaking the fourth wall with documentary-style observations",
            ),
            "Make it {awkwardness_percent}% more awkward while keeping the mental health message intact. "
            "Add [AWKWARD PAUSE - X.X seconds] notations and internal monologue sections.",
        ),
        temperature=0.8,
        max_tokens=2000,
    ),
    "enhance_overthinking_v1": PromptProfile(
        profile_id="enhance_overthinking_v1",
        system_template=ENHANCE_SYSTEM_PROMPT,
        user_template=_enhancement_template(
            "Enhance this mental health script with Nathan Fielder's signature overthinking",
            (
                "Internal monologue analyzing every word choice",
                "Preparing for 47 different conversation outcomes",
                "Second-guessing basic social interactions",
                "Meta-commentary on the conversation process",
                "Flowcharts and decision trees mentioned in dialogue",
            ),
            "Show the character's mind working in overdrive, planning and re-planning every interaction.",
        ),
        temperature=0.8,
        max_tokens=2000,
    ),
    "enhance_preparation_v1": PromptProfile(
        profile_id="enhance_preparation_v1",
        system_template=ENHANCE_SYSTEM_PROMPT,
        user_template=_enhancement_template(
            "Enhance this mental health script with Nathan's over-preparation methodology",
            (
                "Multiple backup plans for every scenario",
                "Rehearsed responses to common questions",
                "Physical props and preparation materials",
                "References to extensive research and practice",
                "Time spent preparing vs. actual conversation time",
            ),
            "Show the character has prepared for this conversation like a military operation.",
        ),
        temperature=0.8,
        max_tokens=2000,
    ),
    "enhance_diagrams_v1": PromptProfile(
        profile_id="enhance_diagrams_v1",
        system_template=ENHANCE_SYSTEM_PROMPT,
        user_template=_enhancement_template(
            "Enhance this mental health script with Nathan's love of visual aids and flowcharts",
            (
                "Flowcharts for conversation paths",
                "Diagrams explaining emotional states",
                "Charts tracking success rates",
                "Visual aids for complex concepts",
                "References to laminated instruction cards",
            ),
            "The character should have diagrams for everything, treating human interaction like a science.",
        ),
        temperature=0.8,
        max_tokens=2000,
    ),
    "enhance_statistics_v1": PromptProfile(
        profile_id="enhance_statistics_v1",
        system_template=ENHANCE_SYSTEM_PROMPT,
        user_template=_enhancement_template(
            "Enhance this mental health script with Nathan's use of fake but believable statistics",
            (
                "Specific percentages (73.4%, 147 cases studied, etc.)",
                'References to "research" and "studies"',
                "Statistical analysis of conversation success rates",
                "Data-driven decision making",
                "Numerical backing for every claim",
            ),
            "Make every statement sound scientifically backed with convincing fake statistics.",
        ),
        temperature=0.8,
        max_tokens=2000,
    ),
    "enhance_replicas_v1": PromptProfile(
        profile_id="enhance_replicas_v1",
        system_template=ENHANCE_SYSTEM_PROMPT,
        user_template=_enhancement_template(
            "Enhance this mental health script with Nathan's tendency to build replicas and practice environments",
            (
                "Building exact replicas of conversation locations",
                "Creating practice environments",
                "Scale models for planning purposes",
                "Hiring actors to practice scenarios",
                "References to construction and preparation time",
            ),
            "The character should treat this like a major production requiring physical sets and rehearsal spaces.",
        ),
        temperature=0.8,
        max_tokens=2000,
    ),
    ANALYSIS_PROFILE_ID: PromptProfile(
        profile_id=ANALYSIS_PROFILE_ID,
        system_template=(
            "You are Nathan Fielder providing comprehensive script analysis. "
            "Be meticulous, analytical, and include specific numerical scores."
        ),
        user_template=(
            "As Nathan Fielder, provide a comprehensive analysis of this mental health script. "
            "Your analysis should be meticulous, slightly obsessive, and include specific numerical scores.\n\n"
            "SCRIPT TO ANALYZE:\n{script}\n\n"
            "CONTEXT:\n"
            "- Template: {template}\n"
            "- Current Nathan Level: {nathan_level}%\n"
            "- Enhancements: {enhancements}\n\n"
            "Provide analysis in this exact format:\n\n"
            "AWKWARDNESS_SCORE: [0-100] (How authentically awkward this feels)\n"
            "COMPLEXITY_RATING: [0-100] (Level of preparation and detail)\n"
            "OPTIMALITY_SCORE: [0-100] (How close to perfect Nathan methodology)\n\n"
            "DIALOGUE_QUALITY: [0-100] (Realism of conversation)\n"
            "PREPARATION_LEVEL: [0-100] (Evidence of over-preparation)\n"
            "AWKWARDNESS_AUTHENTICITY: [0-100] (Natural vs forced awkwardness)\n"
            "STATISTICAL_CREDIBILITY: [0-100] (Use of believable fake statistics)\n\n"
            "NATHAN_OBSERVATION: [One paragraph of Nathan's commentary on this script, including specific "
            "observations and comparisons to his own work]\n\n"
            "IMPROVEMENT_SUGGESTIONS: [Exactly 3-5 specific suggestions in Nathan's voice, each starting with a dash]\n\n"
            "Remember: Be specific, analytical, and include references to actual preparation techniques Nathan would use.\n"
        ),
        temperature=0.7,
        max_tokens=1500,
    ),
    PRODUCTION_NOTES_PROFILE_ID: PromptProfile(
        profile_id=PRODUCTION_NOTES_PROFILE_ID,
        system_template=(
            "You are Nathan Fielder generating production notes. Be absurdly specific and preparation-focused."
        ),
        user_template=(
            "As Nathan Fielder, generate exactly 5 production notes for this mental health script. "
            "Each note should be absurdly detailed and preparation-focused.\n\n"
            "SCRIPT:\n{script}\n\n"
            "ENHANCEMENT TYPES: {enhancement_types}\n\n"
            "Format each note as a complete sentence starting with an action verb. "
            "Make them increasingly specific and Nathan-like.\n\n"
            "Examples:\n"
            "- Build exact replica of therapy office, including water stain on ceiling tile #47\n"
            '- Hire 73 background actors to practice different reactions to the word "feelings"\n'
            "- Create detailed spreadsheet tracking every micro-expression for 147 possible responses\n\n"
            "Generate 5 notes in this style:\n"
        ),
        temperature=0.9,
        max_tokens=800,
    ),
}

_DEFAULT_SLOT_LIMIT = 280
_SLOT_LIMITS = {
    "original_script": 10000,
    "script": 10000,
    "enhancements": 600,
    "enhancement_types": 600,
}
# Script bodies keep their line breaks; everything else is collapsed to one line.
_MULTILINE_SLOTS = {"original_script", "script"}


def get_profile(profile_id: str) -> PromptProfile:
    profile = PROFILES.get(profile_id)
    if profile is None:
        raise ValueError(f"unknown prompt profile: {profile_id}")
    return profile


def render_prompt(profile_id: str, *, slots: dict[str, object]) -> tuple[str, str]:
    profile = get_profile(profile_id)

    safe_slots = {}
    for key, value in slots.items():
        limit = _SLOT_LIMITS.get(key, _DEFAULT_SLOT_LIMIT)
        if key in _MULTILINE_SLOTS:
            safe_slots[key] = str("" if value is None else value).strip()[:limit]
        else:
            safe_slots[key] = " ".join(str("" if value is None else value).split())[:limit]
    system_prompt = profile.system_template
    try:
        user_prompt = profile.user_template.format(**safe_slots)
    except KeyError as exc:
        missing = str(exc).strip("'")
        raise ValueError(f"missing prompt slot: {missing}") from exc
    return system_prompt, user_prompt
