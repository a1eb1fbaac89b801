"""Prompt templates for the extraction tasks."""

import logging
from pathlib import Path
from typing import Dict, Optional

import yaml

logger = logging.getLogger(__name__)

# Cache templates at module level
_TEMPLATES_CACHE: Optional[Dict[str, str]] = None

COGNITIVE_DISTORTIONS = [
    "All-or-Nothing Thinking",
    "Overgeneralization",
    "Mental Filter",
    "Disqualifying the Positive",
    "Jumping to Conclusions",
    "Mind Reading",
    "Fortune Telling",
    "Magnification/Catastrophizing",
    "Minimization",
    "Emotional Reasoning",
    "Should Statements",
    "Labeling",
    "Personalization",
    "Blame",
]

_DISTORTION_LIST = "\n".join(
    f"{index}. {name}" for index, name in enumerate(COGNITIVE_DISTORTIONS, start=1)
)

DEFAULT_TEMPLATES: Dict[str, str] = {
    "extract_insights": """You are analyzing a therapy conversation to extract long-term insights about the user. Only extract insights that represent clear patterns across several messages and are therapeutically meaningful.

Categories:
1. automatic_thoughts: recurring thought patterns, cognitive distortions, self-talk
2. emotions: emotional patterns, triggers, regulation
3. behaviors: coping behaviors, avoidance, responses to stress
4. values_goals: core values, priorities, goals
5. strengths: resilience factors, positive coping skills, personal resources
6. life_context: relationships, circumstances, stressors

Each insight is one or two specific sentences. Assign a confidence between 0 and 1 reflecting the strength of evidence.

Return only a JSON object:
{"insights": [{"category": "emotions", "content": "...", "confidence": 0.85}]}""",

    "generate_summary": """Write a short session summary (one to five sentences) capturing what the user discovered about themselves, their patterns, or their situation, and anything they can apply going forward. Be specific to this conversation; avoid generic recaps and therapy jargon.

Return only the summary text.""",

    "consolidate_summaries": """You are consolidating several therapy session summaries into one paragraph that preserves long-term continuity. Describe recurring themes, core issues, progress over time, and the coping strategies that helped.

Return only the consolidated paragraph.""",

    "extract_patterns": f"""You are a CBT therapist analysing a conversation for automatic thoughts and cognitive distortions in the user's messages. For each automatic thought:
1. Quote the exact thought from the user's message
2. Name the cognitive distortions present, using this list:
{_DISTORTION_LIST}
3. Offer a realistic, balanced reframe (not just a positive one)
4. Assign a confidence between 0 and 1 reflecting how clear the distortion is

Be conservative: only include thoughts with a clear distortion.

Return only a JSON object:
{{"thoughtPatterns": [{{"originalThought": "...", "distortionTypes": ["Mind Reading"], "reframedThought": "...", "confidence": 0.85, "context": "...", "sourceMessage": "partial quote of the source message"}}]}}""",

    "extract_vision_insights": """You are analysing a Vision of the Future exercise, where the user imagined their future self. Extract:
- coreQualities: traits and values the future self embodies
- lifeDomains: how the future self shows up in relationships, health, career, creativity and lifestyle (only domains that were discussed)
- guidingSentences: two or three short affirmations capturing the vision
- practicalTakeaways: one or two small steps for this week
- fullDescription: a two to three sentence summary of the vision
- emotionalConnection: how it feels to be this future self
- wisdomExchange: guidance the future self offered the present self

Return only a JSON object with those keys and a confidence between 0 and 1.""",
}

USER_PROMPT_PREFIXES: Dict[str, str] = {
    "extract_patterns": "Analyze this therapy conversation for CBT thought patterns:",
    "extract_insights": "Analyze this therapy conversation and extract meaningful insights:",
    "generate_summary": "Create a concise summary of this therapy session:",
    "consolidate_summaries": "Consolidate these therapy session summaries:",
    "extract_vision_insights": (
        "Analyze this Vision of the Future exercise session and extract structured insights:"
    ),
}


def load_templates(path: str = "config/prompts.yaml") -> Dict[str, str]:
    """Built-in templates, overridden by the YAML file when present (cached)."""
    global _TEMPLATES_CACHE
    if _TEMPLATES_CACHE is not None:
        return _TEMPLATES_CACHE

    templates = dict(DEFAULT_TEMPLATES)
    template_path = Path(path)
    if template_path.exists():
        with open(template_path) as f:
            overrides = yaml.safe_load(f) or {}
        for task, text in overrides.get("prompts", {}).items():
            if task in templates and isinstance(text, str):
                templates[task] = text
        logger.info(f"Loaded prompt overrides from {template_path}")

    _TEMPLATES_CACHE = templates
    return templates


def reset_template_cache() -> None:
    global _TEMPLATES_CACHE
    _TEMPLATES_CACHE = None


def build_user_prompt(task: str, body: str) -> str:
    return f"{USER_PROMPT_PREFIXES[task]}\n\n{body}"
