"""In-process analysis step: runs extraction tasks against a chat model."""

import json
import logging
import re
import time
from typing import Any, Dict, List, Optional

from wisdom.core.interfaces import (
    ExtractionRequest,
    ILLMClient,
    TASK_CONSOLIDATE_SUMMARIES,
    TASK_EXTRACT_INSIGHTS,
    TASK_EXTRACT_PATTERNS,
    TASK_EXTRACT_VISION,
    TASK_GENERATE_SUMMARY,
)
from wisdom.core.results import Err, Ok, Result
from wisdom.inference.prompts import build_user_prompt, load_templates
from wisdom.memory.models import utc_now

logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

PATTERN_WINDOW = 10
INSIGHT_WINDOW = 20
SUMMARY_WINDOW = 30
VISION_WINDOW = 30
MIN_INSIGHT_CONFIDENCE = 0.6
MIN_PATTERN_SOURCE_LENGTH = 10

# A session must mention one of these before vision extraction runs
VISION_KEYWORDS = (
    "vision of the future",
    "future self",
    "imagine your future",
    "envisioning",
    "future vision",
    "how will you live",
    "your future life",
    "future you",
    "years from now",
)

MAX_TOKENS = {
    TASK_EXTRACT_PATTERNS: 2000,
    TASK_EXTRACT_INSIGHTS: 1000,
    TASK_GENERATE_SUMMARY: 200,
    TASK_CONSOLIDATE_SUMMARIES: 300,
    TASK_EXTRACT_VISION: 1500,
}


def summary_fallback(user_count: int) -> str:
    return (
        f"Therapeutic session with {user_count} user responses, exploring "
        f"personal insights and emotional patterns."
    )


def consolidation_fallback(session_count: int) -> str:
    return (
        f"Consolidated analysis of {session_count} therapy sessions showing "
        f"ongoing therapeutic progress and recurring themes in personal development."
    )


def build_transcript(messages: List[Dict[str, str]], limit: int) -> str:
    """Speaker-labelled transcript of the last ``limit`` messages with text."""
    lines = []
    for msg in messages:
        content = (msg.get("content") or msg.get("text") or "").strip()
        if not content:
            continue
        speaker = "User" if msg.get("role") == "user" else "Therapist"
        lines.append(f"{speaker}: {content}")
    return "\n\n".join(lines[-limit:])


def parse_json_object(reply: str) -> Optional[Dict[str, Any]]:
    """First ``{...}`` span of a model reply as a dict, or None."""
    match = _JSON_OBJECT.search(reply or "")
    if not match:
        return None
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.warning(f"Could not parse model JSON: {e}")
        return None
    return parsed if isinstance(parsed, dict) else None


def parse_insights(reply: str) -> List[Dict[str, Any]]:
    """Pull the ``insights`` list out of a model reply, or [] if unparseable."""
    insights = (parse_json_object(reply) or {}).get("insights")
    return insights if isinstance(insights, list) else []


def _clamp_confidence(value: Any, default: float = 0.5) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not value:
        return default
    return min(1.0, max(0.0, float(value)))


def _source_message(pattern: Dict[str, Any], user_messages: List[Dict[str, str]]) -> Dict[str, str]:
    """User message quoted by a pattern, else the first user message."""
    quotes = [q for q in (pattern.get("originalThought"), pattern.get("sourceMessage"))
              if isinstance(q, str) and q]
    for msg in user_messages:
        content = msg.get("content") or ""
        if any(quote in content for quote in quotes):
            return msg
    return user_messages[0]


def to_thought_patterns(
    raw_patterns: List[Any],
    user_messages: List[Dict[str, str]],
    session_id: Optional[str]
) -> List[Dict[str, Any]]:
    """Normalize model output into thought-pattern records."""
    session_id = session_id or "session"
    stamp = int(time.time() * 1000)
    timestamp = utc_now().isoformat()

    patterns = []
    for index, raw in enumerate(raw_patterns):
        if not isinstance(raw, dict):
            continue
        distortions = raw.get("distortionTypes")
        source = _source_message(raw, user_messages)
        patterns.append({
            "id": f"pattern_{session_id}_{stamp}_{index}",
            "originalThought": raw.get("originalThought") or "",
            "distortionTypes": distortions if isinstance(distortions, list) else [],
            "reframedThought": raw.get("reframedThought") or "",
            "confidence": _clamp_confidence(raw.get("confidence")),
            "extractedFrom": {
                "messageId": source.get("id", ""),
                "sessionId": session_id,
            },
            "timestamp": timestamp,
            "context": raw.get("context") or "",
        })
    return patterns


def _confident(item: Any) -> bool:
    if not isinstance(item, dict):
        return False
    confidence = item.get("confidence")
    return (
        isinstance(confidence, (int, float))
        and not isinstance(confidence, bool)
        and confidence >= MIN_INSIGHT_CONFIDENCE
    )


class ExtractionEngine(ILLMClient):
    """
    Runs the extraction tasks against a chat-completion client.

    Summaries and consolidations always produce text: when the model fails
    or answers with nothing, a generic fallback sentence is returned.
    Insight and pattern extraction return ``Err`` only when the model cannot
    be reached; an unparseable reply simply yields an empty list. Vision
    extraction yields ``Ok(None)`` whenever no vision could be drawn out.
    """

    def __init__(self, chat_client):
        self.chat_client = chat_client
        self.templates = load_templates()

    async def _ask(self, task: str, body: str) -> str:
        return await self.chat_client.complete(
            system_prompt=self.templates[task],
            user_prompt=build_user_prompt(task, body),
            max_tokens=MAX_TOKENS[task]
        )

    async def run(self, request: ExtractionRequest) -> Result:
        if request.task == TASK_EXTRACT_PATTERNS:
            return await self.extract_patterns(request.messages, request.session_id)
        if request.task == TASK_EXTRACT_VISION:
            return await self.extract_vision_insights(request.messages)
        if request.task == TASK_EXTRACT_INSIGHTS:
            return await self.extract_insights(request.messages)
        if request.task == TASK_GENERATE_SUMMARY:
            return await self.generate_summary(request.messages)
        return await self.consolidate_summaries(request.summaries)

    async def extract_insights(self, messages: List[Dict[str, str]]) -> Result:
        transcript = build_transcript(messages, INSIGHT_WINDOW)
        if not transcript:
            return Ok([])

        try:
            reply = await self._ask(TASK_EXTRACT_INSIGHTS, transcript)
        except Exception as e:
            logger.error(f"Insight extraction call failed: {e}", exc_info=True)
            return Err(f"chat model unavailable: {e}")

        insights = [item for item in parse_insights(reply) if _confident(item)]
        logger.info(f"Model proposed {len(insights)} confident insights")
        return Ok(insights)

    async def generate_summary(self, messages: List[Dict[str, str]]) -> Result:
        user_count = sum(1 for msg in messages if msg.get("role") == "user")
        transcript = build_transcript(messages, SUMMARY_WINDOW)
        if not transcript:
            return Ok(summary_fallback(user_count))

        try:
            reply = await self._ask(TASK_GENERATE_SUMMARY, transcript)
        except Exception as e:
            logger.error(f"Summary call failed: {e}", exc_info=True)
            reply = ""

        return Ok(reply.strip() or summary_fallback(user_count))

    async def consolidate_summaries(self, summaries: List[str]) -> Result:
        if not summaries:
            return Err("no summaries to consolidate")

        body = "\n\n".join(
            f"Session {index}: {text}" for index, text in enumerate(summaries, start=1)
        )
        try:
            reply = await self._ask(TASK_CONSOLIDATE_SUMMARIES, body)
        except Exception as e:
            logger.error(f"Consolidation call failed: {e}", exc_info=True)
            reply = ""

        return Ok(reply.strip() or consolidation_fallback(len(summaries)))

    async def extract_patterns(
        self,
        messages: List[Dict[str, str]],
        session_id: Optional[str] = None
    ) -> Result:
        user_messages = [
            msg for msg in messages
            if msg.get("role") == "user"
            and len((msg.get("content") or "").strip()) > MIN_PATTERN_SOURCE_LENGTH
        ]
        if not user_messages:
            return Ok([])

        transcript = build_transcript(messages, PATTERN_WINDOW)
        try:
            reply = await self._ask(TASK_EXTRACT_PATTERNS, transcript)
        except Exception as e:
            logger.error(f"Pattern extraction call failed: {e}", exc_info=True)
            return Err(f"chat model unavailable: {e}")

        raw = (parse_json_object(reply) or {}).get("thoughtPatterns")
        patterns = to_thought_patterns(
            raw if isinstance(raw, list) else [], user_messages, session_id
        )
        logger.info(f"Model proposed {len(patterns)} thought patterns")
        return Ok(patterns)

    async def extract_vision_insights(self, messages: List[Dict[str, str]]) -> Result:
        transcript = build_transcript(messages, VISION_WINDOW)
        if not transcript:
            return Ok(None)

        lowered = transcript.lower()
        if not any(keyword in lowered for keyword in VISION_KEYWORDS):
            logger.debug("No future-vision discussion found, skipping")
            return Ok(None)

        try:
            reply = await self._ask(TASK_EXTRACT_VISION, transcript)
        except Exception as e:
            logger.error(f"Vision extraction call failed: {e}", exc_info=True)
            return Ok(None)

        vision = parse_json_object(reply)
        if not vision or not vision.get("coreQualities"):
            logger.warning("Vision reply had no core qualities")
            return Ok(None)
        return Ok(vision)
