"""HTTP front for the extraction engine.

Serves the same request/response shape as the hosted function, so the
remote client can point at either one.
"""

import json
import logging
import time
from typing import Any, Dict, List, Optional, Tuple

from aiohttp import web

from wisdom.core.interfaces import (
    EXTRACTION_TASKS,
    ExtractionRequest,
    ILLMClient,
    TASK_CONSOLIDATE_SUMMARIES,
    TASK_EXTRACT_PATTERNS,
    TASK_EXTRACT_VISION,
)
from wisdom.core.results import Err
from wisdom.inference.remote_client import RESPONSE_FIELDS

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type, x-requested-with",
    "Access-Control-Allow-Methods": "POST, OPTIONS, GET",
    "Access-Control-Max-Age": "86400",
}

ENGINE_KEY = web.AppKey("engine", ILLMClient)


def normalize_messages(raw: Any) -> Optional[List[Dict[str, str]]]:
    """Accept role/content or type/text messages; return role/content (plus id)."""
    if not isinstance(raw, list):
        return None

    messages = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        if "role" in item:
            role = "user" if item["role"] == "user" else "assistant"
        else:
            role = "user" if item.get("type") == "user" else "assistant"
        content = item.get("content") or item.get("text") or ""
        message = {"role": role, "content": str(content)}
        if item.get("id") is not None:
            message["id"] = str(item["id"])
        messages.append(message)
    return messages


async def dispatch(engine: ILLMClient, body: Dict[str, Any]) -> Tuple[int, Dict[str, Any]]:
    """Run one action and return ``(status, response body)``."""
    started = time.perf_counter()
    action = body.get("action", TASK_EXTRACT_PATTERNS)

    if action not in EXTRACTION_TASKS:
        return 400, {"success": False, "error": f"Unknown action: {action}"}

    messages = normalize_messages(body.get("messages"))
    summaries = body.get("summaries") or []

    if action == TASK_CONSOLIDATE_SUMMARIES:
        if not isinstance(summaries, list) or not summaries:
            return 400, {"success": False, "error": "Summaries array is required for consolidation"}
    elif messages is None:
        return 400, {"success": False, "error": "Messages array is required for this action"}

    request = ExtractionRequest(
        task=action,
        messages=messages or [],
        summaries=[str(s) for s in summaries],
        session_id=body.get("sessionId"),
    )
    result = await engine.run(request)
    elapsed = round((time.perf_counter() - started) * 1000)

    if isinstance(result, Err):
        logger.error(f"{action} failed: {result.reason}")
        return 500, {"success": False, "error": "Failed to extract insights", "processingTime": elapsed}

    # A vision pass that found nothing is still a 200
    success = result.data is not None if action == TASK_EXTRACT_VISION else True
    return 200, {
        "success": success,
        RESPONSE_FIELDS[action]: result.data,
        "processingTime": elapsed,
    }


async def handle_options(request: web.Request) -> web.Response:
    return web.Response(text="ok", headers=CORS_HEADERS)


async def handle_extract(request: web.Request) -> web.Response:
    try:
        body = await request.json()
    except json.JSONDecodeError:
        body = None

    if not isinstance(body, dict):
        status, payload = 400, {"success": False, "error": "Request body must be a JSON object"}
    else:
        try:
            status, payload = await dispatch(request.app[ENGINE_KEY], body)
        except Exception as e:
            logger.error(f"Insight extraction error: {e}", exc_info=True)
            status, payload = 500, {"success": False, "error": "Failed to extract insights"}

    return web.json_response(payload, status=status, headers=CORS_HEADERS)


def create_app(engine: ILLMClient) -> web.Application:
    """Build the aiohttp application serving the extraction function."""
    app = web.Application()
    app[ENGINE_KEY] = engine
    for path in ("/", "/functions/v1/extract-insights"):
        app.router.add_post(path, handle_extract)
        app.router.add_route("OPTIONS", path, handle_options)
    return app
