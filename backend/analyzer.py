import json
import logging
from typing import Any, Mapping, Optional, Union
from urllib.parse import quote_plus

from openai import APIConnectionError, OpenAIError, RateLimitError
from pydantic import ValidationError as SchemaError

from .budget import format_budget
from .config import BUDGET_MAX, MAX_GIFTS, MIN_GIFTS
from .exceptions import AnalysisError, MissingAPIKeyError
from .images import to_data_uri
from .llm import llm_json
from .models import AnalysisResult, ImageUpload, QuizAnswers
from .prompts import SYSTEM_GIFT_CURATOR, RESPONSE_SCHEMA, PHOTO_ANALYSIS, QUIZ_ANALYSIS, CONTEXT_BLOCK

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "An error occurred during analysis. Please try again."

Payload = Union[ImageUpload, str, QuizAnswers, Mapping[str, str]]


def amazon_search_link(item_name: str, budget: Optional[int] = None) -> str:
    q = item_name.strip()
    if budget and budget < BUDGET_MAX:
        q = f"{q} under {int(budget)} dollars"
    return f"https://www.amazon.com/s?k={quote_plus(q)}"


def _is_http_url(url: Any) -> bool:
    if not isinstance(url, str):
        return False
    u = url.strip()
    return u.startswith("http://") or u.startswith("https://")


def _image_url(payload: Payload) -> str:
    if isinstance(payload, ImageUpload):
        return payload.preview or to_data_uri(payload.mime_type, payload.data)
    if isinstance(payload, str) and payload.strip():
        return payload.strip()
    raise AnalysisError("Photo analysis needs an image.")


def _quiz(payload: Payload) -> QuizAnswers:
    if isinstance(payload, QuizAnswers):
        return payload
    if isinstance(payload, Mapping):
        return QuizAnswers(**{k: str(payload.get(k) or "") for k in ("activity", "complaint", "vibe")})
    raise AnalysisError("Profile analysis needs questionnaire answers.")


def build_prompt(mode: str, payload: Payload, relationship: str, budget: int, notes: str) -> str:
    if mode == "photo":
        task = PHOTO_ANALYSIS
    elif mode == "quiz":
        q = _quiz(payload)
        task = QUIZ_ANALYSIS.format(activity=q.activity.strip(), complaint=q.complaint.strip(), vibe=q.vibe.strip())
    else:
        raise AnalysisError(f"Unknown input mode: {mode}")

    context = CONTEXT_BLOCK.format(
        relationship=relationship,
        budget_label=format_budget(budget),
        notes=(notes or "").strip() or "none",
    )
    schema = RESPONSE_SCHEMA.format(min_gifts=MIN_GIFTS, max_gifts=MAX_GIFTS)
    return f"{task}\n{context}\n{schema}".strip()


def parse_result(raw: str, budget: Optional[int] = None) -> AnalysisResult:
    """
    Validates the model's JSON against AnalysisResult.
    Gifts keep the order the model gave them; links that are not http(s) are
    replaced with an Amazon search for the item.
    """
    try:
        obj = json.loads(raw or "")
    except json.JSONDecodeError as e:
        raise AnalysisError("The gift curator returned an unreadable answer. Please try again.") from e

    if not isinstance(obj, dict):
        raise AnalysisError("The gift curator returned an unexpected answer. Please try again.")

    gifts = obj.get("gifts")
    if isinstance(gifts, list):
        for g in gifts:
            if isinstance(g, dict) and not _is_http_url(g.get("amazon_link")):
                g["amazon_link"] = amazon_search_link(str(g.get("item_name") or ""), budget)

    try:
        result = AnalysisResult.model_validate(obj)
    except SchemaError as e:
        logger.warning("Model answer failed validation: %s", e)
        raise AnalysisError("The gift curator returned an incomplete answer. Please try again.") from e

    if not result.gifts:
        raise AnalysisError("No gift ideas came back. Please try again.")

    result.gifts = result.gifts[:MAX_GIFTS]
    return result


def analyze(mode: str, payload: Payload, relationship: str, budget: int, notes: str = "") -> AnalysisResult:
    """
    One round trip to the model. Backend, transport and parsing failures
    surface as AnalysisError.
    """
    user = build_prompt(mode, payload, relationship, budget, notes)
    image_url = _image_url(payload) if mode == "photo" else None

    logger.info("Requesting gift analysis (mode=%s, relationship=%s, budget=%s)", mode, relationship, budget)
    try:
        raw = llm_json(SYSTEM_GIFT_CURATOR, user, image_url=image_url)
    except MissingAPIKeyError as e:
        raise AnalysisError(str(e)) from e
    except APIConnectionError as e:
        raise AnalysisError("Could not reach the analysis service. Check your connection and try again.") from e
    except RateLimitError as e:
        raise AnalysisError("The analysis service is busy. Please try again in a moment.") from e
    except OpenAIError as e:
        logger.error("OpenAI request failed: %s", e)
        raise AnalysisError(GENERIC_FAILURE) from e

    result = parse_result(raw, budget)
    logger.info("Analysis returned persona %r with %d gifts", result.persona, len(result.gifts))
    return result
