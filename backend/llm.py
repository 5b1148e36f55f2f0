# backend/llm.py

import logging
from typing import Optional

from openai import OpenAI

from .config import OPENAI_API_KEY, OPENAI_MODEL
from .exceptions import MissingAPIKeyError

logger = logging.getLogger(__name__)

_client: Optional[OpenAI] = None


def _resolve_api_key() -> str:
    # Env first, then Streamlit secrets if running under Streamlit
    key = OPENAI_API_KEY
    try:
        import streamlit as st
        key = st.secrets.get("OPENAI_API_KEY") or key
    except Exception as e:
        logger.debug("No Streamlit secrets available: %s", e)

    if not key:
        raise MissingAPIKeyError(
            "OPENAI_API_KEY not set. Add it to .streamlit/secrets.toml "
            "or set it as an environment variable."
        )
    return key


def get_client() -> OpenAI:
    global _client
    if _client is None:
        _client = OpenAI(api_key=_resolve_api_key())
    return _client


def llm_json(system: str, user: str, image_url: Optional[str] = None) -> str:
    """
    Gets a JSON object response as a string.
    When image_url (a data: URI or https URL) is given it is sent alongside the text.
    """
    if image_url:
        content = [
            {"type": "input_text", "text": user},
            {"type": "input_image", "image_url": image_url},
        ]
    else:
        content = user

    resp = get_client().responses.create(
        model=OPENAI_MODEL,
        input=[
            {"role": "system", "content": system},
            {"role": "user", "content": content},
        ],
        text={"format": {"type": "json_object"}},
    )
    return resp.output_text
