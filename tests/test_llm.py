from unittest.mock import MagicMock, patch

import pytest

from backend import llm
from backend.exceptions import MissingAPIKeyError


@pytest.fixture
def fake_client(monkeypatch):
    client = MagicMock()
    client.responses.create.return_value.output_text = '{"persona": "x", "gifts": []}'
    monkeypatch.setattr(llm, "_client", client)
    return client


def test_text_only_request(fake_client):
    out = llm.llm_json("sys", "hello")

    assert out == '{"persona": "x", "gifts": []}'
    kwargs = fake_client.responses.create.call_args.kwargs
    assert kwargs["text"] == {"format": {"type": "json_object"}}
    assert kwargs["input"][1] == {"role": "user", "content": "hello"}


def test_image_request(fake_client):
    llm.llm_json("sys", "look", image_url="data:image/png;base64,AAA")

    content = fake_client.responses.create.call_args.kwargs["input"][1]["content"]
    assert content[0] == {"type": "input_text", "text": "look"}
    assert content[1] == {"type": "input_image", "image_url": "data:image/png;base64,AAA"}


def test_missing_key_raises(monkeypatch):
    monkeypatch.setattr(llm, "_client", None)
    monkeypatch.setattr(llm, "OPENAI_API_KEY", "")
    with patch("streamlit.secrets") as secrets:
        secrets.get.return_value = None
        with pytest.raises(MissingAPIKeyError, match="OPENAI_API_KEY"):
            llm.get_client()
