import pytest

from backend.models import AnalysisResult, GiftSuggestion
from backend.wizard import GiftWizard


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cozy_result():
    return AnalysisResult(
        persona="The Cozy Gamer",
        gifts=[
            GiftSuggestion(
                item_name="Lumbar Pillow",
                category="Missing Essential",
                reasoning="Long sessions and back pain.",
                amazon_link="https://www.amazon.com/s?k=lumbar+pillow",
            )
        ],
    )


@pytest.fixture
def png_bytes():
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def make_wizard(clock):
    def _make(analyzer):
        return GiftWizard(analyzer=analyzer, clock=clock)
    return _make
