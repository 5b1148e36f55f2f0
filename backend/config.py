import os
from dotenv import load_dotenv

load_dotenv()

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "").strip()
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini").strip()

MAX_IMAGE_MB = float(os.getenv("GIFT_MAX_IMAGE_MB", "10"))
MAX_IMAGE_BYTES = int(MAX_IMAGE_MB * 1024 * 1024)

RELATIONSHIP_OPTIONS = ["Partner", "Friend", "Parent", "Sibling", "Colleague", "Child", "Other"]
DEFAULT_RELATIONSHIP = "Partner"

BUDGET_MIN = 5
BUDGET_MAX = 500
BUDGET_STEP = 5
DEFAULT_BUDGET = 100

LOADING_TEXTS = [
    "Analyzing Context...",
    "Synthesizing Vibe...",
    "Curating Luxuries...",
]
LOADING_INTERVAL_S = 1.5

MIN_GIFTS = 3
MAX_GIFTS = 5
