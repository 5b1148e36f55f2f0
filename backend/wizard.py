"""
Gift wizard state machine.

Drives one session through Context (1) -> Clues (2) -> Results (3), validates
each submission and calls the analysis backend at most once at a time.
"""
import logging
import threading
import time
from typing import Callable, List, Optional

from .budget import clamp_budget, format_budget
from .config import LOADING_TEXTS, LOADING_INTERVAL_S, RELATIONSHIP_OPTIONS
from .exceptions import AnalysisError, ValidationError
from .analyzer import analyze
from .images import check_image, to_data_uri
from .models import AnalysisResult, ImageUpload, QuizAnswers, SessionState, WizardStep

logger = logging.getLogger(__name__)

PHOTO_REQUIRED = "A photo is required for visual analysis."
QUIZ_INCOMPLETE = "Please complete all fields in the profile questionnaire."
ANALYSIS_FALLBACK = "An error occurred during analysis. Please try again."
BUSY = "Please wait for the current analysis to finish."

QUIZ_FIELDS = ("activity", "complaint", "vibe")

Analyzer = Callable[..., AnalysisResult]


class LoadingTicker:
    """
    Cycles a status phrase while an analysis is running.
    The phrase advances every `interval` seconds and wraps around.
    """

    def __init__(self, phrases: Optional[List[str]] = None, interval: float = LOADING_INTERVAL_S,
                 clock: Callable[[], float] = time.monotonic):
        self.phrases = list(phrases or LOADING_TEXTS)
        self.interval = interval
        self._clock = clock
        self._started_at: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._started_at is not None

    def start(self) -> None:
        self._started_at = self._clock()

    def stop(self) -> None:
        self._started_at = None

    def index(self) -> int:
        if self._started_at is None:
            return 0
        elapsed = max(0.0, self._clock() - self._started_at)
        return int(elapsed // self.interval) % len(self.phrases)

    def message(self) -> str:
        return self.phrases[self.index()]


class GiftWizard:
    """
    Owns one SessionState and every transition on it.

    Submissions are single-flight: while `state.loading` is true, submit() is a
    no-op. Each submission and each image selection is tagged with a sequence
    number so completions that arrive after a reset or a newer selection are
    dropped.
    """

    def __init__(self, analyzer: Optional[Analyzer] = None, clock: Callable[[], float] = time.monotonic):
        self.state = SessionState()
        self.ticker = LoadingTicker(clock=clock)
        self._analyzer = analyzer or analyze
        self._lock = threading.Lock()
        self._generation = 0
        self._image_seq = 0
        self._pending_image: Optional[ImageUpload] = None

    # ---------- step 1: context ----------

    def set_relationship(self, relationship: str) -> None:
        if relationship not in RELATIONSHIP_OPTIONS:
            raise ValidationError(f"Unknown relationship: {relationship}")
        self.state.relationship = relationship

    def set_budget(self, value) -> int:
        self.state.budget = clamp_budget(value)
        return self.state.budget

    @property
    def budget_label(self) -> str:
        return format_budget(self.state.budget)

    def advance(self) -> None:
        if self.state.step == WizardStep.CONTEXT:
            self.state.step = WizardStep.CLUES

    # ---------- step 2: clues ----------

    def back(self) -> None:
        if self.state.step != WizardStep.CLUES or self.state.loading:
            return
        self.state.step = WizardStep.CONTEXT
        self.state.error = None

    def set_mode(self, mode: str) -> bool:
        if mode not in ("photo", "quiz"):
            raise ValidationError(f"Unknown input mode: {mode}")
        if self.state.step != WizardStep.CLUES or self.state.loading:
            return False
        self.state.mode = mode
        return True

    def set_quiz_answer(self, field: str, value: str) -> None:
        if field not in QUIZ_FIELDS:
            raise ValueError(f"Unknown quiz field: {field}")
        if self.state.loading:
            return
        setattr(self.state.quiz, field, value or "")

    def set_notes(self, notes: str) -> None:
        if self.state.loading:
            return
        self.state.notes = notes or ""

    def select_image(self, filename: str, mime_type: str, data: bytes) -> int:
        """
        First half of image ingestion. Returns the token to hand to complete_image().
        A rejected file leaves the stored image alone.
        """
        if self.state.loading:
            raise ValidationError(BUSY)
        try:
            check_image(mime_type, data)
        except ValidationError as e:
            self.state.error = str(e)
            logger.info("Rejected upload %r (%s)", filename, mime_type)
            raise

        self._image_seq += 1
        self._pending_image = ImageUpload(filename=filename or "", mime_type=mime_type, data=data)
        return self._image_seq

    def complete_image(self, token: int, preview: str) -> bool:
        """Second half of image ingestion. Stale tokens are ignored."""
        if token != self._image_seq or self._pending_image is None:
            logger.debug("Discarding stale image preview (token=%s, current=%s)", token, self._image_seq)
            return False
        self.state.image = self._pending_image.model_copy(update={"preview": preview})
        self._pending_image = None
        self.state.error = None
        return True

    def ingest_image(self, filename: str, mime_type: str, data: bytes) -> ImageUpload:
        token = self.select_image(filename, mime_type, data)
        self.complete_image(token, to_data_uri(mime_type, data))
        return self.state.image

    @property
    def image_pending(self) -> bool:
        return self._pending_image is not None

    def payload(self):
        if self.state.mode == "photo":
            return self.state.image
        return self.state.quiz

    def validate(self) -> None:
        s = self.state
        if s.mode == "photo":
            if s.image is None or not s.image.preview or self.image_pending:
                raise ValidationError(PHOTO_REQUIRED)
        elif not s.quiz.is_complete():
            raise ValidationError(QUIZ_INCOMPLETE)

    def _begin_submission(self) -> Optional[int]:
        with self._lock:
            if self.state.loading or self.state.step != WizardStep.CLUES:
                return None
            self.state.error = None
            try:
                self.validate()
            except ValidationError as e:
                self.state.error = str(e)
                logger.info("Submission blocked: %s", e)
                return None
            self._generation += 1
            self.state.loading = True
            self.state.result = None
            self.ticker.start()
            return self._generation

    def _finish_submission(self, generation: int, result: Optional[AnalysisResult], error: Optional[str]) -> bool:
        with self._lock:
            if generation != self._generation:
                logger.info("Dropping analysis completion from a previous session (gen=%s)", generation)
                return False
            self.state.loading = False
            self.ticker.stop()
            if result is not None:
                self.state.result = result
                self.state.step = WizardStep.RESULTS
            else:
                self.state.error = error or ANALYSIS_FALLBACK
            return True

    def submit(self) -> Optional[AnalysisResult]:
        """
        Validates and runs one analysis. Blocks until the backend answers.
        Returns the result on success, None otherwise (see state.error).
        """
        generation = self._begin_submission()
        if generation is None:
            return None

        s = self.state
        logger.info("Submitting %s analysis for %s (budget %s)", s.mode, s.relationship, self.budget_label)
        result: Optional[AnalysisResult] = None
        error: Optional[str] = None
        try:
            result = self._analyzer(s.mode, self.payload(), s.relationship, s.budget, s.notes)
        except AnalysisError as e:
            logger.warning("Analysis failed: %s", e)
            error = str(e) or ANALYSIS_FALLBACK
        except Exception:
            logger.exception("Unexpected analysis failure")
            error = ANALYSIS_FALLBACK

        if result is None and error is None:
            error = ANALYSIS_FALLBACK

        if not self._finish_submission(generation, result, error):
            return None
        return result

    def loading_message(self) -> str:
        return self.ticker.message()

    # ---------- step 3: results ----------

    def reset(self) -> None:
        """Starts a new consultation. Relationship, budget and mode are kept."""
        with self._lock:
            self._generation += 1
            self._image_seq += 1
            self._pending_image = None
            self.ticker.stop()
            s = self.state
            s.step = WizardStep.CONTEXT
            s.image = None
            s.quiz = QuizAnswers()
            s.notes = ""
            s.error = None
            s.result = None
            s.loading = False
