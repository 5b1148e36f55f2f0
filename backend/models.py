from enum import IntEnum
from pydantic import BaseModel, Field
from typing import List, Optional, Literal


Relationship = Literal["Partner", "Friend", "Parent", "Sibling", "Colleague", "Child", "Other"]
InputMode = Literal["photo", "quiz"]
GiftCategory = Literal["Interest Enhancer", "Missing Essential"]


class WizardStep(IntEnum):
    CONTEXT = 1
    CLUES = 2
    RESULTS = 3


class QuizAnswers(BaseModel):
    activity: str = Field("", description="What activity consumes 4+ hours of their day")
    complaint: str = Field("", description="A specific problem or inconvenience they face")
    vibe: str = Field("", description="Their aesthetic in 3 words")

    def is_complete(self) -> bool:
        return all(v.strip() for v in (self.activity, self.complaint, self.vibe))


class ImageUpload(BaseModel):
    filename: str = ""
    mime_type: str
    data: bytes = Field(repr=False)
    preview: Optional[str] = Field(None, repr=False, description="data: URI derived from data")


class GiftSuggestion(BaseModel):
    item_name: str = Field(..., min_length=1)
    category: GiftCategory
    reasoning: str = ""
    amazon_link: str = ""


class AnalysisResult(BaseModel):
    persona: str = Field(..., min_length=1)
    gifts: List[GiftSuggestion]


class SessionState(BaseModel):
    step: WizardStep = WizardStep.CONTEXT
    mode: InputMode = "photo"
    relationship: Relationship = "Partner"
    budget: int = 100
    image: Optional[ImageUpload] = None
    quiz: QuizAnswers = Field(default_factory=QuizAnswers)
    notes: str = ""
    loading: bool = False
    error: Optional[str] = None
    result: Optional[AnalysisResult] = None
