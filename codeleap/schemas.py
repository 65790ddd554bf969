# codeleap/schemas.py

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# ==== CANONICAL (closed enums) ====
class Language(str, Enum):
    JAVASCRIPT = "javascript"
    HTML = "html"
    CSS = "css"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


# ==== DISPLAY LABELS ====
LANGUAGE_LABELS = {
    Language.JAVASCRIPT: "JavaScript",
    Language.HTML: "HTML",
    Language.CSS: "CSS",
}

# ==== ALIASES (accept loose input from forms/URLs) ====
LANGUAGE_ALIASES = {
    "javascript": Language.JAVASCRIPT,
    "js": Language.JAVASCRIPT,
    "ecmascript": Language.JAVASCRIPT,
    "es6": Language.JAVASCRIPT,
    "node": Language.JAVASCRIPT,

    "html": Language.HTML,
    "html5": Language.HTML,
    "markup": Language.HTML,

    "css": Language.CSS,
    "css3": Language.CSS,
    "stylesheet": Language.CSS,
}

DIFFICULTY_ALIASES = {
    "easy": Difficulty.EASY,
    "beginner": Difficulty.EASY,
    "simple": Difficulty.EASY,

    "medium": Difficulty.MEDIUM,
    "intermediate": Difficulty.MEDIUM,
    "normal": Difficulty.MEDIUM,

    "hard": Difficulty.HARD,
    "advanced": Difficulty.HARD,
    "expert": Difficulty.HARD,
}


def normalize_language(v) -> Language:
    if isinstance(v, Language):
        return v
    key = str(v or "").strip().lower()
    if key in LANGUAGE_ALIASES:
        return LANGUAGE_ALIASES[key]
    raise ValueError(f"language must be one of: {[m.value for m in Language]}")


def normalize_difficulty(v) -> Difficulty:
    if isinstance(v, Difficulty):
        return v
    key = str(v or "").strip().lower()
    if key in DIFFICULTY_ALIASES:
        return DIFFICULTY_ALIASES[key]
    raise ValueError(f"difficulty must be one of: {[m.value for m in Difficulty]}")


def language_label(language: Language) -> str:
    return LANGUAGE_LABELS.get(language, str(language))


class CamelModel(BaseModel):
    # Wire format is camelCase (matches what the browser persists), attributes stay snake_case.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Challenge(CamelModel):
    id: str = Field(frozen=True)
    problem: str
    code: str
    code_explanation: str
    language: Language = Field(frozen=True)
    difficulty: Difficulty = Field(frozen=True)
    is_correct: bool = Field(frozen=True)
    explanation: str = Field(frozen=True)
    additional_info: Optional[str] = None
    user_answer: Optional[bool] = None
    timestamp: int

    @property
    def answered(self) -> bool:
        return self.user_answer is not None

    @property
    def answered_correctly(self) -> Optional[bool]:
        if self.user_answer is None:
            return None
        return self.user_answer == self.is_correct

    def record_answer(self, answer: bool) -> bool:
        """Store the user's verdict. The first answer is final; later calls return False."""
        if self.user_answer is not None:
            return False
        self.user_answer = bool(answer)
        return True

    def code_preview(self, limit: int = 100) -> str:
        if len(self.code) > limit:
            return self.code[:limit] + "..."
        return self.code

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class GenerateRequest(CamelModel):
    difficulty: Difficulty = Field(..., description="easy | medium | hard (aliases accepted).")
    language: Language = Field(..., description="javascript | html | css (aliases accepted).")
    api_key: Optional[str] = Field(None, description="Provider API key; required for the AI path.")

    @field_validator("difficulty", mode="before")
    @classmethod
    def validate_difficulty(cls, v):
        return normalize_difficulty(v)

    @field_validator("language", mode="before")
    @classmethod
    def validate_language(cls, v):
        return normalize_language(v)


class SessionGenerateRequest(CamelModel):
    difficulty: Difficulty = Difficulty.EASY
    language: Language = Language.JAVASCRIPT

    @field_validator("difficulty", mode="before")
    @classmethod
    def validate_difficulty(cls, v):
        return normalize_difficulty(v)

    @field_validator("language", mode="before")
    @classmethod
    def validate_language(cls, v):
        return normalize_language(v)


class GenerateResponse(CamelModel):
    challenge: Challenge
    fallback_used: bool = False
    is_rate_limit: bool = False
    notice: Optional[str] = None
    generation_ms: Optional[int] = None

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class ApiKeyRequest(CamelModel):
    api_key: str = ""


class ValidateKeyResponse(CamelModel):
    valid: bool
    error: Optional[str] = None


class FormatRequest(CamelModel):
    code: str
    language: Language

    @field_validator("language", mode="before")
    @classmethod
    def validate_language(cls, v):
        return normalize_language(v)


class PreviewRequest(CamelModel):
    code: str


class AnswerRequest(CamelModel):
    answer: bool


class HistoryStats(CamelModel):
    total: int
    answered: int
    correct: int
    incorrect: int
    accuracy: int
    by_difficulty: Dict[str, int]
    by_language: Dict[str, int]


class HistoryPage(CamelModel):
    count: int
    challenges: List[Challenge]
