"""
Canonical client-side types.

Remote payloads and older local-storage records come in several shapes
(options as plain strings or as objects with ``text``/``choice``, correctness
as ``is_correct``/``isCorrect``/``correct`` or as a ``correct`` index list on
the question). They are adapted here, once, and nothing downstream looks at
the raw shapes.
"""
import logging
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, List, Optional

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

# Sources hand out ids as ints or strings; they are compared as strings.
Identifier = Annotated[str, BeforeValidator(lambda v: str(v))]


class QuestionType(str, Enum):
    SINGLE = "single"
    MULTI = "multi"


class Location(str, Enum):
    REMOTE = "remote"
    LOCAL = "local"


class Option(BaseModel):
    id: Optional[Identifier] = None
    question_id: Optional[Identifier] = None
    text: str = ""
    is_correct: bool = False


class Question(BaseModel):
    id: Optional[Identifier] = None
    quiz_id: Optional[Identifier] = None
    text: str = ""
    type: QuestionType = QuestionType.SINGLE
    options: List[Option] = Field(default_factory=list)

    def for_display(self) -> dict:
        """Rendering view of the question; correctness flags are left out."""
        return {"id": self.id, "text": self.text, "type": self.type.value,
                "options": [o.text for o in self.options]}


class DraftQuestion(BaseModel):
    """A question as a teacher authors it: option texts plus the indices of the correct ones."""
    text: str = ""
    type: QuestionType = QuestionType.SINGLE
    options: List[str] = Field(default_factory=list)
    correct: List[int] = Field(default_factory=list)

    def to_question(self) -> Question:
        return Question(text=self.text, type=self.type,
                        options=[Option(text=t, is_correct=i in self.correct) for i, t in enumerate(self.options)])

    @classmethod
    def from_question(cls, question: Question) -> "DraftQuestion":
        return cls(text=question.text, type=question.type,
                   options=[o.text for o in question.options],
                   correct=[i for i, o in enumerate(question.options) if o.is_correct])


class QuizSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Identifier
    title: str = ""
    description: str = ""
    category: str = ""
    published: bool = False
    created_by: Optional[str] = Field(default=None, validation_alias=AliasChoices("created_by", "createdBy"))
    location: Location = Location.REMOTE
    migrated: bool = True
    last_updated: Optional[str] = Field(default=None, validation_alias=AliasChoices("last_updated", "lastUpdated"))
    question_count: Optional[int] = None


class QuizDraft(BaseModel):
    """A whole authored aggregate; also the record shape of the local draft store."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[Identifier] = None
    title: str = ""
    description: str = ""
    category: str = ""
    created_by: Optional[str] = Field(default=None, validation_alias=AliasChoices("created_by", "createdBy"))
    published: bool = False
    location: Location = Location.LOCAL
    migrated: bool = False
    last_updated: Optional[str] = Field(default=None, validation_alias=AliasChoices("last_updated", "lastUpdated"))
    questions: List[DraftQuestion] = Field(default_factory=list)

    def summary(self) -> QuizSummary:
        return QuizSummary(id=self.id or "", title=self.title, description=self.description,
                           category=self.category, published=self.published, created_by=self.created_by,
                           location=self.location, migrated=self.migrated, last_updated=self.last_updated,
                           question_count=len(self.questions))


class Attempt(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: str
    quiz_id: Identifier = Field(alias="quizId")
    quiz_title: str = Field(default="", alias="quizTitle")
    score: int = Field(ge=0)
    total: int = Field(ge=0)
    taken_at: datetime = Field(alias="takenAt")


class SaveResult(BaseModel):
    location: Location
    identifier: str


class CurrentUser(BaseModel):
    id: Optional[Identifier] = None
    username: str
    role: str = "student"


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


def adapt_option(raw: Any) -> Option:
    if isinstance(raw, Option):
        return raw
    if isinstance(raw, dict):
        text = raw.get("text") or raw.get("choice") or ""
        correct = any(_truthy(raw.get(k)) for k in ("is_correct", "isCorrect", "correct"))
        return Option(id=raw.get("id"), question_id=raw.get("question_id"), text=str(text), is_correct=correct)
    return Option(text="" if raw is None else str(raw))


def adapt_question(raw: Any) -> Question:
    if isinstance(raw, Question):
        return raw
    if isinstance(raw, DraftQuestion):
        return raw.to_question()
    multi = raw.get("type") == QuestionType.MULTI.value or _truthy(raw.get("is_multi"))
    options = [adapt_option(o) for o in (raw.get("options") or raw.get("choices") or raw.get("answers") or [])]
    correct = raw.get("correct")
    if isinstance(correct, list):
        marked = {int(i) for i in correct}
        options = [o.model_copy(update={"is_correct": o.is_correct or i in marked}) for i, o in enumerate(options)]
    return Question(id=raw.get("id"), quiz_id=raw.get("quiz_id"), text=str(raw.get("text") or raw.get("question") or ""),
                    type=QuestionType.MULTI if multi else QuestionType.SINGLE, options=options)


def adapt_quiz(raw: dict, location: Optional[Location] = None) -> QuizSummary:
    data = {k: v for k, v in raw.items() if v is not None and k != "questions"}
    data["published"] = _truthy(raw.get("published"))
    if location is not None:
        data["location"] = location
    if isinstance(raw.get("questions"), list):
        data["question_count"] = len(raw["questions"])
    return QuizSummary.model_validate(data)


def adapt_quizzes(rows: Any, location: Optional[Location] = None) -> List[QuizSummary]:
    """Adapt a list of quiz records, skipping the malformed ones."""
    if not isinstance(rows, list):
        return []
    quizzes = []
    for row in rows:
        try:
            quizzes.append(adapt_quiz(row, location))
        except (ValidationError, AttributeError) as e:
            logger.warning(f"Skipping malformed quiz record {row!r}: {e}")
    return quizzes
