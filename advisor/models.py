# models.py

import enum
from typing import Dict, FrozenSet, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


# A scalar answer (single choice, yes/no) or a set of labels (multi choice)
AnswerValue = Union[str, FrozenSet[str]]


class QuestionType(enum.Enum):
    single_choice = "SingleChoice"
    yes_no = "YesNo"
    multi_choice = "MultiChoice"

    @classmethod
    def _missing_(cls, value):
        # Names used by older questionnaire exports
        legacy = {"MultipleChoice": cls.single_choice, "Checkbox": cls.multi_choice}
        return legacy.get(value)

    @property
    def is_multi(self) -> bool:
        return self is QuestionType.multi_choice


class Phase(enum.Enum):
    A = "A"
    B = "B"
    C = "C"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Condition(_Frozen):
    question_id: str = Field(description="The question whose answer controls visibility.")
    answer: str = Field(description="The answer value that makes the question visible.")


class Question(_Frozen):
    id: str
    text: str
    type: QuestionType
    options: Tuple[str, ...] = ()
    order: int = Field(description="Position within the owning section.")
    section_id: Optional[str] = None
    condition: Optional[Condition] = None

    @model_validator(mode="before")
    @classmethod
    def _default_yes_no_options(cls, data):
        if isinstance(data, dict) and not data.get("options"):
            if QuestionType(data.get("type")) is QuestionType.yes_no:
                data = {**data, "options": ("Yes", "No")}
        return data


class Section(_Frozen):
    id: str
    title: str
    description: Optional[str] = None
    order: int
    questions: Tuple[Question, ...] = ()


class Questionnaire(_Frozen):
    id: str
    title: str
    version: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = False


class Answer(_Frozen):
    question_id: str
    value: AnswerValue


class DecisionRule(_Frozen):
    question_id: str
    answer: str = Field(description="The answer value that triggers the rule.")
    offering_id: str
    weight: Optional[int] = Field(
        default=None, description="Rule weight; None when the record carries none."
    )


class Offering(_Frozen):
    id: str
    title: str
    category: str
    sub_category: str = ""
    phase: Optional[Phase] = None
    rationale: Optional[str] = None
    inclusions: Optional[str] = None
    deliverables: Optional[str] = None
    delivery_method: Optional[str] = None
    display_order: Optional[int] = None


class ScoredOffering(_Frozen):
    offering: Offering
    score: int


class CustomerDetails(_Frozen):
    full_name: str
    email: str
    company_name: str
    job_title: Optional[str] = None
    country: Optional[str] = None


class Submission(_Frozen):
    id: str
    questionnaire_id: str
    details: CustomerDetails
    completed: bool = False


class CapturedResponse(_Frozen):
    section_title: str
    question_text: str
    answer: Union[str, List[str]]


class Progress(_Frozen):
    position: int = Field(description="1-based position of the current question.")
    total: int
    percentage: int
    section_title: Optional[str] = None


class FlowState(_Frozen):
    """Everything a presentation layer needs to render one step of a session."""

    submission_id: str
    questions: List[Question]
    answers: Dict[str, AnswerValue]
    cursor: Optional[int]
    progress: Optional[Progress]
    can_advance: bool
    is_last: bool
    complete: bool = False


class RoadmapEntry(_Frozen):
    offering: Offering
    score: int
    relevance: int = Field(description="Score as a percentage of the top score.")
    match_tier: str
    expanded: bool = Field(description="Shown in full detail by default.")


class SubCategoryGroup(_Frozen):
    sub_category: str
    max_score: int
    entries: List[RoadmapEntry]


class PhaseGroup(_Frozen):
    phase: Phase
    label: str
    description: str
    groups: List[SubCategoryGroup]
    total: int


class Recommendation(_Frozen):
    submission_id: str
    total: int
    max_score: int
    phases: List[PhaseGroup]
    captured_responses: List[CapturedResponse]
