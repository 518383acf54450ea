# schema.py

from datetime import datetime
from typing import Annotated, Any, Callable, List, Optional, Union

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field
from pydantic_core import core_schema

from .models import AnswerValue, CustomerDetails, Submission


class _ObjectIdPydanticAnnotation:
    # Based on https://docs.pydantic.dev/latest/usage/types/custom/#handling-third-party-types.

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        _source_type: Any,
        _handler: Callable[[Any], core_schema.CoreSchema],
    ) -> core_schema.CoreSchema:
        def validate_from_str(input_value: str) -> ObjectId:
            return ObjectId(input_value)

        return core_schema.union_schema(
            [
                # check if it's an instance first before doing any further work
                core_schema.is_instance_schema(ObjectId),
                core_schema.no_info_plain_validator_function(validate_from_str),
            ],
            serialization=core_schema.to_string_ser_schema(),
        )


PydanticObjectId = Annotated[ObjectId, _ObjectIdPydanticAnnotation]


# Documents as stored in the record store


class SubmissionRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: PydanticObjectId = Field(alias="_id")
    questionnaire_id: str
    full_name: str
    email: str
    company_name: str
    job_title: Optional[str] = None
    country: Optional[str] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def to_submission(self) -> Submission:
        return Submission(
            id=str(self.id),
            questionnaire_id=self.questionnaire_id,
            details=CustomerDetails(
                full_name=self.full_name,
                email=self.email,
                company_name=self.company_name,
                job_title=self.job_title,
                country=self.country,
            ),
            completed=self.completed_at is not None,
        )


class ResponseRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[PydanticObjectId] = Field(default=None, alias="_id")
    submission_id: str
    question_id: str
    answer: Union[str, List[str]]
    created_at: Optional[datetime] = None

    @property
    def value(self) -> AnswerValue:
        if isinstance(self.answer, str):
            return self.answer
        return frozenset(self.answer)


# HTTP request and response bodies


class SubmissionCreate(BaseModel):
    full_name: str = ""
    email: str = ""
    company_name: str = ""
    job_title: Optional[str] = None
    country: Optional[str] = None


class SubmissionCreated(BaseModel):
    submission_id: str


class AnswerSubmit(BaseModel):
    value: Union[str, List[str]] = Field(
        description="A single option label, or a list of labels for multi choice questions."
    )
    cursor: Optional[int] = Field(
        default=None, description="Index of the current question in the visible sequence."
    )

