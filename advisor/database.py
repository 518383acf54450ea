# database.py

from functools import wraps
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, MongoClient
from pymongo.errors import PyMongoError
from pydantic import ValidationError

from .config import MONGODB_DB, MONGODB_URI
from .errors import DataIntegrityError, NotFoundError, RecordStoreError
from .logger import logger
from .models import (
    AnswerValue,
    Condition,
    CustomerDetails,
    DecisionRule,
    Offering,
    Question,
    Questionnaire,
    Section,
    Submission,
)
from .schema import ResponseRecord, SubmissionRecord
from .utils import utcnow


def store_operation(f):
    """Surface driver failures as RecordStoreError."""

    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except PyMongoError as e:
            logger.error(f"Record store failure in {f.__name__}: {e}")
            raise RecordStoreError(f"{f.__name__} failed: {e}") from e

    return wrapper


def _object_id(value: str) -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise NotFoundError(f"Submission not found: {value}")


def _from_doc(kind: str, doc: Dict[str, Any], build):
    try:
        return build(doc)
    except (KeyError, ValidationError) as e:
        raise DataIntegrityError([f"{kind} {doc.get('_id')} is malformed: {e}"])


def _question_from_doc(doc: Dict[str, Any]) -> Question:
    condition = None
    if doc.get("condition_question_id") and doc.get("condition_answer"):
        condition = Condition(
            question_id=str(doc["condition_question_id"]),
            answer=doc["condition_answer"],
        )
    return Question(
        id=str(doc["_id"]),
        text=doc["text"],
        type=doc["type"],
        options=doc.get("options") or (),
        order=doc["order"],
        section_id=str(doc["section_id"]),
        condition=condition,
    )


def _offering_from_doc(doc: Dict[str, Any]) -> Offering:
    return Offering(
        id=str(doc["_id"]),
        title=doc["title"],
        category=doc["category"],
        sub_category=doc.get("sub_category") or "",
        phase=doc.get("phase") or None,
        rationale=doc.get("rationale"),
        inclusions=doc.get("inclusions"),
        deliverables=doc.get("deliverables"),
        delivery_method=doc.get("delivery_method"),
        display_order=doc.get("display_order"),
    )


def _rule_from_doc(doc: Dict[str, Any]) -> DecisionRule:
    return DecisionRule(
        question_id=str(doc["question_id"]),
        answer=doc["answer"],
        offering_id=str(doc["offering_id"]),
        weight=doc.get("weight"),
    )


class Database:
    """
    Record store backed by MongoDB.

    Configuration collections (questionnaires, sections, questions, offerings,
    decision_rules) are maintained by administrators; references between them
    are stored as string ids. submissions and responses are written here.
    """

    def __init__(self, client: Optional[MongoClient] = None, db_name: str = MONGODB_DB):
        self.client = client or MongoClient(MONGODB_URI)
        self.db = self.client[db_name]
        self.questionnaires = self.db["questionnaires"]
        self.sections = self.db["sections"]
        self.questions = self.db["questions"]
        self.offerings = self.db["offerings"]
        self.decision_rules = self.db["decision_rules"]
        self.submissions = self.db["submissions"]
        self.responses = self.db["responses"]

    @store_operation
    def fetch_active_questionnaire(self) -> Questionnaire:
        doc = self.questionnaires.find_one({"is_active": True})
        if not doc:
            raise NotFoundError("No active questionnaire found")
        return Questionnaire(
            id=str(doc["_id"]),
            title=doc["title"],
            version=doc.get("version"),
            description=doc.get("description"),
            is_active=True,
        )

    @store_operation
    def fetch_sections(self, questionnaire_id: str) -> List[Section]:
        section_docs = list(
            self.sections.find({"questionnaire_id": questionnaire_id}).sort("order", ASCENDING)
        )
        section_ids = [str(doc["_id"]) for doc in section_docs]

        by_section: Dict[str, List[Question]] = {sid: [] for sid in section_ids}
        for doc in self.questions.find({"section_id": {"$in": section_ids}}).sort(
            "order", ASCENDING
        ):
            by_section[str(doc["section_id"])].append(_from_doc("question", doc, _question_from_doc))

        return [
            Section(
                id=str(doc["_id"]),
                title=doc["title"],
                description=doc.get("description"),
                order=doc["order"],
                questions=by_section[str(doc["_id"])],
            )
            for doc in section_docs
        ]

    @store_operation
    def fetch_answers(self, submission_id: str) -> Dict[str, AnswerValue]:
        answers = {}
        for doc in self.responses.find({"submission_id": submission_id}).sort(
            "created_at", ASCENDING
        ):
            record = _from_doc("response", doc, lambda d: ResponseRecord(**d))
            answers[record.question_id] = record.value
        return answers

    @store_operation
    def fetch_rules(self, question_id: str, answer: str) -> List[DecisionRule]:
        return [
            _from_doc("decision rule", doc, _rule_from_doc)
            for doc in self.decision_rules.find(
                {"question_id": question_id, "answer": answer}
            )
        ]

    @store_operation
    def fetch_all_rules(self) -> List[DecisionRule]:
        return [_from_doc("decision rule", doc, _rule_from_doc) for doc in self.decision_rules.find()]

    @store_operation
    def fetch_offerings(self, ids: Iterable[str]) -> Dict[str, Offering]:
        ids = list(ids)
        if not ids:
            return {}
        return {
            str(doc["_id"]): _from_doc("offering", doc, _offering_from_doc)
            for doc in self.offerings.find({"_id": {"$in": ids}})
        }

    @store_operation
    def fetch_all_offerings(self) -> List[Offering]:
        return [_from_doc("offering", doc, _offering_from_doc) for doc in self.offerings.find()]

    @store_operation
    def upsert_answer(self, submission_id: str, question_id: str, value: AnswerValue) -> None:
        """
        Replace the stored answer for (submission, question). Running it twice
        with the same arguments leaves the same single record behind.
        """
        answer = value if isinstance(value, str) else sorted(value)
        self.responses.delete_many({"submission_id": submission_id, "question_id": question_id})
        self.responses.insert_one(
            {
                "submission_id": submission_id,
                "question_id": question_id,
                "answer": answer,
                "created_at": utcnow(),
            }
        )

    @store_operation
    def create_submission(self, questionnaire_id: str, details: CustomerDetails) -> Submission:
        doc = {
            "questionnaire_id": questionnaire_id,
            **details.model_dump(),
            "created_at": utcnow(),
            "completed_at": None,
        }
        result = self.submissions.insert_one(doc)
        doc["_id"] = result.inserted_id
        return SubmissionRecord(**doc).to_submission()

    @store_operation
    def fetch_submission(self, submission_id: str) -> Submission:
        doc = self.submissions.find_one({"_id": _object_id(submission_id)})
        if not doc:
            raise NotFoundError(f"Submission not found: {submission_id}")
        return SubmissionRecord(**doc).to_submission()

    @store_operation
    def mark_completed(self, submission_id: str) -> None:
        self.submissions.update_one(
            {"_id": _object_id(submission_id)}, {"$set": {"completed_at": utcnow()}}
        )
