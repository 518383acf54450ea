import mongomock
import pytest

from advisor.database import Database
from advisor.handlers.submission_handler import SubmissionHandler


QUESTIONNAIRE = {"_id": "qn-1", "title": "Platform assessment", "version": "1", "is_active": True}

SECTIONS = [
    {"_id": "s-data", "questionnaire_id": "qn-1", "title": "Data & Analytics", "order": 2},
    {"_id": "s-profile", "questionnaire_id": "qn-1", "title": "Company Profile", "order": 1},
]

QUESTIONS = [
    {
        "_id": "q-size",
        "section_id": "s-data",
        "text": "How large is your reporting team?",
        "type": "SingleChoice",
        "options": ["Small", "Mid", "Large"],
        "order": 1,
    },
    {
        "_id": "q-pain",
        "section_id": "s-profile",
        "text": "Which areas hurt the most?",
        "type": "MultiChoice",
        "options": ["Reporting", "Integration", "Security"],
        "order": 2,
        "condition_question_id": "q-erp",
        "condition_answer": "Yes",
    },
    {
        "_id": "q-erp",
        "section_id": "s-profile",
        "text": "Do you run an ERP system today?",
        "type": "YesNo",
        "order": 1,
    },
]

OFFERINGS = [
    {
        "_id": "o-analytics",
        "title": "Analytics Quick Start",
        "category": "Analytics",
        "sub_category": "Data",
        "phase": "A",
        "rationale": "Faster month-end reporting",
        "display_order": 1,
    },
    {
        "_id": "o-integration",
        "title": "Integration Hub",
        "category": "Integration",
        "sub_category": "Integration",
        "phase": "B",
    },
    {
        "_id": "o-security",
        "title": "Identity Hardening",
        "category": "Security",
        "sub_category": "Security",
        "phase": "A",
    },
    {
        "_id": "o-legacy",
        "title": "Legacy Review",
        "category": "Advisory",
        "sub_category": "",
        "phase": None,
    },
]

RULES = [
    {"question_id": "q-erp", "answer": "Yes", "offering_id": "o-integration", "weight": 3},
    {"question_id": "q-pain", "answer": "Reporting", "offering_id": "o-analytics", "weight": 5},
    {"question_id": "q-pain", "answer": "Integration", "offering_id": "o-integration", "weight": 2},
    {"question_id": "q-pain", "answer": "Security", "offering_id": "o-security", "weight": 1},
    {"question_id": "q-size", "answer": "Large", "offering_id": "o-analytics", "weight": 2},
    {"question_id": "q-size", "answer": "Small", "offering_id": "o-legacy"},
]

CUSTOMER = {
    "full_name": " Ada Lovelace ",
    "email": "ada@example.com",
    "company_name": "Analytical Engines Ltd",
    "job_title": "",
    "country": "UK",
}


class RecordingNotifier:
    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def notify(self, submission_id, summary=None):
        self.calls.append((submission_id, summary))
        if self.fail:
            raise RuntimeError("notification backend down")


@pytest.fixture
def database():
    db = Database(client=mongomock.MongoClient(), db_name="advisor_test")
    db.questionnaires.insert_one(dict(QUESTIONNAIRE))
    db.sections.insert_many([dict(s) for s in SECTIONS])
    db.questions.insert_many([dict(q) for q in QUESTIONS])
    db.offerings.insert_many([dict(o) for o in OFFERINGS])
    db.decision_rules.insert_many([dict(r) for r in RULES])
    return db


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def handler(database, notifier):
    return SubmissionHandler(database, notifier, legacy=False, top_expanded=3)


@pytest.fixture
def submission(handler):
    return handler.start_submission(dict(CUSTOMER))
