# services.py

from typing import List, Mapping, Sequence, Tuple

from .config import LEGACY_SCORING, TOP_EXPANDED
from .database import Database
from .flow import flatten_questions, section_titles
from .logger import logger
from .models import AnswerValue, CapturedResponse, DecisionRule, PhaseGroup, Section
from .roadmap import compose
from .scoring import expand_answers, score, scoring_options
from .validation import validate_catalog


def load_sections(db: Database, questionnaire_id: str) -> List[Section]:
    """Fetch a questionnaire's sections and reject inconsistent question data."""
    sections = db.fetch_sections(questionnaire_id)
    validate_catalog(sections)
    return sections


def audit_catalog(db: Database) -> None:
    """
    Check the active questionnaire together with the whole decision matrix
    and offering catalog. Raises DataIntegrityError listing every problem.
    """
    questionnaire = db.fetch_active_questionnaire()
    sections = db.fetch_sections(questionnaire.id)
    questions = {q.id for q in flatten_questions(sections)}
    # The matrix may hold rules for other questionnaires
    rules = [r for r in db.fetch_all_rules() if r.question_id in questions]
    validate_catalog(sections, rules, db.fetch_all_offerings())
    logger.info(
        f"Catalog for questionnaire {questionnaire.id} is consistent: "
        f"{len(questions)} questions, {len(rules)} rules"
    )


def gather_rules(db: Database, answers: Mapping[str, AnswerValue]) -> List[DecisionRule]:
    rules = []
    for question_id, value in expand_answers(answers):
        rules.extend(db.fetch_rules(question_id, value))
    return rules


def recommend(
    db: Database,
    answers: Mapping[str, AnswerValue],
    legacy: bool = LEGACY_SCORING,
    top_expanded: int = TOP_EXPANDED,
) -> Tuple[List[Tuple[str, int]], List[PhaseGroup]]:
    ranking = score(answers, gather_rules(db, answers), **scoring_options(legacy))
    offerings = db.fetch_offerings(offering_id for offering_id, _ in ranking)
    phases = compose(ranking, offerings, top_expanded=top_expanded)
    logger.info(f"Scored {len(ranking)} offerings across {len(phases)} phases")
    return ranking, phases


def captured_responses(
    sections: Sequence[Section], answers: Mapping[str, AnswerValue]
) -> List[CapturedResponse]:
    """Answers paired with their question and section text, in flow order."""
    titles = section_titles(sections)
    captured = [
        CapturedResponse(
            section_title=titles[question.id],
            question_text=question.text,
            answer=_plain(answers[question.id]),
        )
        for question in flatten_questions(sections)
        if question.id in answers
    ]

    for question_id, value in answers.items():
        if question_id not in titles:
            captured.append(
                CapturedResponse(
                    section_title="Unknown Section",
                    question_text="Unknown Question",
                    answer=_plain(value),
                )
            )
    return captured


def _plain(value: AnswerValue):
    return value if isinstance(value, str) else sorted(value)
