# submission_handler.py

from typing import Any, Dict, List, Optional

from ..config import LEGACY_SCORING, TOP_EXPANDED
from ..database import Database
from ..errors import AnswerValidationError
from ..flow import (
    advance,
    back,
    can_advance,
    clamp_cursor,
    flatten_questions,
    is_answered,
    is_last,
    progress,
    section_titles,
    visible_questions,
)
from ..formatting import format_roadmap_in_markdown
from ..logger import logger
from ..models import AnswerValue, FlowState, Recommendation, Section, Submission
from ..notifier import Notifier
from ..services import captured_responses, load_sections, recommend
from ..validation import validate_answer, validate_customer_details


class SubmissionHandler:
    """
    Drives one respondent session at a time through the record store.

    The handler keeps no per-session state: the answers live in the store and
    the cursor is passed in by the caller on every call.
    """

    def __init__(
        self,
        database: Database,
        notifier: Notifier,
        legacy: bool = LEGACY_SCORING,
        top_expanded: int = TOP_EXPANDED,
    ):
        self.database = database
        self.notifier = notifier
        self.legacy = legacy
        self.top_expanded = top_expanded

    def start_submission(self, data: Dict[str, Any]) -> Submission:
        details = validate_customer_details(data)
        questionnaire = self.database.fetch_active_questionnaire()
        submission = self.database.create_submission(questionnaire.id, details)
        logger.info(
            f"Created submission {submission.id} for {details.company_name} "
            f"on questionnaire {questionnaire.id}"
        )
        return submission

    def flow_state(self, submission_id: str, cursor: Optional[int] = 0) -> FlowState:
        submission = self.database.fetch_submission(submission_id)
        sections = load_sections(self.database, submission.questionnaire_id)
        answers = self.database.fetch_answers(submission_id)
        return self._state(submission, sections, answers, cursor)

    def submit_answer(
        self,
        submission_id: str,
        question_id: str,
        value: Any,
        cursor: Optional[int] = None,
    ) -> FlowState:
        """
        Validate and store one answer, replacing any earlier answer to the
        same question, then recompute the visible questions.

        :param cursor: The caller's cursor; defaults to the answered question.
        """
        submission = self.database.fetch_submission(submission_id)
        if submission.completed:
            raise AnswerValidationError(
                f"Submission {submission_id} is already completed", field=question_id
            )

        sections = load_sections(self.database, submission.questionnaire_id)
        answers = self.database.fetch_answers(submission_id)
        visible = visible_questions(flatten_questions(sections), answers)

        question = next((q for q in visible if q.id == question_id), None)
        if question is None:
            raise AnswerValidationError(
                f"Question {question_id} is not part of the current flow", field=question_id
            )

        normalised = validate_answer(question, value)
        self.database.upsert_answer(submission_id, question_id, normalised)
        logger.info(f"Stored answer to {question_id} for submission {submission_id}")

        if cursor is None:
            cursor = visible.index(question)
        answers = {**answers, question_id: normalised}
        return self._state(submission, sections, answers, cursor)

    def advance(self, submission_id: str, cursor: Optional[int]) -> FlowState:
        """
        Move to the next visible question. Advancing from the last question
        returns a state flagged complete; the caller then asks for the
        recommendation.
        """
        submission = self.database.fetch_submission(submission_id)
        sections = load_sections(self.database, submission.questionnaire_id)
        answers = self.database.fetch_answers(submission_id)
        visible = visible_questions(flatten_questions(sections), answers)

        cursor = clamp_cursor(cursor, len(visible))
        if not can_advance(visible, cursor, answers):
            raise AnswerValidationError("Answer the current question before moving on")

        cursor, complete = advance(visible, cursor, answers)
        return self._state(submission, sections, answers, cursor, complete=complete)

    def back(self, submission_id: str, cursor: Optional[int]) -> FlowState:
        submission = self.database.fetch_submission(submission_id)
        sections = load_sections(self.database, submission.questionnaire_id)
        answers = self.database.fetch_answers(submission_id)
        visible = visible_questions(flatten_questions(sections), answers)
        return self._state(
            submission, sections, answers, back(clamp_cursor(cursor, len(visible)))
        )

    def complete(self, submission_id: str) -> Recommendation:
        """
        Score the submission and build its roadmap. The first completion marks
        the submission completed and notifies; later calls recompute the same
        result from the stored answers. A submission can only be completed once
        every visible question is answered.
        """
        submission = self.database.fetch_submission(submission_id)
        sections = load_sections(self.database, submission.questionnaire_id)
        answers = self.database.fetch_answers(submission_id)

        if not submission.completed:
            visible = visible_questions(flatten_questions(sections), answers)
            unanswered = [q.id for q in visible if not is_answered(answers.get(q.id))]
            if unanswered:
                raise AnswerValidationError(
                    f"Submission {submission_id} has unanswered questions: {', '.join(unanswered)}",
                    field=unanswered[0],
                )

        ranking, phases = recommend(
            self.database, answers, legacy=self.legacy, top_expanded=self.top_expanded
        )
        recommendation = Recommendation(
            submission_id=submission_id,
            total=len(ranking),
            max_score=ranking[0][1] if ranking else 0,
            phases=phases,
            captured_responses=captured_responses(sections, answers),
        )

        if not submission.completed:
            self.database.mark_completed(submission_id)
            logger.info(
                f"Submission {submission_id} completed with {recommendation.total} recommendations"
            )
            self._notify(submission_id, recommendation)
        return recommendation

    def _notify(self, submission_id: str, recommendation: Recommendation) -> None:
        try:
            self.notifier.notify(
                submission_id, summary=format_roadmap_in_markdown(recommendation.phases)
            )
        except Exception as e:
            logger.error(f"Could not dispatch notification for {submission_id}: {e}")

    def _state(
        self,
        submission: Submission,
        sections: List[Section],
        answers: Dict[str, AnswerValue],
        cursor: Optional[int],
        complete: bool = False,
    ) -> FlowState:
        visible = visible_questions(flatten_questions(sections), answers)
        cursor = clamp_cursor(cursor, len(visible))
        return FlowState(
            submission_id=submission.id,
            questions=visible,
            answers=answers,
            cursor=cursor,
            progress=progress(visible, cursor, section_titles(sections)),
            can_advance=can_advance(visible, cursor, answers),
            is_last=is_last(cursor, len(visible)),
            complete=complete,
        )
