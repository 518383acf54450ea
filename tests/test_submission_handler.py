import pytest

from advisor.errors import AnswerValidationError, DataIntegrityError, NotFoundError
from advisor.handlers.submission_handler import SubmissionHandler
from advisor.models import Phase

from conftest import CUSTOMER, RecordingNotifier


def answer_all(handler, submission_id):
    handler.submit_answer(submission_id, "q-erp", "Yes")
    handler.submit_answer(submission_id, "q-pain", ["Reporting", "Integration"])
    handler.submit_answer(submission_id, "q-size", "Large")


def test_start_submission_binds_active_questionnaire(handler, submission):
    assert submission.questionnaire_id == "qn-1"
    assert submission.details.full_name == "Ada Lovelace"
    assert submission.details.job_title is None


def test_start_submission_rejects_invalid_details(handler):
    with pytest.raises(AnswerValidationError):
        handler.start_submission({**CUSTOMER, "email": "nope"})


def test_initial_flow_hides_conditional_questions(handler, submission):
    state = handler.flow_state(submission.id)

    assert [q.id for q in state.questions] == ["q-erp", "q-size"]
    assert state.cursor == 0
    assert state.progress.position == 1
    assert state.progress.total == 2
    assert state.progress.section_title == "Company Profile"
    assert not state.can_advance


def test_answer_reveals_follow_up_question(handler, submission):
    state = handler.submit_answer(submission.id, "q-erp", "Yes")

    assert [q.id for q in state.questions] == ["q-erp", "q-pain", "q-size"]
    assert state.can_advance

    state = handler.advance(submission.id, state.cursor)
    assert state.cursor == 1
    assert state.questions[1].id == "q-pain"


def test_changing_an_answer_clamps_the_cursor(handler, submission):
    handler.submit_answer(submission.id, "q-erp", "Yes")
    handler.submit_answer(submission.id, "q-pain", ["Security"])
    handler.submit_answer(submission.id, "q-size", "Mid")

    state = handler.submit_answer(submission.id, "q-erp", "No", cursor=2)

    assert [q.id for q in state.questions] == ["q-erp", "q-size"]
    assert state.cursor == 1
    assert state.is_last


def test_resuming_loads_stored_answers(handler, submission):
    handler.submit_answer(submission.id, "q-erp", "No")

    state = handler.flow_state(submission.id, cursor=5)

    assert state.answers == {"q-erp": "No"}
    assert state.cursor == 1


def test_hidden_question_cannot_be_answered(handler, submission):
    with pytest.raises(AnswerValidationError):
        handler.submit_answer(submission.id, "q-pain", ["Reporting"])


def test_malformed_answer_is_rejected(handler, submission):
    with pytest.raises(AnswerValidationError):
        handler.submit_answer(submission.id, "q-erp", "Maybe")


def test_advance_requires_an_answer(handler, submission):
    with pytest.raises(AnswerValidationError):
        handler.advance(submission.id, 0)


def test_back_needs_no_answer(handler, submission):
    handler.submit_answer(submission.id, "q-erp", "No")

    state = handler.back(submission.id, 1)

    assert state.cursor == 0


def test_advancing_past_last_question_completes_flow(handler, submission):
    answer_all(handler, submission.id)

    state = handler.advance(submission.id, 2)

    assert state.complete
    assert state.cursor == 2


def test_complete_builds_phased_roadmap(handler, submission, notifier):
    answer_all(handler, submission.id)

    result = handler.complete(submission.id)

    assert result.total == 2
    assert result.max_score == 7
    assert [p.phase for p in result.phases] == [Phase.A, Phase.B]
    analytics = result.phases[0].groups[0].entries[0]
    integration = result.phases[1].groups[0].entries[0]
    assert (analytics.offering.id, analytics.score, analytics.relevance) == ("o-analytics", 7, 100)
    assert (integration.offering.id, integration.score, integration.relevance) == (
        "o-integration",
        5,
        71,
    )
    assert [c.question_text for c in result.captured_responses] == [
        "Do you run an ERP system today?",
        "Which areas hurt the most?",
        "How large is your reporting team?",
    ]
    assert result.captured_responses[1].answer == ["Integration", "Reporting"]
    assert len(notifier.calls) == 1
    assert notifier.calls[0][0] == submission.id
    assert "Analytics Quick Start" in notifier.calls[0][1]


def test_complete_is_reproducible_and_notifies_once(handler, submission, notifier):
    answer_all(handler, submission.id)

    first = handler.complete(submission.id)
    second = handler.complete(submission.id)

    assert first == second
    assert len(notifier.calls) == 1


def test_completed_submission_rejects_answers(handler, submission):
    answer_all(handler, submission.id)
    handler.complete(submission.id)

    with pytest.raises(AnswerValidationError):
        handler.submit_answer(submission.id, "q-size", "Small")


def test_notification_failure_does_not_fail_completion(database, submission):
    handler = SubmissionHandler(database, RecordingNotifier(fail=True))
    answer_all(handler, submission.id)

    result = handler.complete(submission.id)

    assert result.total == 2


def test_legacy_scoring_keeps_every_match(database, notifier, submission):
    handler = SubmissionHandler(database, notifier, legacy=True)
    handler.submit_answer(submission.id, "q-erp", "No")
    handler.submit_answer(submission.id, "q-size", "Small")

    result = handler.complete(submission.id)

    assert result.total == 1
    entry = result.phases[0].groups[0].entries[0]
    assert result.phases[0].phase is Phase.B
    assert (entry.offering.id, entry.score, entry.relevance) == ("o-legacy", 1, 100)


def test_no_matches_is_an_empty_roadmap(handler, submission):
    handler.submit_answer(submission.id, "q-erp", "No")
    handler.submit_answer(submission.id, "q-size", "Small")

    result = handler.complete(submission.id)

    assert result.total == 0
    assert result.phases == []


def test_inconsistent_questionnaire_is_reported(database, handler, submission):
    database.questions.update_one({"_id": "q-erp"}, {"$set": {"condition_question_id": "q-size", "condition_answer": "Large"}})

    with pytest.raises(DataIntegrityError):
        handler.flow_state(submission.id)


def test_unknown_submission(handler):
    with pytest.raises(NotFoundError):
        handler.flow_state("64b7f0c2a1b2c3d4e5f60718")


def test_complete_requires_every_visible_question_answered(database, handler, submission, notifier):
    handler.submit_answer(submission.id, "q-erp", "Yes")

    with pytest.raises(AnswerValidationError) as exc:
        handler.complete(submission.id)

    assert exc.value.field == "q-pain"
    assert not database.fetch_submission(submission.id).completed
    assert notifier.calls == []
    handler.submit_answer(submission.id, "q-pain", ["Security"])


def test_fresh_submission_cannot_be_completed(handler, submission, notifier):
    with pytest.raises(AnswerValidationError):
        handler.complete(submission.id)

    assert notifier.calls == []
