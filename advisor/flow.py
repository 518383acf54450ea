# flow.py

"""
Question flow evaluation.

Everything here is a pure function of the question catalog and the answers
collected so far. The cursor (index of the current question inside the
visible sequence) is owned by the caller and passed in explicitly.
"""

import math
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .models import AnswerValue, Progress, Question, Section


def flatten_questions(sections: Iterable[Section]) -> List[Question]:
    """
    Produce the canonical flat question sequence: sections ordered by their
    sequence position, then questions within each section by theirs.
    """
    flat = []
    for section in sorted(sections, key=lambda s: s.order):
        flat.extend(sorted(section.questions, key=lambda q: q.order))
    return flat


def section_titles(sections: Iterable[Section]) -> Dict[str, str]:
    return {q.id: s.title for s in sections for q in s.questions}


def condition_met(question: Question, answers: Mapping[str, AnswerValue]) -> bool:
    if question.condition is None:
        return True

    controlling = answers.get(question.condition.question_id)
    if controlling is None:
        return False
    if isinstance(controlling, str):
        return controlling == question.condition.answer
    return question.condition.answer in controlling


def visible_questions(
    questions: Sequence[Question], answers: Mapping[str, AnswerValue]
) -> List[Question]:
    """
    Return the questions currently shown to the respondent, in flow order.

    :param questions: The canonical flat sequence (see flatten_questions).
    :param answers: Question id to answer value; insertion order is irrelevant.
    :return: The subsequence of questions whose visibility condition holds.
    """
    return [q for q in questions if condition_met(q, answers)]


def is_answered(value: Optional[AnswerValue]) -> bool:
    if value is None:
        return False
    return len(value) > 0


def clamp_cursor(cursor: Optional[int], visible_count: int) -> Optional[int]:
    """Keep the cursor inside the visible sequence after it changes size."""
    if visible_count == 0:
        return None
    if cursor is None or cursor < 0:
        return 0
    return min(cursor, visible_count - 1)


def is_last(cursor: Optional[int], visible_count: int) -> bool:
    return cursor is not None and cursor == visible_count - 1


def can_advance(
    visible: Sequence[Question],
    cursor: Optional[int],
    answers: Mapping[str, AnswerValue],
) -> bool:
    if cursor is None or not 0 <= cursor < len(visible):
        return False
    return is_answered(answers.get(visible[cursor].id))


def advance(
    visible: Sequence[Question],
    cursor: Optional[int],
    answers: Mapping[str, AnswerValue],
):
    """
    Move past the current question.

    :return: (new_cursor, complete). complete is True when the respondent
        advanced from the last visible question. The cursor is unchanged when
        the current question is not answered yet.
    """
    if not can_advance(visible, cursor, answers):
        return cursor, False
    if is_last(cursor, len(visible)):
        return cursor, True
    return cursor + 1, False


def back(cursor: Optional[int]) -> Optional[int]:
    if cursor is None or cursor <= 0:
        return cursor
    return cursor - 1


def progress(
    visible: Sequence[Question],
    cursor: Optional[int],
    titles: Optional[Mapping[str, str]] = None,
) -> Optional[Progress]:
    if cursor is None or not visible:
        return None

    position = cursor + 1
    total = len(visible)
    return Progress(
        position=position,
        total=total,
        percentage=int(math.floor(100 * position / total + 0.5)),
        section_title=(titles or {}).get(visible[cursor].id),
    )
