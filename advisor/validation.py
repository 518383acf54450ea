# validation.py

import re
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .errors import AnswerValidationError, DataIntegrityError
from .flow import flatten_questions
from .models import (
    AnswerValue,
    CustomerDetails,
    DecisionRule,
    Offering,
    Question,
    QuestionType,
    Section,
)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def catalog_problems(
    sections: Sequence[Section],
    rules: Iterable[DecisionRule] = (),
    offerings: Optional[Iterable[Offering]] = None,
) -> List[str]:
    """
    Collect every integrity problem in a questionnaire and its decision matrix.

    Rules are only checked against offerings when ``offerings`` is given.
    """
    problems = []

    for order, count in Counter(s.order for s in sections).items():
        if count > 1:
            problems.append(f"{count} sections share order {order}")
    for section in sections:
        for order, count in Counter(q.order for q in section.questions).items():
            if count > 1:
                problems.append(
                    f"section {section.id}: {count} questions share order {order}"
                )

    flat = flatten_questions(sections)
    position = {}
    for index, question in enumerate(flat):
        if question.id in position:
            problems.append(f"duplicate question id {question.id}")
        position.setdefault(question.id, index)
    by_id = {q.id: q for q in flat}

    for index, question in enumerate(flat):
        if question.type is not QuestionType.yes_no and not question.options:
            problems.append(f"question {question.id} has no options")

        condition = question.condition
        if condition is None:
            continue
        if condition.question_id not in by_id:
            problems.append(
                f"question {question.id} is conditioned on unknown question {condition.question_id}"
            )
        elif position[condition.question_id] >= index:
            problems.append(
                f"question {question.id} is conditioned on question {condition.question_id} "
                "which does not come before it"
            )
        elif condition.answer not in by_id[condition.question_id].options:
            problems.append(
                f"question {question.id} is conditioned on answer {condition.answer!r} "
                f"which question {condition.question_id} does not offer"
            )

    offering_ids = None if offerings is None else {o.id for o in offerings}
    seen = set()
    for rule in rules:
        key = (rule.question_id, rule.answer, rule.offering_id)
        if key in seen:
            problems.append(f"duplicate decision rule {key}")
        seen.add(key)

        if rule.question_id not in by_id:
            problems.append(f"decision rule {key} references unknown question")
        elif rule.answer not in by_id[rule.question_id].options:
            problems.append(f"decision rule {key} triggers on an answer the question does not offer")
        if offering_ids is not None and rule.offering_id not in offering_ids:
            problems.append(f"decision rule {key} references unknown offering")
        if rule.weight is not None and rule.weight < 1:
            problems.append(f"decision rule {key} has weight {rule.weight}, expected at least 1")

    return problems


def validate_catalog(
    sections: Sequence[Section],
    rules: Iterable[DecisionRule] = (),
    offerings: Optional[Iterable[Offering]] = None,
) -> None:
    problems = catalog_problems(sections, rules, offerings)
    if problems:
        raise DataIntegrityError(problems)


def validate_answer(question: Question, value: Any) -> AnswerValue:
    """
    Check a submitted value against the question's declared type and options.

    :return: The normalised answer value: a str for single choice and yes/no
        questions, a frozenset for multi choice questions.
    :raises AnswerValidationError: When the value is missing or malformed.
    """
    if question.type.is_multi:
        if isinstance(value, str) or not isinstance(value, (list, tuple, set, frozenset)):
            raise AnswerValidationError(
                f"question {question.id} expects a list of options", field=question.id
            )
        if not all(isinstance(v, str) for v in value):
            raise AnswerValidationError(
                f"question {question.id} expects option labels", field=question.id
            )
        selected = frozenset(value)
        if not selected:
            raise AnswerValidationError(
                f"question {question.id} needs at least one option", field=question.id
            )
        unknown = sorted(selected - set(question.options))
        if unknown:
            raise AnswerValidationError(
                f"question {question.id} does not offer {', '.join(unknown)}",
                field=question.id,
            )
        return selected

    if not isinstance(value, str):
        raise AnswerValidationError(
            f"question {question.id} expects a single option", field=question.id
        )
    if value == "":
        raise AnswerValidationError(f"question {question.id} needs an answer", field=question.id)
    if value not in question.options:
        raise AnswerValidationError(
            f"question {question.id} does not offer {value}", field=question.id
        )
    return value


def validate_customer_details(data: Dict[str, Any]) -> CustomerDetails:
    def clean(name):
        value = data.get(name)
        return value.strip() if isinstance(value, str) else ""

    full_name = clean("full_name")
    email = clean("email")
    company_name = clean("company_name")

    if not full_name:
        raise AnswerValidationError("Full name is required", field="full_name")
    if not email:
        raise AnswerValidationError("Email is required", field="email")
    if not EMAIL_PATTERN.match(email):
        raise AnswerValidationError("Please enter a valid email", field="email")
    if not company_name:
        raise AnswerValidationError("Company name is required", field="company_name")

    return CustomerDetails(
        full_name=full_name,
        email=email,
        company_name=company_name,
        job_title=clean("job_title") or None,
        country=clean("country") or None,
    )
