# scoring.py

"""
Decision-matrix scoring.

Weighted scoring (rule weights, cutoff of MIN_SCORE) and the older unweighted
scoring (every rule counts 1, any match qualifies) are two configurations of
the same function: ``score(answers, rules, min_score, weight)``.
"""

from collections import defaultdict
from typing import Callable, Dict, Iterable, List, Mapping, Tuple, Union

from .config import LEGACY_SCORING, MIN_SCORE
from .models import AnswerValue, DecisionRule

DEFAULT_WEIGHT = 1

WeightSource = Callable[[DecisionRule], int]
Answers = Union[Mapping[str, AnswerValue], Iterable[Tuple[str, AnswerValue]]]


def rule_weight(rule: DecisionRule) -> int:
    return rule.weight if rule.weight is not None else DEFAULT_WEIGHT


def unit_weight(rule: DecisionRule) -> int:
    return 1


def scoring_options(legacy: bool = LEGACY_SCORING) -> Dict[str, object]:
    """Keyword arguments for score() matching the configured scoring mode."""
    if legacy:
        return {"min_score": 0, "weight": unit_weight}
    return {"min_score": MIN_SCORE, "weight": rule_weight}


def expand_answers(answers: Answers) -> List[Tuple[str, str]]:
    """
    Flatten answers into (question_id, value) pairs. A scalar answer is a
    single pair, a multi choice answer yields one pair per selected label.
    Labels of a set are visited in sorted order so tie ordering is stable.
    """
    items = answers.items() if isinstance(answers, Mapping) else answers

    pairs = []
    seen = set()
    for question_id, value in items:
        values = [value] if isinstance(value, str) else sorted(value)
        for v in values:
            if (question_id, v) not in seen:
                seen.add((question_id, v))
                pairs.append((question_id, v))
    return pairs


def index_rules(rules: Iterable[DecisionRule]) -> Dict[Tuple[str, str], List[DecisionRule]]:
    index = defaultdict(list)
    for rule in rules:
        index[(rule.question_id, rule.answer)].append(rule)
    return index


def score(
    answers: Answers,
    rules: Iterable[DecisionRule],
    min_score: int = MIN_SCORE,
    weight: WeightSource = rule_weight,
) -> List[Tuple[str, int]]:
    """
    Score offerings against a set of answers.

    :param answers: Mapping of question id to answer value, or (question_id, value) pairs.
    :param rules: The decision matrix rules to match against.
    :param min_score: Offerings scoring below this are dropped.
    :param weight: Weight source applied to every matched rule.
    :return: (offering_id, score) pairs by descending score. Equal scores keep
        the order in which their offerings were first matched.
    """
    index = index_rules(rules)
    totals: Dict[str, int] = {}

    for pair in expand_answers(answers):
        for rule in index.get(pair, ()):
            totals[rule.offering_id] = totals.get(rule.offering_id, 0) + weight(rule)

    ranking = [(offering_id, total) for offering_id, total in totals.items() if total >= min_score]
    ranking.sort(key=lambda item: item[1], reverse=True)
    return ranking
