"""Score computation for quiz submissions."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from quiz_app.models import CHOICE_TYPES


@dataclass
class ScoreResult:
    points_awarded: int = 0
    total_points: int = 0
    percentage: float = 0.0
    # Free-text questions: counted in total_points, never auto-scored.
    ungraded: List[str] = field(default_factory=list)


def normalize_answer(value) -> List[str]:
    """Coerce a submitted answer into a list of strings."""
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return [str(v) for v in value]
    return [str(value)]


def is_answer_correct(question, answer) -> Optional[bool]:
    """Return whether an answer is correct, or ``None`` for free-text questions.

    Choice questions are correct only when the submitted set equals the
    correct set (same size, same members); there is no partial credit.
    """
    if question.type not in CHOICE_TYPES:
        return None
    submitted = normalize_answer(answer)
    correct = normalize_answer(question.correct_answer)
    return len(submitted) == len(correct) and set(submitted) == set(correct)


def compute_score(questions: Iterable, answers: Dict[str, object]) -> ScoreResult:
    """Compute awarded points, total points and percentage for a set of answers.

    ``answers`` maps question uid to the chosen answer(s). Percentage is
    ``0`` when the quiz carries no points.
    """
    result = ScoreResult()
    for question in questions:
        result.total_points += question.points
        correct = is_answer_correct(question, answers.get(question.uid))
        if correct is None:
            result.ungraded.append(question.uid)
        elif correct:
            result.points_awarded += question.points

    if result.total_points > 0:
        result.percentage = round(result.points_awarded / result.total_points * 100, 2)
    return result
