# assessments/services/grading.py
"""
Grading engine.

Objective questions are graded once, when the attempt is submitted.
Essays are graded by hand afterwards. Every change to an answer's
points is followed by a full recompute of the attempt score from the
stored answers, so repeated or out-of-order grading can never
double-count.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.db import transaction

from cores.exceptions import AttemptInProgress, InvalidScore, NotFound
from cores.models import AuditLog
from exams.selectors import get_questions
from ..models import Answer, ExamAttempt

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CENT = Decimal("0.01")


@dataclass
class ScoreReport:
    attempt: ExamAttempt
    score: Decimal
    max_score: Decimal
    percentage: int
    fully_graded: bool


@dataclass
class SubmissionResult(ScoreReport):
    already_submitted: bool = False


@dataclass
class EssayGradeResult(ScoreReport):
    answer: Answer = None


def is_choice_correct(selected, correct):
    """All-or-nothing: the selection must equal the answer key as a set."""
    correct = set(correct or ())
    if not correct:
        return False
    return set(selected or ()) == correct


def compute_score(answers):
    return sum(
        (a.points_awarded for a in answers if a.is_graded and a.points_awarded is not None),
        ZERO,
    )


def max_score(questions):
    return sum((q.points for q in questions), ZERO)


def percentage(score, maximum):
    if not maximum or maximum <= 0:
        return 0
    ratio = Decimal(100) * Decimal(score or 0) / Decimal(maximum)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def is_fully_graded(answers):
    return all(a.is_graded for a in answers)


def build_report(attempt, report_cls=ScoreReport, **extra):
    questions = get_questions(attempt.exam_id)
    answers = list(attempt.answers.all())
    score = attempt.score if attempt.score is not None else ZERO
    top = max_score(questions)
    return report_cls(
        attempt=attempt,
        score=score,
        max_score=top,
        percentage=percentage(score, top),
        fully_graded=is_fully_graded(answers),
        **extra,
    )


def grade_objective(attempt, questions):
    """
    Objective pass run inside the submit transaction.

    Questions the student never touched get an empty answer row first, so
    an unanswered essay can still be graded and an unanswered choice
    question is recorded as 0.
    """
    existing = {a.question_id for a in attempt.answers.all()}
    missing = [Answer(attempt=attempt, question=q) for q in questions if q.id not in existing]
    if missing:
        Answer.objects.bulk_create(missing)

    answers = {a.question_id: a for a in Answer.objects.filter(attempt=attempt)}
    for question in questions:
        answer = answers[question.id]
        if question.is_choice:
            correct = is_choice_correct(answer.selected_options, question.correct_keys())
            answer.points_awarded = question.points if correct else ZERO
            answer.is_graded = True
        else:
            answer.points_awarded = None
            answer.is_graded = False
        answer.save(update_fields=['points_awarded', 'is_graded', 'updated_at'])
    return list(answers.values())


def recompute_attempt_score(attempt):
    """Caller must hold the attempt row lock."""
    attempt.score = compute_score(Answer.objects.filter(attempt=attempt))
    attempt.save(update_fields=['score'])
    return attempt.score


def _to_points(value):
    try:
        points = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidScore(f"'{value}' is not a number.")
    if not points.is_finite():
        raise InvalidScore(f"'{value}' is not a number.")
    return points.quantize(CENT, rounding=ROUND_HALF_UP)


def grade_essay(answer_id, points, grader=None, comment=""):
    points = _to_points(points)

    with transaction.atomic():
        try:
            answer = Answer.objects.select_related('question').get(pk=answer_id)
        except (Answer.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Answer {answer_id} does not exist.")

        # Serialises concurrent grading of answers belonging to one attempt
        attempt = ExamAttempt.objects.select_for_update().get(pk=answer.attempt_id)
        if not attempt.is_submitted:
            raise AttemptInProgress("Answers can only be graded after the attempt is submitted.")

        question = answer.question
        if question.is_choice:
            raise InvalidScore("Only essay answers are graded manually.")
        if points < 0 or points > question.points:
            raise InvalidScore(f"Points must be between 0 and {question.points}.")

        answer.points_awarded = points
        answer.is_graded = True
        answer.grader_comment = comment or ""
        answer.save(update_fields=['points_awarded', 'is_graded', 'grader_comment', 'updated_at'])

        score = recompute_attempt_score(attempt)

        AuditLog.record(
            AuditLog.Action.GRADE, answer, actor=grader,
            details=f"Awarded {points}/{question.points} on attempt {attempt.id}; attempt score is now {score}",
        )

    logger.info("Essay answer %s graded %s/%s, attempt %s score=%s", answer.id, points, question.points, attempt.id, score)
    return build_report(attempt, EssayGradeResult, answer=answer)
