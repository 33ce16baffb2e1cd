# assessments/services/attempts.py
"""
Attempt state machine: in progress -> submitted, nothing else.

The server is the authority on time. The client countdown only decides
when to *ask* for a timeout submission; any read or write that reaches
an attempt past ``started_at + duration`` finalises it here, and the
``close_overdue_attempts`` sweep catches attempts nobody touches again.
"""
import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from cores.exceptions import AttemptClosed, InvalidAnswer, NotAuthorized, NotFound
from cores.models import AuditLog
from exams.models import Question
from exams.selectors import get_exam, get_questions
from ..models import Answer, ExamAttempt
from .grading import SubmissionResult, build_report, compute_score, grade_objective

logger = logging.getLogger(__name__)

Trigger = ExamAttempt.SubmitTrigger


def get_attempt(attempt_id):
    try:
        return ExamAttempt.objects.select_related('exam').get(pk=attempt_id)
    except (ExamAttempt.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"Attempt {attempt_id} does not exist.")


def _open_attempt(exam, student):
    return ExamAttempt.objects.filter(exam=exam, student=student, submitted_at__isnull=True).first()


def start_or_resume(exam_id, student, now=None):
    """
    Returns ``(attempt, created)``.

    A page reload or a retried request lands on the same open attempt.
    """
    now = now or timezone.now()
    exam = get_exam(exam_id)
    if not exam.is_published:
        raise NotAuthorized("This exam is not published.")

    current = _open_attempt(exam, student)
    if current is not None:
        if not current.is_overdue(now):
            logger.info("Resuming attempt %s for student %s on exam %s", current.id, student.pk, exam.id)
            return current, False
        submit(current.id, Trigger.TIMEOUT, now=now)

    if not exam.is_open_at(now):
        raise NotAuthorized("This exam is not available at this time.")

    try:
        with transaction.atomic():
            attempt = ExamAttempt.objects.create(exam=exam, student=student)
    except IntegrityError:
        # A concurrent start for the same student won the unique constraint
        attempt = _open_attempt(exam, student)
        if attempt is None:
            raise
        logger.warning("Concurrent start for student %s on exam %s resolved to attempt %s", student.pk, exam.id, attempt.id)
        return attempt, False

    logger.info("Started attempt %s for student %s on exam %s", attempt.id, student.pk, exam.id)
    return attempt, True


def _normalize_response(question, selected_options, essay_answer):
    if not question.is_choice:
        if selected_options:
            raise InvalidAnswer("Essay questions do not take selected options.")
        return {'selected_options': [], 'essay_answer': essay_answer or ""}

    if essay_answer:
        raise InvalidAnswer("Choice questions do not take essay text.")
    if selected_options is None:
        selected_options = []
    if not isinstance(selected_options, (list, tuple)):
        raise InvalidAnswer("selected_options must be a list of option keys.")

    keys = []
    for key in selected_options:
        key = str(key)
        if key not in keys:
            keys.append(key)

    unknown = set(keys) - question.option_keys()
    if unknown:
        raise InvalidAnswer(f"Unknown option(s): {', '.join(sorted(unknown))}.")
    if question.question_type == Question.QuestionType.SINGLE_CHOICE and len(keys) > 1:
        raise InvalidAnswer("Single choice questions accept one option.")
    return {'selected_options': keys, 'essay_answer': ""}


def record_answer(attempt_id, question_id, selected_options=None, essay_answer=None, now=None):
    """Upserts the answer for (attempt, question). Last write wins, no grading."""
    now = now or timezone.now()
    attempt = get_attempt(attempt_id)

    if attempt.is_overdue(now):
        submit(attempt.id, Trigger.TIMEOUT, now=now)
        raise AttemptClosed("Time is up; the attempt has been submitted.")
    if attempt.is_submitted:
        raise AttemptClosed()

    try:
        question = Question.objects.prefetch_related('options').get(pk=question_id, exam_id=attempt.exam_id)
    except (Question.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"Question {question_id} is not part of this exam.")

    values = _normalize_response(question, selected_options, essay_answer)

    with transaction.atomic():
        # Holding the attempt lock keeps answers from landing after grading
        locked = ExamAttempt.objects.select_for_update().get(pk=attempt.pk)
        if locked.is_submitted:
            raise AttemptClosed()
        answer, _ = Answer.objects.update_or_create(
            attempt=locked, question=question, defaults=values
        )
    return answer


def submit(attempt_id, trigger=Trigger.MANUAL, now=None):
    """
    Finalises the attempt exactly once.

    Concurrent callers (client timer, violation threshold, a manual click)
    serialise on the attempt row; the first one grades, the rest get the
    stored result back with ``already_submitted=True``.
    """
    now = now or timezone.now()
    if trigger not in Trigger.values:
        raise ValueError(f"Unknown submit trigger: {trigger}")

    with transaction.atomic():
        try:
            attempt = ExamAttempt.objects.select_for_update().get(pk=attempt_id)
        except (ExamAttempt.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Attempt {attempt_id} does not exist.")

        if attempt.is_submitted:
            return build_report(attempt, SubmissionResult, already_submitted=True)

        if trigger != Trigger.TIMEOUT and attempt.is_overdue(now):
            trigger = Trigger.TIMEOUT

        answers = grade_objective(attempt, get_questions(attempt.exam_id))
        attempt.submitted_at = now
        attempt.submit_trigger = trigger
        attempt.score = compute_score(answers)
        attempt.save(update_fields=['submitted_at', 'submit_trigger', 'score'])

        if trigger != Trigger.MANUAL:
            AuditLog.record(AuditLog.Action.SUBMIT, attempt, details=f"Submitted automatically ({trigger})")

    logger.info("Attempt %s submitted (%s), objective score=%s", attempt.id, trigger, attempt.score)
    return build_report(attempt, SubmissionResult)


def refresh_attempt(attempt_id, now=None):
    """Reads an attempt, finalising it first if its deadline has passed."""
    now = now or timezone.now()
    attempt = get_attempt(attempt_id)
    if attempt.is_overdue(now):
        submit(attempt.id, Trigger.TIMEOUT, now=now)
        attempt = get_attempt(attempt_id)
    return attempt


def close_overdue_attempts(now=None):
    """Sweep: submits every open attempt past its deadline. Returns their ids."""
    now = now or timezone.now()
    closed = []
    open_attempts = ExamAttempt.objects.filter(submitted_at__isnull=True).select_related('exam')
    for attempt in open_attempts.iterator():
        if not attempt.is_overdue(now):
            continue
        result = submit(attempt.id, Trigger.TIMEOUT, now=now)
        if not result.already_submitted:
            closed.append(attempt.id)
    if closed:
        logger.info("Closed %d overdue attempts: %s", len(closed), closed)
    return closed
