# assessments/services/violations.py
import logging
from dataclasses import dataclass
from typing import Optional

from django.db import transaction
from django.utils import timezone

from cores.exceptions import InvalidViolation, NotFound
from ..models import ExamAttempt, ViolationLog
from .attempts import Trigger, submit
from .grading import SubmissionResult

logger = logging.getLogger(__name__)


@dataclass
class ViolationResult:
    logged: bool
    violation_count: int
    max_violations: int
    entry: Optional[ViolationLog] = None
    auto_submitted: bool = False
    submission: Optional[SubmissionResult] = None


def count_violations(attempt_id):
    """The violation counter. Always derived from the log rows."""
    return ViolationLog.objects.filter(attempt_id=attempt_id).count()


def log_violation(attempt_id, violation_type, details="", now=None):
    """
    Appends a proctoring event and applies the auto-submit policy.

    Reaching ``max_violations`` submits the attempt only when the exam has
    ``auto_submit_on_violation`` set; otherwise events keep being logged
    and the count is left for the teacher to review.

    Events for an attempt that is already closed are dropped without
    error: focus-loss signals routinely race the final submission.
    """
    now = now or timezone.now()
    if violation_type not in ViolationLog.ViolationType.values:
        raise InvalidViolation(f"Unknown violation type: {violation_type}")

    with transaction.atomic():
        try:
            attempt = ExamAttempt.objects.select_for_update().get(pk=attempt_id)
        except (ExamAttempt.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Attempt {attempt_id} does not exist.")
        exam = attempt.exam

        if not attempt.is_submitted and attempt.is_overdue(now):
            submit(attempt.id, Trigger.TIMEOUT, now=now)
            attempt.refresh_from_db(fields=['submitted_at'])

        if attempt.is_submitted:
            logger.debug("Discarding %s for closed attempt %s", violation_type, attempt.id)
            return ViolationResult(
                logged=False,
                violation_count=count_violations(attempt.id),
                max_violations=exam.max_violations,
            )

        entry = ViolationLog.objects.create(attempt=attempt, violation_type=violation_type, details=details or "")
        count = count_violations(attempt.id)
        result = ViolationResult(
            logged=True,
            violation_count=count,
            max_violations=exam.max_violations,
            entry=entry,
        )

        # Reaching the limit is enough; the attempt is closed afterwards so this fires once
        if exam.auto_submit_on_violation and count >= exam.max_violations:
            result.submission = submit(attempt.id, Trigger.VIOLATION_THRESHOLD, now=now)
            result.auto_submitted = not result.submission.already_submitted
            logger.info(
                "Attempt %s reached %d/%d violations and was submitted",
                attempt.id, count, exam.max_violations,
            )

    return result
