# assessments/services/review.py
import logging

from django.db import transaction
from rest_framework import serializers

from cores.exceptions import AttemptInProgress, NotFound
from cores.models import AuditLog
from ..models import ExamAttempt

logger = logging.getLogger(__name__)


def _locked_attempt(attempt_id):
    try:
        return ExamAttempt.objects.select_for_update().get(pk=attempt_id)
    except (ExamAttempt.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"Attempt {attempt_id} does not exist.")


def flag_attempt(attempt_id, is_flagged, reason="", actor=None):
    with transaction.atomic():
        attempt = _locked_attempt(attempt_id)
        attempt.is_flagged = bool(is_flagged)
        attempt.flag_reason = (reason or "") if attempt.is_flagged else ""
        attempt.save(update_fields=['is_flagged', 'flag_reason'])

        AuditLog.record(
            AuditLog.Action.FLAG, attempt, actor=actor,
            details=f"Flagged: {attempt.flag_reason}" if attempt.is_flagged else "Flag cleared",
        )
    logger.info("Attempt %s flagged=%s", attempt.id, attempt.is_flagged)
    return attempt


def cancel_attempt(attempt_id, reason, actor=None):
    reason = (reason or "").strip()
    if not reason:
        raise serializers.ValidationError({"reason": "A reason is required to cancel a result."})

    with transaction.atomic():
        attempt = _locked_attempt(attempt_id)
        if not attempt.is_submitted:
            raise AttemptInProgress("Only submitted attempts can be cancelled.")
        attempt.is_cancelled = True
        attempt.cancel_reason = reason
        attempt.save(update_fields=['is_cancelled', 'cancel_reason'])

        AuditLog.record(AuditLog.Action.CANCEL, attempt, actor=actor, details=f"Result cancelled: {reason}")
    logger.info("Attempt %s cancelled", attempt.id)
    return attempt
