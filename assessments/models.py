# assessments/models.py
from datetime import timedelta

from django.conf import settings
from django.db import models
from django.db.models import Q
from exams.models import Exam, Question


class ExamAttempt(models.Model):
    """
    One sitting of an exam by a student.

    Lifecycle: in progress while ``submitted_at`` is null, submitted once it
    is set. Nothing moves an attempt back out of the submitted state. The
    attempt is the aggregate root for its answers and violation logs.
    """

    class SubmitTrigger(models.TextChoices):
        MANUAL = "manual", "Manual"
        TIMEOUT = "timeout", "Timeout"
        VIOLATION_THRESHOLD = "violation_threshold", "Violation Threshold"

    exam = models.ForeignKey(Exam, on_delete=models.CASCADE, related_name='attempts')
    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='exam_attempts')
    started_at = models.DateTimeField(auto_now_add=True)
    submitted_at = models.DateTimeField(null=True, blank=True)
    submit_trigger = models.CharField(max_length=30, choices=SubmitTrigger.choices, blank=True)

    # Running total of graded answers; kept current as essays get graded
    score = models.DecimalField(max_digits=9, decimal_places=2, null=True, blank=True)

    # Teacher review
    is_flagged = models.BooleanField(default=False)
    flag_reason = models.TextField(blank=True)
    is_cancelled = models.BooleanField(default=False)
    cancel_reason = models.TextField(blank=True)

    class Meta:
        ordering = ['-started_at']
        constraints = [
            models.UniqueConstraint(
                fields=['exam', 'student'],
                condition=Q(submitted_at__isnull=True),
                name='one_open_attempt_per_student',
            ),
        ]

    @property
    def is_submitted(self):
        return self.submitted_at is not None

    @property
    def status(self):
        return "submitted" if self.is_submitted else "in_progress"

    @property
    def deadline(self):
        return self.started_at + timedelta(minutes=self.exam.duration_minutes)

    def remaining_seconds(self, now):
        """Countdown derived from started_at; never stored."""
        if self.is_submitted:
            return 0
        elapsed = (now - self.started_at).total_seconds()
        return max(0, int(self.exam.duration_minutes * 60 - elapsed))

    def is_overdue(self, now):
        grace = timedelta(seconds=getattr(settings, 'EXAM_DEADLINE_GRACE_SECONDS', 0))
        return not self.is_submitted and now >= self.deadline + grace

    def __str__(self):
        return f"{self.student} - {self.exam.title}"


class Answer(models.Model):
    attempt = models.ForeignKey(ExamAttempt, related_name='answers', on_delete=models.CASCADE)
    question = models.ForeignKey(Question, related_name='answers', on_delete=models.CASCADE)

    # Choice questions: list of option keys
    selected_options = models.JSONField(default=list, blank=True)
    # Essay questions
    essay_answer = models.TextField(blank=True)

    # Grading
    points_awarded = models.DecimalField(max_digits=7, decimal_places=2, null=True, blank=True)
    is_graded = models.BooleanField(default=False)
    grader_comment = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ('attempt', 'question')
        ordering = ['question__order_index', 'question_id']

    def __str__(self):
        return f"Answer q={self.question_id} attempt={self.attempt_id}"


class ViolationLog(models.Model):
    """Append-only proctoring event. Rows are never updated or deleted."""

    class ViolationType(models.TextChoices):
        TAB_SWITCH = "tab_switch", "Tab Switch"
        WINDOW_BLUR = "window_blur", "Window Blur"
        CAMERA_OFF = "camera_off", "Camera Off"
        CAMERA_DENIED = "camera_denied", "Camera Denied"
        BROWSER_MINIMIZE = "browser_minimize", "Browser Minimize"

    attempt = models.ForeignKey(ExamAttempt, related_name='violations', on_delete=models.CASCADE)
    violation_type = models.CharField(max_length=30, choices=ViolationType.choices)
    timestamp = models.DateTimeField(auto_now_add=True)
    details = models.TextField(blank=True)

    class Meta:
        ordering = ['-timestamp', '-id']

    def __str__(self):
        return f"{self.violation_type} @ {self.timestamp}"
