# exams/models.py
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.crypto import get_random_string

ACCESS_KEY_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


def generate_access_key():
    return get_random_string(getattr(settings, "ACCESS_KEY_LENGTH", 8), allowed_chars=ACCESS_KEY_ALPHABET)


class Exam(models.Model):
    teacher = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='exams')
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    duration_minutes = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    max_violations = models.PositiveIntegerField(default=3, validators=[MinValueValidator(1)])
    require_camera = models.BooleanField(default=True)
    auto_submit_on_violation = models.BooleanField(default=True)

    # Optional availability window
    start_time = models.DateTimeField(null=True, blank=True)
    end_time = models.DateTimeField(null=True, blank=True)

    # Stored uppercase; students type it case-insensitively
    access_key = models.CharField(max_length=20, unique=True, default=generate_access_key)
    is_published = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def save(self, *args, **kwargs):
        self.access_key = (self.access_key or "").strip().upper()
        super().save(*args, **kwargs)

    def is_open_at(self, when):
        if self.start_time and when < self.start_time:
            return False
        if self.end_time and when > self.end_time:
            return False
        return True

    def __str__(self):
        return self.title


class Question(models.Model):
    class QuestionType(models.TextChoices):
        SINGLE_CHOICE = "multiple_choice_single", "Single Choice"
        MULTI_CHOICE = "multiple_choice_multiple", "Multiple Choice"
        ESSAY = "essay", "Essay"

    exam = models.ForeignKey(Exam, related_name='questions', on_delete=models.CASCADE)
    question_type = models.CharField(max_length=30, choices=QuestionType.choices, default=QuestionType.SINGLE_CHOICE)
    content = models.TextField()
    image_url = models.URLField(blank=True)
    points = models.DecimalField(max_digits=7, decimal_places=2, default=1, validators=[MinValueValidator(0)])
    order_index = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['order_index', 'id']

    @property
    def is_choice(self):
        return self.question_type != self.QuestionType.ESSAY

    def option_keys(self):
        return {option.key for option in self.options.all()}

    def correct_keys(self):
        """The answer key: keys of every option flagged correct."""
        return {option.key for option in self.options.all() if option.is_correct}

    def __str__(self):
        return f"{self.content[:50]}..."


class Option(models.Model):
    question = models.ForeignKey(Question, related_name='options', on_delete=models.CASCADE)
    key = models.CharField(max_length=20, help_text="Stable option id, e.g. 'a'")
    text = models.CharField(max_length=500)
    image_url = models.URLField(blank=True)
    is_correct = models.BooleanField(default=False)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['position', 'id']
        unique_together = ('question', 'key')

    def __str__(self):
        return f"{self.key}: {self.text[:40]}"
