# exams/selectors.py
"""
Read side of the exam catalogue.

The attempt engine only ever reads exams through these helpers, so it
sees the exam definition as a frozen snapshot.
"""
from django.conf import settings

from cores.exceptions import NotFound
from .models import Exam, Question


def get_exam(exam_id):
    try:
        return Exam.objects.get(id=exam_id)
    except (Exam.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"Exam {exam_id} does not exist.")


def get_questions(exam_id):
    return list(
        Question.objects.filter(exam_id=exam_id)
        .prefetch_related('options')
        .order_by('order_index', 'id')
    )


def normalize_access_key(key):
    return (key or "").strip().upper()


def get_exam_by_access_key(key):
    """Published exam for a typed access key, or None."""
    key = normalize_access_key(key)
    if len(key) < getattr(settings, "ACCESS_KEY_MIN_LENGTH", 6):
        return None
    return Exam.objects.filter(access_key=key, is_published=True).first()
