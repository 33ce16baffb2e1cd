from datetime import timedelta

import pytest
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from assessments.models import ExamAttempt
from exams.models import Exam, Option, Question
from users.models import User


@pytest.fixture(autouse=True)
def _clear_cache():
    # PlatformSetting is cached and the locmem cache outlives each test transaction
    cache.clear()
    yield
    cache.clear()


SINGLE = Question.QuestionType.SINGLE_CHOICE
MULTI = Question.QuestionType.MULTI_CHOICE
ESSAY = Question.QuestionType.ESSAY


def _user(email, role):
    return User.objects.create_user(username=email, email=email, password="secret-pass-123", role=role, full_name=email.split("@")[0])


@pytest.fixture
def teacher(db):
    return _user("teacher@school.test", User.Role.TEACHER)


@pytest.fixture
def other_teacher(db):
    return _user("other.teacher@school.test", User.Role.TEACHER)


@pytest.fixture
def student(db):
    return _user("student@school.test", User.Role.STUDENT)


@pytest.fixture
def other_student(db):
    return _user("other.student@school.test", User.Role.STUDENT)


@pytest.fixture
def make_exam(db, teacher):
    def _make(questions=(), **kwargs):
        fields = dict(title="Midterm", duration_minutes=30, max_violations=3, is_published=True)
        fields.update(kwargs)
        exam = Exam.objects.create(teacher=fields.pop("teacher", teacher), **fields)
        for index, definition in enumerate(questions):
            definition = dict(definition)
            options = definition.pop("options", [])
            correct = set(definition.pop("correct", []))
            definition.setdefault("content", f"Question {index + 1}")
            question = Question.objects.create(exam=exam, order_index=index, **definition)
            for position, key in enumerate(options):
                Option.objects.create(
                    question=question, key=key, text=f"Option {key}", is_correct=key in correct, position=position
                )
        return exam
    return _make


@pytest.fixture
def scenario_exam(make_exam):
    """Two single-choice questions (2 and 3 points) and one essay (5 points)."""
    return make_exam([
        {"question_type": SINGLE, "points": 2, "options": ["a", "b", "c"], "correct": ["b"]},
        {"question_type": SINGLE, "points": 3, "options": ["a", "b", "c"], "correct": ["a"]},
        {"question_type": ESSAY, "points": 5},
    ])


@pytest.fixture
def questions_of():
    def _questions(exam):
        return list(exam.questions.order_by("order_index"))
    return _questions


@pytest.fixture
def expire():
    """Moves an attempt's start far enough back that its time limit has run out."""
    def _expire(attempt, extra_minutes=5):
        started = timezone.now() - timedelta(minutes=attempt.exam.duration_minutes + extra_minutes)
        ExamAttempt.objects.filter(pk=attempt.pk).update(started_at=started)
        attempt.refresh_from_db()
        return attempt
    return _expire


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def student_client(api_client, student):
    api_client.force_authenticate(user=student)
    return api_client


@pytest.fixture
def teacher_client(teacher):
    client = APIClient()
    client.force_authenticate(user=teacher)
    return client
