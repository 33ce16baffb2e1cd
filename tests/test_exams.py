from datetime import datetime, timezone as tz

import pytest
from rest_framework.exceptions import ValidationError

from assessments.services.attempts import start_or_resume
from cores.exceptions import NotAuthorized
from cores.models import PlatformSetting
from exams.models import Exam, Option, Question
from exams.selectors import get_exam_by_access_key, normalize_access_key
from exams.services import answer_key_errors, publish_exam, unpublish_exam
from tests.conftest import ESSAY, MULTI, SINGLE

pytestmark = pytest.mark.django_db


def test_access_key_is_generated_and_stored_uppercase(make_exam):
    exam = make_exam()
    assert len(exam.access_key) == 8
    assert exam.access_key == exam.access_key.upper()

    custom = make_exam(access_key=" ab12cd34 ")
    assert custom.access_key == "AB12CD34"


def test_access_key_lookup_is_case_insensitive(make_exam):
    exam = make_exam(access_key="QWERTY78")
    assert normalize_access_key("  qwerty78 ") == "QWERTY78"
    assert get_exam_by_access_key("qwerty78") == exam


@pytest.mark.parametrize("typed", ["", None, "QWE", "QWERT"])
def test_short_access_keys_never_match(make_exam, typed):
    make_exam(access_key="QWERT")
    assert get_exam_by_access_key(typed) is None


def test_unpublished_exam_is_not_found_by_key(make_exam):
    make_exam(access_key="HIDDEN99", is_published=False)
    assert get_exam_by_access_key("hidden99") is None


def test_answer_key_checks(make_exam):
    exam = make_exam([
        {"question_type": SINGLE, "options": ["a", "b"], "correct": ["a", "b"]},
        {"question_type": MULTI, "options": ["a"], "correct": []},
        {"question_type": MULTI, "options": ["a", "b", "c"], "correct": ["a", "c"]},
        {"question_type": ESSAY},
    ])
    single, lonely, multi, essay = exam.questions.order_by("order_index")

    assert answer_key_errors(single) == ["Single choice questions must have exactly one correct option."]
    assert len(answer_key_errors(lonely)) == 2
    assert answer_key_errors(multi) == []
    assert answer_key_errors(essay) == []

    Option.objects.create(question=essay, key="x", text="stray")
    assert answer_key_errors(essay) == ["Essay questions cannot have options."]


def test_publish_refuses_broken_answer_key(make_exam):
    exam = make_exam([{"question_type": SINGLE, "options": ["a", "b"], "correct": []}], is_published=False)
    with pytest.raises(ValidationError):
        publish_exam(exam)
    exam.refresh_from_db()
    assert exam.is_published is False


def test_publish_valid_exam(make_exam):
    exam = make_exam([{"question_type": SINGLE, "options": ["a", "b"], "correct": ["b"]}], is_published=False)
    assert publish_exam(exam).is_published is True


def test_unpublished_exam_cannot_be_started(make_exam, student):
    exam = unpublish_exam(make_exam())
    assert exam.is_published is False
    with pytest.raises(NotAuthorized):
        start_or_resume(exam.id, student)


def test_window_check():
    exam = Exam(start_time=datetime(2026, 1, 1, 9, tzinfo=tz.utc), end_time=datetime(2026, 1, 1, 11, tzinfo=tz.utc))
    assert exam.is_open_at(datetime(2026, 1, 1, 10, tzinfo=tz.utc))
    assert not exam.is_open_at(datetime(2026, 1, 1, 8, tzinfo=tz.utc))
    assert not exam.is_open_at(datetime(2026, 1, 1, 12, tzinfo=tz.utc))
    assert Exam().is_open_at(datetime(2026, 1, 1, 12, tzinfo=tz.utc))


class TestExamApi:
    def test_create_with_nested_questions_uses_platform_defaults(self, teacher_client, teacher):
        settings = PlatformSetting.load()
        settings.default_exam_duration = 45
        settings.default_max_violations = 5
        settings.save()

        payload = {
            "title": "Algebra",
            "questions": [
                {
                    "question_type": SINGLE,
                    "content": "2 + 2?",
                    "points": "2.00",
                    "options": [
                        {"key": "a", "text": "3"},
                        {"key": "b", "text": "4", "is_correct": True},
                    ],
                },
                {"question_type": ESSAY, "content": "Explain.", "points": "5.00"},
            ],
        }
        response = teacher_client.post("/api/exams/", payload, format="json")

        assert response.status_code == 201, response.data
        exam = Exam.objects.get(pk=response.data["id"])
        assert exam.teacher == teacher
        assert exam.duration_minutes == 45
        assert exam.max_violations == 5
        assert exam.is_published is False
        first, second = exam.questions.order_by("order_index")
        assert first.correct_keys() == {"b"}
        assert second.question_type == ESSAY

    def test_window_must_be_ordered(self, teacher_client):
        payload = {
            "title": "Backwards",
            "duration_minutes": 30,
            "start_time": "2026-05-01T10:00:00Z",
            "end_time": "2026-05-01T09:00:00Z",
        }
        response = teacher_client.post("/api/exams/", payload, format="json")
        assert response.status_code == 400
        assert "end_time" in response.data

    def test_teacher_only_sees_own_exams(self, teacher_client, make_exam, other_teacher):
        mine = make_exam(title="Mine")
        make_exam(title="Theirs", teacher=other_teacher)

        response = teacher_client.get("/api/exams/")

        assert response.status_code == 200
        assert [row["id"] for row in response.data["results"]] == [mine.id]

    def test_students_cannot_author(self, student_client):
        response = student_client.post("/api/exams/", {"title": "Nope", "duration_minutes": 10}, format="json")
        assert response.status_code == 403

    def test_publish_endpoint_reports_problems(self, teacher_client, make_exam):
        exam = make_exam([{"question_type": MULTI, "options": ["a", "b"], "correct": []}], is_published=False)
        response = teacher_client.post(f"/api/exams/{exam.id}/publish/")
        assert response.status_code == 400

        Option.objects.filter(question__exam=exam, key="a").update(is_correct=True)
        response = teacher_client.post(f"/api/exams/{exam.id}/publish/")
        assert response.status_code == 200
        assert response.data["is_published"] is True

    def test_exam_with_attempts_is_frozen(self, teacher_client, scenario_exam, student):
        start_or_resume(scenario_exam.id, student)
        question = scenario_exam.questions.first()

        assert teacher_client.patch(f"/api/exams/{scenario_exam.id}/", {"title": "Renamed"}, format="json").status_code == 400
        assert teacher_client.patch(f"/api/questions/{question.id}/", {"points": "9.00"}, format="json").status_code == 400
        assert teacher_client.delete(f"/api/exams/{scenario_exam.id}/").status_code == 400
        scenario_exam.refresh_from_db()
        assert scenario_exam.title == "Midterm"

    def test_published_exam_rejects_question_without_correct_option(self, teacher_client, make_exam):
        exam = make_exam([{"question_type": SINGLE, "options": ["a", "b"], "correct": ["a"]}])
        payload = {
            "exam": exam.id,
            "question_type": SINGLE,
            "content": "Pick one",
            "points": "1.00",
            "options": [{"key": "a", "text": "A"}, {"key": "b", "text": "B"}],
        }

        response = teacher_client.post("/api/questions/", payload, format="json")

        assert response.status_code == 400
        assert "options" in response.data
        assert exam.questions.count() == 1

    def test_published_exam_rejects_options_edit_that_breaks_the_key(self, teacher_client, make_exam):
        exam = make_exam([{"question_type": SINGLE, "options": ["a", "b"], "correct": ["a"]}])
        question = exam.questions.get()

        payload = {"options": [
            {"key": "a", "text": "A"},
            {"key": "b", "text": "B", "is_correct": True},
            {"key": "c", "text": "C", "is_correct": True},
        ]}
        response = teacher_client.patch(f"/api/questions/{question.id}/", payload, format="json")

        assert response.status_code == 400
        fresh = Question.objects.get(pk=question.id)
        assert fresh.correct_keys() == {"a"}
        assert fresh.option_keys() == {"a", "b"}

    def test_draft_exam_accepts_incomplete_question_until_publish(self, teacher_client, make_exam):
        exam = make_exam(is_published=False)
        payload = {
            "exam": exam.id,
            "question_type": MULTI,
            "content": "Pick any",
            "options": [{"key": "a", "text": "A"}, {"key": "b", "text": "B"}],
        }

        assert teacher_client.post("/api/questions/", payload, format="json").status_code == 201
        assert teacher_client.post(f"/api/exams/{exam.id}/publish/").status_code == 400

    def test_question_endpoint_replaces_options(self, teacher_client, make_exam):
        exam = make_exam([{"question_type": SINGLE, "options": ["a", "b"], "correct": ["a"]}])
        question = exam.questions.get()

        payload = {"options": [{"key": "x", "text": "X"}, {"key": "y", "text": "Y", "is_correct": True}]}
        response = teacher_client.patch(f"/api/questions/{question.id}/", payload, format="json")

        assert response.status_code == 200, response.data
        assert question.correct_keys() == {"y"}
        assert Question.objects.get(pk=question.id).option_keys() == {"x", "y"}

    def test_duplicate_option_keys_are_rejected(self, teacher_client, make_exam):
        exam = make_exam([{"question_type": SINGLE, "options": ["a", "b"], "correct": ["a"]}])
        question = exam.questions.get()
        payload = {"options": [{"key": "a", "text": "1"}, {"key": "a", "text": "2"}]}
        response = teacher_client.patch(f"/api/questions/{question.id}/", payload, format="json")
        assert response.status_code == 400

    def test_student_finds_exam_by_key_without_answer_key(self, student_client, make_exam):
        exam = make_exam(
            [{"question_type": SINGLE, "options": ["a", "b"], "correct": ["a"]}],
            access_key="FINDME42",
        )
        response = student_client.get("/api/exams/by-key/", {"key": "findme42"})

        assert response.status_code == 200
        assert response.data["id"] == exam.id
        assert "questions" not in response.data
        assert "access_key" not in response.data

    def test_unknown_key_is_404(self, student_client):
        assert student_client.get("/api/exams/by-key/", {"key": "NOPE1234"}).status_code == 404
