from django.db.models import Count, Q
from rest_framework import generics, status, views
from rest_framework.response import Response

from cores.exceptions import NotAuthorized, NotFound
from users.permissions import IsStudent, IsTeacher
from .models import ExamAttempt, Answer, ViolationLog
from .serializers import (
    ExamAttemptSerializer, ActiveAttemptSerializer, AnswerSerializer, AnswerWriteSerializer,
    ViolationWriteSerializer, ViolationResultSerializer, ViolationLogSerializer,
    SubmitSerializer, SubmissionResultSerializer, ScoreReportSerializer,
    SubmissionSerializer, SubmissionDetailSerializer, GradeSerializer, FlagSerializer, CancelSerializer
)
from .services import attempts, grading, review, violations


def _student_attempt(request, pk):
    attempt = attempts.get_attempt(pk)
    if attempt.student_id != request.user.id:
        raise NotAuthorized("This attempt belongs to another student.")
    return attempt


def _teacher_attempt(request, pk):
    attempt = attempts.get_attempt(pk)
    if attempt.exam.teacher_id != request.user.id and not request.user.is_staff:
        raise NotAuthorized("This submission belongs to another teacher's exam.")
    return attempt


# --- STUDENT VIEWS ---

class StartExamView(views.APIView):
    """
    Student starts an exam, or resumes the attempt already in progress.
    Returns the attempt WITH questions.
    """
    permission_classes = [IsStudent]

    def post(self, request, exam_id):
        attempt, created = attempts.start_or_resume(exam_id, request.user)
        data = ActiveAttemptSerializer(attempt).data
        return Response(data, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


class StudentExamAttemptsView(generics.ListAPIView):
    """List all attempts for the logged-in student (Lightweight)."""
    permission_classes = [IsStudent]
    serializer_class = ExamAttemptSerializer

    def get_queryset(self):
        return ExamAttempt.objects.filter(student=self.request.user).select_related('exam', 'exam__teacher').order_by('-started_at')


class AttemptDetailView(views.APIView):
    """Current state of an attempt, including the server-side countdown."""
    permission_classes = [IsStudent]

    def get(self, request, pk):
        _student_attempt(request, pk)
        attempt = attempts.refresh_attempt(pk)
        return Response(ActiveAttemptSerializer(attempt).data)


class SaveAnswerView(views.APIView):
    """
    Autosave of a single answer.
    Payload: { "question_id": 1, "selected_options": ["b"] } or { "question_id": 3, "essay_answer": "..." }
    """
    permission_classes = [IsStudent]

    def put(self, request, pk):
        _student_attempt(request, pk)
        serializer = AnswerWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        answer = attempts.record_answer(pk, **serializer.validated_data)
        return Response(AnswerSerializer(answer).data)


class LogViolationView(views.APIView):
    """
    Proctoring signal from the browser.
    Payload: { "type": "tab_switch", "details": "..." }
    """
    permission_classes = [IsStudent]

    def post(self, request, pk):
        _student_attempt(request, pk)
        serializer = ViolationWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = violations.log_violation(
            pk, serializer.validated_data['type'], serializer.validated_data['details']
        )
        code = status.HTTP_201_CREATED if result.logged else status.HTTP_200_OK
        return Response(ViolationResultSerializer(result).data, status=code)


class SubmitExamView(views.APIView):
    """
    Student submits the attempt (button click or the client timer hitting zero).
    Safe to repeat: later calls return the stored result.
    """
    permission_classes = [IsStudent]

    def post(self, request, pk):
        _student_attempt(request, pk)
        serializer = SubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = attempts.submit(pk, serializer.validated_data['trigger'])
        return Response(SubmissionResultSerializer(result).data)


# --- TEACHER VIEWS ---

class SubmissionListView(generics.ListAPIView):
    """All attempts on the teacher's exams. Filter with ?exam_id=1, ?flagged=true."""
    permission_classes = [IsTeacher]
    serializer_class = SubmissionSerializer

    def get_queryset(self):
        queryset = (
            ExamAttempt.objects.filter(exam__teacher=self.request.user)
            .select_related('exam', 'student')
            .annotate(violations_count=Count('violations', distinct=True))
            .order_by('-started_at')
        )
        exam_id = self.request.query_params.get('exam_id')
        if exam_id:
            queryset = queryset.filter(exam_id=exam_id)
        if self.request.query_params.get('flagged') == 'true':
            queryset = queryset.filter(is_flagged=True)
        return queryset


class PendingGradingListView(SubmissionListView):
    """Submitted attempts that still have essay answers awaiting a grade."""

    def get_queryset(self):
        return (
            super().get_queryset()
            .filter(submitted_at__isnull=False, is_cancelled=False)
            .filter(Q(answers__is_graded=False))
            .distinct()
        )


class SubmissionDetailView(views.APIView):
    permission_classes = [IsTeacher]

    def get(self, request, pk):
        attempt = _teacher_attempt(request, pk)
        return Response(SubmissionDetailSerializer(attempt).data)


class ViolationLogListView(generics.ListAPIView):
    permission_classes = [IsTeacher]
    serializer_class = ViolationLogSerializer
    pagination_class = None

    def get_queryset(self):
        attempt = _teacher_attempt(self.request, self.kwargs['pk'])
        return ViolationLog.objects.filter(attempt=attempt).order_by('-timestamp', '-id')


class GradeAnswerView(views.APIView):
    """
    Teacher awards points to an essay answer.
    Payload: { "points": 4, "comment": "..." }
    """
    permission_classes = [IsTeacher]

    def post(self, request, answer_id):
        answer = Answer.objects.select_related('attempt__exam').filter(pk=answer_id).first()
        if answer is None:
            raise NotFound(f"Answer {answer_id} does not exist.")
        if answer.attempt.exam.teacher_id != request.user.id and not request.user.is_staff:
            raise NotAuthorized("This answer belongs to another teacher's exam.")

        serializer = GradeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        report = grading.grade_essay(
            answer_id,
            serializer.validated_data['points'],
            grader=request.user,
            comment=serializer.validated_data['comment'],
        )
        data = ScoreReportSerializer(report).data
        data['answer'] = AnswerSerializer(report.answer).data
        return Response(data)


class FlagSubmissionView(views.APIView):
    permission_classes = [IsTeacher]

    def post(self, request, pk):
        _teacher_attempt(request, pk)
        serializer = FlagSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        attempt = review.flag_attempt(
            pk, serializer.validated_data['is_flagged'], serializer.validated_data['reason'], actor=request.user
        )
        return Response(SubmissionSerializer(attempt).data)


class CancelSubmissionView(views.APIView):
    permission_classes = [IsTeacher]

    def post(self, request, pk):
        _teacher_attempt(request, pk)
        serializer = CancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        attempt = review.cancel_attempt(pk, serializer.validated_data['reason'], actor=request.user)
        return Response(SubmissionSerializer(attempt).data)
