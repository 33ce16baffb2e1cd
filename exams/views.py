from django.db import transaction
from rest_framework import viewsets, filters, serializers
from rest_framework.decorators import action
from rest_framework.response import Response

from cores.exceptions import NotFound
from users.permissions import IsTeacher, IsStudent
from .models import Exam, Question
from .selectors import get_exam_by_access_key
from .serializers import ExamSerializer, ExamListSerializer, QuestionSerializer
from .services import ensure_gradeable, publish_exam, unpublish_exam


def _ensure_not_attempted(exam):
    # Attempts read the exam as a frozen snapshot
    if exam.attempts.exists():
        raise serializers.ValidationError("This exam already has attempts and can no longer be edited.")


class ExamViewSet(viewsets.ModelViewSet):
    serializer_class = ExamSerializer

    filter_backends = [filters.SearchFilter]
    search_fields = ['title']

    def get_queryset(self):
        return Exam.objects.filter(teacher=self.request.user).prefetch_related('questions__options').order_by('-created_at')

    def get_serializer_class(self):
        if self.action == 'by_key':
            return ExamListSerializer
        return ExamSerializer

    def get_permissions(self):
        if self.action == 'by_key':
            return [IsStudent()]
        return [IsTeacher()]

    def perform_create(self, serializer):
        serializer.save(teacher=self.request.user)

    def perform_update(self, serializer):
        _ensure_not_attempted(serializer.instance)
        serializer.save()

    def perform_destroy(self, instance):
        _ensure_not_attempted(instance)
        instance.delete()

    @action(detail=True, methods=['post'])
    def publish(self, request, pk=None):
        exam = publish_exam(self.get_object())
        return Response(ExamSerializer(exam).data)

    @action(detail=True, methods=['post'])
    def unpublish(self, request, pk=None):
        exam = unpublish_exam(self.get_object())
        return Response(ExamSerializer(exam).data)

    @action(detail=False, methods=['get'], url_path='by-key')
    def by_key(self, request):
        """
        Looks up a published exam by the access key the student typed.
        Payload: ?key=ab12cd
        """
        exam = get_exam_by_access_key(request.query_params.get('key'))
        if exam is None:
            raise NotFound("No published exam matches this access key.")
        return Response(ExamListSerializer(exam).data)


class QuestionViewSet(viewsets.ModelViewSet):
    serializer_class = QuestionSerializer
    permission_classes = [IsTeacher]

    filter_backends = [filters.SearchFilter]
    search_fields = ['content']

    def get_queryset(self):
        queryset = Question.objects.filter(exam__teacher=self.request.user).prefetch_related('options')
        # Filter by Exam if provided ?exam_id=1
        exam_id = self.request.query_params.get('exam_id')
        if exam_id:
            queryset = queryset.filter(exam_id=exam_id)
        return queryset.order_by('exam_id', 'order_index', 'id')

    def perform_create(self, serializer):
        exam = Exam.objects.filter(id=self.request.data.get('exam'), teacher=self.request.user).first()
        if exam is None:
            raise NotFound("Exam not found.")
        _ensure_not_attempted(exam)
        with transaction.atomic():
            question = serializer.save(exam=exam)
            if exam.is_published:
                ensure_gradeable(question)

    def perform_update(self, serializer):
        _ensure_not_attempted(serializer.instance.exam)
        # A published exam must stay gradeable; a bad key rolls the write back
        with transaction.atomic():
            question = serializer.save()
            if question.exam.is_published:
                ensure_gradeable(question)

    def perform_destroy(self, instance):
        _ensure_not_attempted(instance.exam)
        instance.delete()
