# exams/serializers.py
from django.db import transaction
from rest_framework import serializers

from cores.models import PlatformSetting
from .models import Exam, Question, Option

# --- Helper Serializers ---

class OptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Option
        fields = ['key', 'text', 'image_url', 'is_correct']

class StudentOptionSerializer(serializers.ModelSerializer):
    """Options as shown while taking the exam. Never exposes the answer key."""
    class Meta:
        model = Option
        fields = ['key', 'text', 'image_url']

# --- Question Serializers ---

class QuestionSerializer(serializers.ModelSerializer):
    options = OptionSerializer(many=True, required=False)
    exam_title = serializers.CharField(source='exam.title', read_only=True)

    class Meta:
        model = Question
        fields = [
            'id', 'exam', 'exam_title', 'question_type', 'content', 'image_url',
            'points', 'order_index', 'options'
        ]
        read_only_fields = ['exam']

    def validate_options(self, value):
        keys = [opt['key'].strip() for opt in value]
        if len(keys) != len(set(keys)):
            raise serializers.ValidationError("Option keys must be unique within a question.")
        return value

    def validate(self, attrs):
        q_type = attrs.get('question_type', getattr(self.instance, 'question_type', None))
        if q_type == Question.QuestionType.ESSAY and attrs.get('options'):
            raise serializers.ValidationError({"options": "Essay questions cannot have options."})
        return attrs

    @staticmethod
    def _write_options(question, options_data):
        question.options.all().delete()
        for position, opt in enumerate(options_data):
            Option.objects.create(
                question=question,
                key=opt['key'].strip(),
                text=opt['text'],
                image_url=opt.get('image_url', ''),
                is_correct=opt.get('is_correct', False),
                position=position,
            )

    def create(self, validated_data):
        options_data = validated_data.pop('options', [])
        with transaction.atomic():
            question = Question.objects.create(**validated_data)
            self._write_options(question, options_data)
        return question

    def update(self, instance, validated_data):
        options_data = validated_data.pop('options', None)
        with transaction.atomic():
            instance = super().update(instance, validated_data)
            if options_data is not None:
                self._write_options(instance, options_data)
        return instance

class StudentQuestionSerializer(serializers.ModelSerializer):
    options = StudentOptionSerializer(many=True, read_only=True)

    class Meta:
        model = Question
        fields = ['id', 'question_type', 'content', 'image_url', 'points', 'order_index', 'options']

# --- Exam Serializers ---

class ExamSerializer(serializers.ModelSerializer):
    """Teacher-facing exam with its full answer key."""
    questions = QuestionSerializer(many=True, required=False)
    total_questions = serializers.IntegerField(source='questions.count', read_only=True)

    class Meta:
        model = Exam
        fields = [
            'id', 'title', 'description', 'duration_minutes', 'max_violations',
            'require_camera', 'auto_submit_on_violation', 'start_time', 'end_time',
            'access_key', 'is_published', 'created_at', 'total_questions', 'questions'
        ]
        read_only_fields = ['access_key', 'is_published', 'created_at']
        extra_kwargs = {'duration_minutes': {'required': False}}

    def validate(self, attrs):
        start = attrs.get('start_time', getattr(self.instance, 'start_time', None))
        end = attrs.get('end_time', getattr(self.instance, 'end_time', None))
        if start and end and start >= end:
            raise serializers.ValidationError({"end_time": "End time must be after start time."})
        return attrs

    def create(self, validated_data):
        questions_data = validated_data.pop('questions', [])

        # Fall back to the platform defaults for anything the author left out
        defaults = PlatformSetting.load()
        validated_data.setdefault('duration_minutes', defaults.default_exam_duration)
        validated_data.setdefault('max_violations', defaults.default_max_violations)
        validated_data.setdefault('require_camera', defaults.default_require_camera)
        validated_data.setdefault('auto_submit_on_violation', defaults.default_auto_submit_on_violation)

        with transaction.atomic():
            exam = Exam.objects.create(**validated_data)
            for index, q_data in enumerate(questions_data):
                options_data = q_data.pop('options', [])
                q_data.setdefault('order_index', index)
                question = Question.objects.create(exam=exam, **q_data)
                QuestionSerializer._write_options(question, options_data)
        return exam

    def update(self, instance, validated_data):
        # Questions are edited through the question endpoints
        validated_data.pop('questions', None)
        return super().update(instance, validated_data)

class ExamListSerializer(serializers.ModelSerializer):
    teacher_name = serializers.CharField(source='teacher.full_name', read_only=True)
    total_questions = serializers.IntegerField(source='questions.count', read_only=True)

    class Meta:
        model = Exam
        fields = [
            'id', 'title', 'description', 'teacher_name', 'duration_minutes',
            'max_violations', 'require_camera', 'start_time', 'end_time', 'total_questions'
        ]

class StudentExamSerializer(ExamListSerializer):
    """Exam paper handed to a student with an open attempt."""
    questions = StudentQuestionSerializer(many=True, read_only=True)

    class Meta(ExamListSerializer.Meta):
        fields = ExamListSerializer.Meta.fields + ['auto_submit_on_violation', 'questions']
