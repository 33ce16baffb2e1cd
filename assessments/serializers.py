from django.utils import timezone
from rest_framework import serializers

from exams.serializers import ExamListSerializer, StudentExamSerializer, QuestionSerializer
from .models import ExamAttempt, Answer, ViolationLog
from .services.grading import is_fully_graded, max_score, percentage
from .services.violations import count_violations

# --- Student side ---

class AnswerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Answer
        fields = ['id', 'question', 'selected_options', 'essay_answer', 'points_awarded', 'is_graded', 'grader_comment', 'updated_at']
        read_only_fields = fields

class AnswerWriteSerializer(serializers.Serializer):
    question_id = serializers.IntegerField()
    selected_options = serializers.ListField(child=serializers.CharField(), required=False, allow_null=True)
    essay_answer = serializers.CharField(required=False, allow_blank=True, allow_null=True)

class ViolationLogSerializer(serializers.ModelSerializer):
    type = serializers.CharField(source='violation_type', read_only=True)

    class Meta:
        model = ViolationLog
        fields = ['id', 'type', 'timestamp', 'details']

class ViolationWriteSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=ViolationLog.ViolationType.choices)
    details = serializers.CharField(required=False, allow_blank=True, default="")

class SubmitSerializer(serializers.Serializer):
    # The violation threshold trigger is only ever raised server-side
    trigger = serializers.ChoiceField(
        choices=[ExamAttempt.SubmitTrigger.MANUAL, ExamAttempt.SubmitTrigger.TIMEOUT],
        default=ExamAttempt.SubmitTrigger.MANUAL,
    )

class ExamAttemptSerializer(serializers.ModelSerializer):
    """Lightweight serializer for lists / dashboard history."""
    exam = ExamListSerializer(read_only=True)
    status = serializers.CharField(read_only=True)

    class Meta:
        model = ExamAttempt
        fields = [
            'id', 'exam', 'status', 'started_at', 'submitted_at', 'submit_trigger',
            'score', 'is_flagged', 'is_cancelled', 'cancel_reason'
        ]
        read_only_fields = fields

class ActiveAttemptSerializer(ExamAttemptSerializer):
    """Heavy serializer for taking the exam. Includes the questions and saved answers."""
    exam = StudentExamSerializer(read_only=True)
    answers = AnswerSerializer(many=True, read_only=True)
    deadline = serializers.DateTimeField(read_only=True)
    remaining_seconds = serializers.SerializerMethodField()
    violation_count = serializers.SerializerMethodField()

    class Meta(ExamAttemptSerializer.Meta):
        fields = ExamAttemptSerializer.Meta.fields + ['deadline', 'remaining_seconds', 'violation_count', 'answers']
        read_only_fields = fields

    def get_remaining_seconds(self, obj):
        return obj.remaining_seconds(timezone.now())

    def get_violation_count(self, obj):
        return count_violations(obj.id)

class ScoreReportSerializer(serializers.Serializer):
    attempt = ExamAttemptSerializer(read_only=True)
    score = serializers.DecimalField(max_digits=9, decimal_places=2, read_only=True)
    max_score = serializers.DecimalField(max_digits=9, decimal_places=2, read_only=True)
    percentage = serializers.IntegerField(read_only=True)
    fully_graded = serializers.BooleanField(read_only=True)

class SubmissionResultSerializer(ScoreReportSerializer):
    already_submitted = serializers.BooleanField(read_only=True)

class ViolationResultSerializer(serializers.Serializer):
    logged = serializers.BooleanField(read_only=True)
    violation_count = serializers.IntegerField(read_only=True)
    max_violations = serializers.IntegerField(read_only=True)
    entry = ViolationLogSerializer(read_only=True, allow_null=True)
    auto_submitted = serializers.BooleanField(read_only=True)
    submission = SubmissionResultSerializer(read_only=True, allow_null=True)

# --- Teacher side ---

class StudentSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    email = serializers.EmailField()
    full_name = serializers.CharField()

class SubmissionSerializer(serializers.ModelSerializer):
    exam_id = serializers.IntegerField(read_only=True)
    exam_title = serializers.CharField(source='exam.title', read_only=True)
    student = StudentSummarySerializer(read_only=True)
    status = serializers.CharField(read_only=True)
    max_score = serializers.SerializerMethodField()
    percentage = serializers.SerializerMethodField()
    violations_count = serializers.SerializerMethodField()
    fully_graded = serializers.SerializerMethodField()

    class Meta:
        model = ExamAttempt
        fields = [
            'id', 'exam_id', 'exam_title', 'student', 'status', 'started_at', 'submitted_at',
            'submit_trigger', 'score', 'max_score', 'percentage', 'fully_graded', 'violations_count',
            'is_flagged', 'flag_reason', 'is_cancelled', 'cancel_reason'
        ]
        read_only_fields = fields

    def get_max_score(self, obj):
        return max_score(obj.exam.questions.all())

    def get_percentage(self, obj):
        return percentage(obj.score, self.get_max_score(obj))

    def get_violations_count(self, obj):
        annotated = getattr(obj, 'violations_count', None)
        return annotated if annotated is not None else count_violations(obj.id)

    def get_fully_graded(self, obj):
        return obj.is_submitted and is_fully_graded(obj.answers.all())

class GradedAnswerSerializer(serializers.ModelSerializer):
    question = QuestionSerializer(read_only=True)

    class Meta:
        model = Answer
        fields = ['id', 'question', 'selected_options', 'essay_answer', 'points_awarded', 'is_graded', 'grader_comment', 'updated_at']
        read_only_fields = fields

class SubmissionDetailSerializer(SubmissionSerializer):
    answers = GradedAnswerSerializer(many=True, read_only=True)
    violations = ViolationLogSerializer(many=True, read_only=True)

    class Meta(SubmissionSerializer.Meta):
        fields = SubmissionSerializer.Meta.fields + ['answers', 'violations']
        read_only_fields = fields

class GradeSerializer(serializers.Serializer):
    # Range and precision are checked by grade_essay, which rounds to cents
    points = serializers.CharField()
    comment = serializers.CharField(required=False, allow_blank=True, default="")

class FlagSerializer(serializers.Serializer):
    is_flagged = serializers.BooleanField()
    reason = serializers.CharField(required=False, allow_blank=True, default="")

class CancelSerializer(serializers.Serializer):
    reason = serializers.CharField()
