from django.contrib import admin

from .models import ExamAttempt, Answer, ViolationLog


class AnswerInline(admin.TabularInline):
    model = Answer
    extra = 0
    readonly_fields = ('question', 'selected_options', 'essay_answer', 'points_awarded', 'is_graded')


@admin.register(ExamAttempt)
class ExamAttemptAdmin(admin.ModelAdmin):
    list_display = ('id', 'exam', 'student', 'started_at', 'submitted_at', 'submit_trigger', 'score', 'is_flagged', 'is_cancelled')
    list_filter = ('submit_trigger', 'is_flagged', 'is_cancelled')
    inlines = [AnswerInline]


@admin.register(ViolationLog)
class ViolationLogAdmin(admin.ModelAdmin):
    list_display = ('id', 'attempt', 'violation_type', 'timestamp')
    list_filter = ('violation_type',)

    # Append-only
    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
