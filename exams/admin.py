from django.contrib import admin

from .models import Exam, Question, Option


class OptionInline(admin.TabularInline):
    model = Option
    extra = 0


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ('id', 'exam', 'question_type', 'points', 'order_index')
    list_filter = ('question_type',)
    inlines = [OptionInline]


@admin.register(Exam)
class ExamAdmin(admin.ModelAdmin):
    list_display = ('id', 'title', 'teacher', 'access_key', 'is_published', 'duration_minutes')
    list_filter = ('is_published',)
    search_fields = ('title', 'access_key')
