from django.urls import path
from .views import (
    StartExamView, StudentExamAttemptsView, AttemptDetailView, SaveAnswerView, LogViolationView, SubmitExamView,
    SubmissionListView, PendingGradingListView, SubmissionDetailView, ViolationLogListView,
    GradeAnswerView, FlagSubmissionView, CancelSubmissionView,
)

urlpatterns = [
    # --- Student Exam Flow ---
    path('exams/<int:exam_id>/start/', StartExamView.as_view(), name='start-exam'),
    path('attempts/', StudentExamAttemptsView.as_view(), name='student-attempts'),
    path('attempts/<int:pk>/', AttemptDetailView.as_view(), name='attempt-detail'),
    path('attempts/<int:pk>/answers/', SaveAnswerView.as_view(), name='attempt-answers'),
    path('attempts/<int:pk>/violations/', LogViolationView.as_view(), name='attempt-violations'),
    path('attempts/<int:pk>/submit/', SubmitExamView.as_view(), name='attempt-submit'),

    # --- Teacher Review & Grading ---
    path('teacher/submissions/', SubmissionListView.as_view(), name='submissions'),
    path('teacher/submissions/pending/', PendingGradingListView.as_view(), name='submissions-pending'),
    path('teacher/submissions/<int:pk>/', SubmissionDetailView.as_view(), name='submission-detail'),
    path('teacher/submissions/<int:pk>/violations/', ViolationLogListView.as_view(), name='submission-violations'),
    path('teacher/submissions/<int:pk>/flag/', FlagSubmissionView.as_view(), name='submission-flag'),
    path('teacher/submissions/<int:pk>/cancel/', CancelSubmissionView.as_view(), name='submission-cancel'),
    path('teacher/answers/<int:answer_id>/grade/', GradeAnswerView.as_view(), name='answer-grade'),
]
