from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),

    # --- Authentication ---
    path('api/auth/', include('users.urls')),

    # --- Platform Settings & Audit (staff) ---
    path('api/admin/', include('cores.urls')),

    # --- Exam Taking & Grading ---
    path('api/', include('assessments.urls')),

    # --- Exam Authoring ---
    path('api/', include('exams.urls')),
]
