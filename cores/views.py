import logging

from rest_framework import generics
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import AuditLog, PlatformSetting
from .serializers import AuditLogSerializer, PlatformSettingSerializer

logger = logging.getLogger(__name__)


class PlatformSettingView(APIView):
    """
    Read or change the platform defaults.
    Payload (partial): { "default_max_violations": 5 }
    """
    permission_classes = [IsAdminUser]

    def get(self, request):
        return Response(PlatformSettingSerializer(PlatformSetting.load()).data)

    def put(self, request):
        current = PlatformSetting.load()
        serializer = PlatformSettingSerializer(current, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        changed = sorted(
            name for name, value in serializer.validated_data.items() if getattr(current, name) != value
        )
        platform = serializer.save()
        if changed:
            AuditLog.record(
                AuditLog.Action.SETTINGS, platform, actor=request.user, details=f"Changed: {', '.join(changed)}"
            )
            logger.info("Platform settings %s changed by user %s", changed, request.user.pk)
        return Response(serializer.data)


class AuditLogListView(generics.ListAPIView):
    """Audit trail. Filter with ?action=GRADE, ?target_model=ExamAttempt&target_id=12."""
    serializer_class = AuditLogSerializer
    permission_classes = [IsAdminUser]

    def get_queryset(self):
        queryset = AuditLog.objects.select_related('actor')
        params = self.request.query_params
        if params.get('action'):
            queryset = queryset.filter(action=params['action'].upper())
        if params.get('target_model'):
            queryset = queryset.filter(target_model=params['target_model'])
        if params.get('target_id'):
            queryset = queryset.filter(target_object_id=params['target_id'])
        return queryset
