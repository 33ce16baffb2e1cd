from rest_framework import serializers

from .models import AuditLog, PlatformSetting


class PlatformSettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = PlatformSetting
        exclude = ['id']

    def validate_default_exam_duration(self, value):
        if value < 1:
            raise serializers.ValidationError("Exams must last at least one minute.")
        return value

    def validate_default_max_violations(self, value):
        if value < 1:
            raise serializers.ValidationError("At least one violation must be allowed before auto-submit.")
        return value


class AuditLogSerializer(serializers.ModelSerializer):
    actor_email = serializers.EmailField(source='actor.email', read_only=True, default=None)
    action_label = serializers.CharField(source='get_action_display', read_only=True)

    class Meta:
        model = AuditLog
        fields = ['id', 'actor', 'actor_email', 'action', 'action_label', 'target_model', 'target_object_id', 'details', 'timestamp']
