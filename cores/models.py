from django.conf import settings
from django.core.cache import cache
from django.db import models

SETTINGS_CACHE_KEY = 'platform_settings'


class PlatformSetting(models.Model):
    """
    Platform-wide defaults, stored as a single row.

    Exams created without an explicit duration, violation limit or
    camera/auto-submit flag inherit the values held here.
    """
    site_name = models.CharField(max_length=100, default="Proctora")
    support_email = models.EmailField(default="support@proctora.local")

    default_exam_duration = models.PositiveIntegerField(default=60, help_text="Minutes")
    default_max_violations = models.PositiveIntegerField(default=3)
    default_require_camera = models.BooleanField(default=True)
    default_auto_submit_on_violation = models.BooleanField(default=True)

    class Meta:
        verbose_name = "platform settings"
        verbose_name_plural = "platform settings"

    def save(self, *args, **kwargs):
        self.pk = 1
        super().save(*args, **kwargs)
        cache.set(SETTINGS_CACHE_KEY, self)

    def delete(self, *args, **kwargs):
        # The row is permanent; deleting only drops the cached copy
        cache.delete(SETTINGS_CACHE_KEY)

    @classmethod
    def load(cls):
        obj = cache.get(SETTINGS_CACHE_KEY)
        if obj is None:
            obj, _ = cls.objects.get_or_create(pk=1)
            cache.set(SETTINGS_CACHE_KEY, obj)
        return obj

    def __str__(self):
        return self.site_name


class AuditLog(models.Model):
    class Action(models.TextChoices):
        SUBMIT = 'SUBMIT', 'Attempt submitted automatically'
        GRADE = 'GRADE', 'Essay graded'
        FLAG = 'FLAG', 'Attempt flagged'
        CANCEL = 'CANCEL', 'Result cancelled'
        SETTINGS = 'SETTINGS', 'Settings changed'

    # No actor: the platform acted on its own (deadline, violation limit)
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='audit_logs'
    )
    action = models.CharField(max_length=20, choices=Action.choices)
    target_model = models.CharField(max_length=50)
    target_object_id = models.CharField(max_length=100, blank=True, null=True)
    details = models.TextField(blank=True)
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-timestamp', '-id']
        indexes = [models.Index(fields=['target_model', 'target_object_id'], name='cores_audit_target_idx')]

    @classmethod
    def record(cls, action, target, actor=None, details=""):
        return cls.objects.create(
            actor=actor,
            action=action,
            target_model=target.__class__.__name__,
            target_object_id=str(target.pk) if target.pk is not None else None,
            details=details,
        )

    def __str__(self):
        return f"{self.actor or 'system'} {self.action} {self.target_model}#{self.target_object_id}"
