import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='PlatformSetting',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('site_name', models.CharField(default='Proctora', max_length=100)),
                ('support_email', models.EmailField(default='support@proctora.local', max_length=254)),
                ('default_exam_duration', models.PositiveIntegerField(default=60, help_text='Minutes')),
                ('default_max_violations', models.PositiveIntegerField(default=3)),
                ('default_require_camera', models.BooleanField(default=True)),
                ('default_auto_submit_on_violation', models.BooleanField(default=True)),
            ],
            options={
                'verbose_name': 'platform settings',
                'verbose_name_plural': 'platform settings',
            },
        ),
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('SUBMIT', 'Attempt submitted automatically'), ('GRADE', 'Essay graded'), ('FLAG', 'Attempt flagged'), ('CANCEL', 'Result cancelled'), ('SETTINGS', 'Settings changed')], max_length=20)),
                ('target_model', models.CharField(max_length=50)),
                ('target_object_id', models.CharField(blank=True, max_length=100, null=True)),
                ('details', models.TextField(blank=True)),
                ('timestamp', models.DateTimeField(auto_now_add=True)),
                ('actor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-timestamp', '-id'],
                'indexes': [models.Index(fields=['target_model', 'target_object_id'], name='cores_audit_target_idx')],
            },
        ),
    ]
