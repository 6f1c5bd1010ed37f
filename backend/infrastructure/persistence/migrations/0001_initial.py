import uuid

import django.core.serializers.json
import django.db.models.deletion
import simple_history.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('timestamp', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='Timestamp')),
                ('user_id', models.CharField(db_index=True, max_length=150, verbose_name='User ID')),
                ('user_name', models.CharField(blank=True, max_length=255, verbose_name='User name')),
                ('action', models.CharField(choices=[('create', 'Create'), ('update', 'Update'), ('delete', 'Delete'), ('archive', 'Archive'), ('status_transition', 'Status transition'), ('approve', 'Approve'), ('freeze', 'Freeze'), ('generate_document', 'Generate document'), ('amendment', 'Amendment'), ('emergency_unlock', 'Emergency unlock'), ('import', 'Import')], db_index=True, max_length=30, verbose_name='Action')),
                ('entity_type', models.CharField(db_index=True, max_length=100, verbose_name='Entity type')),
                ('entity_id', models.CharField(db_index=True, max_length=100, verbose_name='Entity ID')),
                ('description', models.TextField(verbose_name='Description')),
                ('before', models.JSONField(blank=True, encoder=django.core.serializers.json.DjangoJSONEncoder, null=True, verbose_name='Before')),
                ('after', models.JSONField(blank=True, encoder=django.core.serializers.json.DjangoJSONEncoder, null=True, verbose_name='After')),
                ('metadata', models.JSONField(blank=True, encoder=django.core.serializers.json.DjangoJSONEncoder, null=True, verbose_name='Metadata')),
            ],
            options={
                'verbose_name': 'Audit log entry',
                'verbose_name_plural': 'Audit log',
                'db_table': 'audit_log',
                'ordering': ['timestamp'],
                'indexes': [
                    models.Index(fields=['entity_type', 'entity_id'], name='audit_log_entity__7c1f0e_idx'),
                    models.Index(fields=['action', 'timestamp'], name='audit_log_action_3b9d2a_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='SystemSetting',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('key', models.CharField(max_length=100, unique=True, verbose_name='Key')),
                ('value', models.JSONField(default=dict, verbose_name='Value')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
                ('updated_by', models.CharField(blank=True, max_length=150, verbose_name='Updated by')),
            ],
            options={
                'verbose_name': 'System setting',
                'verbose_name_plural': 'System settings',
                'db_table': 'system_settings',
                'ordering': ['key'],
            },
        ),
        migrations.CreateModel(
            name='ProjectRecord',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
                ('deleted_at', models.DateTimeField(blank=True, null=True, verbose_name='Deleted at')),
                ('deleted_by', models.CharField(blank=True, default='', max_length=150, verbose_name='Deleted by')),
                ('version', models.PositiveIntegerField(default=1, verbose_name='Version')),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False, verbose_name='ID')),
                ('project_number', models.CharField(db_index=True, max_length=30, unique=True, verbose_name='Project number')),
                ('title', models.CharField(max_length=255, verbose_name='Title')),
                ('project_type', models.CharField(choices=[('new_build', 'New Build'), ('refit', 'Refit'), ('maintenance', 'Maintenance')], db_index=True, default='new_build', max_length=20, verbose_name='Type')),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('quoted', 'Quoted'), ('offer_sent', 'Offer Sent'), ('order_confirmed', 'Order Confirmed'), ('in_production', 'In Production'), ('ready_for_delivery', 'Ready for Delivery'), ('delivered', 'Delivered'), ('closed', 'Closed')], db_index=True, default='draft', max_length=30, verbose_name='Status')),
                ('client_id', models.CharField(db_index=True, max_length=100, verbose_name='Client')),
                ('archived_at', models.DateTimeField(blank=True, null=True, verbose_name='Archived at')),
                ('document', models.JSONField(default=dict, verbose_name='Aggregate document')),
            ],
            options={
                'verbose_name': 'Project',
                'verbose_name_plural': 'Projects',
                'db_table': 'projects',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'project_type'], name='projects_status_5e2c8b_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='HistoricalProjectRecord',
            fields=[
                ('created_at', models.DateTimeField(blank=True, editable=False, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(blank=True, editable=False, verbose_name='Updated at')),
                ('deleted_at', models.DateTimeField(blank=True, null=True, verbose_name='Deleted at')),
                ('deleted_by', models.CharField(blank=True, default='', max_length=150, verbose_name='Deleted by')),
                ('version', models.PositiveIntegerField(default=1, verbose_name='Version')),
                ('id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, verbose_name='ID')),
                ('project_number', models.CharField(db_index=True, max_length=30, verbose_name='Project number')),
                ('title', models.CharField(max_length=255, verbose_name='Title')),
                ('project_type', models.CharField(choices=[('new_build', 'New Build'), ('refit', 'Refit'), ('maintenance', 'Maintenance')], db_index=True, default='new_build', max_length=20, verbose_name='Type')),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('quoted', 'Quoted'), ('offer_sent', 'Offer Sent'), ('order_confirmed', 'Order Confirmed'), ('in_production', 'In Production'), ('ready_for_delivery', 'Ready for Delivery'), ('delivered', 'Delivered'), ('closed', 'Closed')], db_index=True, default='draft', max_length=30, verbose_name='Status')),
                ('client_id', models.CharField(db_index=True, max_length=100, verbose_name='Client')),
                ('archived_at', models.DateTimeField(blank=True, null=True, verbose_name='Archived at')),
                ('document', models.JSONField(default=dict, verbose_name='Aggregate document')),
                ('history_id', models.AutoField(primary_key=True, serialize=False)),
                ('history_date', models.DateTimeField(db_index=True)),
                ('history_change_reason', models.CharField(max_length=100, null=True)),
                ('history_type', models.CharField(choices=[('+', 'Created'), ('~', 'Changed'), ('-', 'Deleted')], max_length=1)),
                ('history_user', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'historical Project',
                'verbose_name_plural': 'historical Projects',
                'ordering': ('-history_date', '-history_id'),
                'get_latest_by': ('history_date', 'history_id'),
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
    ]
