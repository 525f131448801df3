import uuid

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
            name='AuditEvent',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('action', models.CharField(choices=[('application_created', 'Application Created'), ('application_submitted', 'Application Submitted'), ('application_status_changed', 'Application Status Changed'), ('document_uploaded', 'Document Uploaded'), ('booking_created', 'Booking Created'), ('payment_initiated', 'Payment Initiated'), ('payment_captured', 'Payment Captured'), ('payment_failed', 'Payment Failed'), ('payment_refunded', 'Payment Refunded'), ('credit_granted', 'Credit Granted'), ('credit_redeemed', 'Credit Redeemed'), ('credit_revoked', 'Credit Revoked'), ('webhook_received', 'Webhook Received')], max_length=50)),
                ('entity_type', models.CharField(choices=[('application', 'Application'), ('booking', 'Booking'), ('payment', 'Payment'), ('credit', 'Credit'), ('webhook', 'Webhook')], max_length=20)),
                ('entity_id', models.CharField(db_index=True, max_length=64)),
                ('changes', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_events', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'core_audit_event',
                'ordering': ['-created_at'],
            },
        ),
    ]
