import uuid

from django.db import models


class AuditEvent(models.Model):
    """
    Append-only log of state transitions (submissions, payment captures,
    status changes, credit movements). Written by the services, read by
    the admin.
    """
    ACTION_CHOICES = (
        ('application_created', 'Application Created'),
        ('application_submitted', 'Application Submitted'),
        ('application_status_changed', 'Application Status Changed'),
        ('document_uploaded', 'Document Uploaded'),
        ('booking_created', 'Booking Created'),
        ('payment_initiated', 'Payment Initiated'),
        ('payment_captured', 'Payment Captured'),
        ('payment_failed', 'Payment Failed'),
        ('payment_refunded', 'Payment Refunded'),
        ('credit_granted', 'Credit Granted'),
        ('credit_redeemed', 'Credit Redeemed'),
        ('credit_revoked', 'Credit Revoked'),
        ('webhook_received', 'Webhook Received'),
    )

    ENTITY_CHOICES = (
        ('application', 'Application'),
        ('booking', 'Booking'),
        ('payment', 'Payment'),
        ('credit', 'Credit'),
        ('webhook', 'Webhook'),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    entity_type = models.CharField(max_length=20, choices=ENTITY_CHOICES)
    entity_id = models.CharField(max_length=64, db_index=True)

    # Who triggered it (NULL for processor webhooks / system actions)
    user = models.ForeignKey(
        'users.CustomUser',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_events'
    )

    changes = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'core_audit_event'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.action} {self.entity_type}:{self.entity_id}"
