import uuid

from django.db import models


class ApplicationSnapshot(models.Model):
    """
    Frozen copy of an application taken at submission time.
    Written once, never updated.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    application = models.OneToOneField(
        'visas.VisaApplication',
        on_delete=models.PROTECT,
        related_name='snapshot'
    )

    snapshot_data = models.JSONField()
    document_urls = models.JSONField(default=list, blank=True)

    # What funded the application at that instant
    payment = models.ForeignKey(
        'finance.Payment', on_delete=models.SET_NULL, null=True, blank=True,
        related_name='snapshots')
    booking = models.ForeignKey(
        'finance.Booking', on_delete=models.SET_NULL, null=True, blank=True,
        related_name='snapshots')

    submitted_at = models.DateTimeField()
    submitted_by = models.ForeignKey(
        'users.CustomUser',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='submitted_snapshots'
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'visas_application_snapshot'

    def __str__(self):
        return f"Snapshot of {self.application_id} ({self.submitted_at:%Y-%m-%d %H:%M})"
