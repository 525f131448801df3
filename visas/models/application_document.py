import uuid

from django.db import models


def document_upload_path(instance, filename):
    return f"visa_uploads/{instance.application_id}/{instance.document_type}/{filename}"


class ApplicationDocument(models.Model):
    DOCUMENT_TYPES = (
        ('photo', 'Photo'),
        ('passport', 'Passport Scan'),
        ('business_card', 'Business Card'),
        ('invitation_letter', 'Invitation Letter'),
        ('hospital_letter', 'Hospital Letter'),
        ('conference_docs', 'Conference Documents'),
        ('other', 'Other'),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    application = models.ForeignKey(
        'visas.VisaApplication',
        on_delete=models.CASCADE,
        related_name='documents'
    )

    document_type = models.CharField(max_length=30, choices=DOCUMENT_TYPES)
    file = models.FileField(upload_to=document_upload_path)

    file_name = models.CharField(max_length=255)
    mime_type = models.CharField(max_length=100, blank=True)
    file_size = models.PositiveIntegerField(default=0)

    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'visas_application_document'
        ordering = ['uploaded_at']

    def __str__(self):
        return f"{self.get_document_type_display()} - {self.file_name}"
