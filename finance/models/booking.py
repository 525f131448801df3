import uuid

from django.db import models


class Booking(models.Model):
    """
    A multi-traveler visa purchase. Paid by one Payment.
    """
    PAYMENT_STATUS_CHOICES = (
        ('pending', 'Pending'),
        ('paid', 'Paid'),
        ('failed', 'Failed'),
        ('refunded', 'Refunded'),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        'users.CustomUser',
        on_delete=models.CASCADE,
        related_name='bookings'
    )

    # What was bought
    visa_type = models.CharField(max_length=50, default='30_days')
    nationality = models.CharField(max_length=100, blank=True)
    contact_email = models.EmailField(max_length=255)
    contact_phone = models.CharField(max_length=30)

    # Money (frozen at booking time)
    total_travelers = models.PositiveIntegerField(default=1)
    price_per_traveler = models.DecimalField(
        max_digits=10, decimal_places=2, default=0.00)
    total_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=0.00)
    currency = models.CharField(max_length=3, default='USD')

    payment_status = models.CharField(
        max_length=20, choices=PAYMENT_STATUS_CHOICES, default='pending')
    payment_transaction_id = models.CharField(max_length=100, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'finance_booking'
        ordering = ['-created_at']

    def __str__(self):
        return f"Booking {str(self.id)[:8]} - {self.total_travelers} traveler(s) ({self.total_amount} {self.currency})"


class Traveler(models.Model):
    STATUS_CHOICES = (
        ('pending', 'Pending'),
        ('under_review', 'Under Review'),
        ('approved', 'Approved'),
        ('rejected', 'Rejected'),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    booking = models.ForeignKey(
        Booking,
        on_delete=models.CASCADE,
        related_name='travelers'
    )

    full_name = models.CharField(max_length=150)
    passport_number = models.CharField(max_length=20)
    date_of_birth = models.DateField()
    gender = models.CharField(max_length=10)
    nationality = models.CharField(max_length=100)
    email = models.EmailField(max_length=255, blank=True)
    phone = models.CharField(max_length=30, blank=True)

    application_status = models.CharField(
        max_length=20, choices=STATUS_CHOICES, default='pending')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'finance_traveler'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.full_name} ({self.passport_number})"
