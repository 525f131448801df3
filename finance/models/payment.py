import uuid

from django.db import models


class Payment(models.Model):
    """
    Mirror of one processor order, keyed by the processor's order id.
    `status` is the single authority on whether access was paid for.
    """
    STATUS_CHOICES = (
        ('initiated', 'Initiated'),
        ('pending', 'Pending'),
        ('completed', 'Completed'),
        ('failed', 'Failed'),
        ('refunded', 'Refunded'),
    )

    CREDIT_STATES = (
        ('none', 'No Credit'),
        ('available', 'Available'),
        ('redeemed', 'Redeemed'),
        ('revoked', 'Revoked'),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    paypal_order_id = models.CharField(max_length=100, unique=True)
    paypal_capture_id = models.CharField(max_length=100, blank=True)

    user = models.ForeignKey(
        'users.CustomUser',
        on_delete=models.CASCADE,
        related_name='payments'
    )

    # What the payment is for (either may be empty)
    booking = models.ForeignKey(
        'finance.Booking', on_delete=models.SET_NULL, null=True, blank=True,
        related_name='payments')
    application = models.ForeignKey(
        'visas.VisaApplication', on_delete=models.SET_NULL, null=True, blank=True,
        related_name='payments')

    service_name = models.CharField(max_length=150, default='India e-Visa')
    visa_duration = models.CharField(max_length=50, blank=True)
    country = models.CharField(max_length=2, blank=True)

    # Money
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    convenience_fee = models.DecimalField(
        max_digits=10, decimal_places=2, default=0.00)
    tax_amount = models.DecimalField(
        max_digits=10, decimal_places=2, default=0.00)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default='USD')

    status = models.CharField(
        max_length=20, choices=STATUS_CHOICES, default='initiated', db_index=True)

    # Filled on capture
    payer_email = models.EmailField(max_length=255, blank=True)
    payer_name = models.CharField(max_length=200, blank=True)
    thank_you_email_sent = models.BooleanField(default=False)

    # Credit bookkeeping (payments without a target application)
    credit_state = models.CharField(
        max_length=20, choices=CREDIT_STATES, default='none')

    captured_at = models.DateTimeField(null=True, blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)
    reconciled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'finance_payment'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.paypal_order_id} - {self.total_amount} {self.currency} ({self.status})"

    @property
    def is_terminal(self):
        return self.status in ('completed', 'failed', 'refunded')
