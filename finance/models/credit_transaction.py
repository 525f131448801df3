from django.db import models


class CreditTransaction(models.Model):
    TYPES = (
        ('grant', 'Grant (Payment Captured)'),   # Credit In
        ('redeem', 'Redeem (New Application)'),  # Credit Out
        ('revoke', 'Revoke (Payment Refunded)'), # Credit Out
    )

    # 1. Links
    account = models.ForeignKey(
        'finance.CreditAccount',
        on_delete=models.PROTECT,
        related_name='transactions'
    )

    payment = models.ForeignKey(
        'finance.Payment', on_delete=models.SET_NULL, null=True, blank=True,
        related_name='credit_transactions')
    application = models.ForeignKey(
        'visas.VisaApplication', on_delete=models.SET_NULL, null=True, blank=True,
        related_name='credit_transactions')

    # 2. Movement
    transaction_type = models.CharField(max_length=20, choices=TYPES)
    amount = models.IntegerField(help_text="Credits moved (+/-)")
    balance_after = models.PositiveIntegerField(help_text="Available snapshot")

    description = models.CharField(max_length=255)

    # 3. Audit
    created_at = models.DateTimeField(auto_now_add=True)
    created_by = models.ForeignKey(
        'users.CustomUser',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='performed_credit_transactions'
    )

    class Meta:
        db_table = 'finance_credit_transaction'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.transaction_type}: {self.amount} ({self.created_at.date()})"
