from django.db import models


class CreditAccount(models.Model):
    """
    Per-user counter of unredeemed application credits.
    Only moved through finance.services.credits (row locked).
    """
    user = models.OneToOneField(
        'users.CustomUser',
        on_delete=models.CASCADE,
        related_name='credit_account'
    )

    available = models.PositiveIntegerField(default=0)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'finance_credit_account'

    def __str__(self):
        return f"{self.user.email} ({self.available} credit(s))"
