from django.contrib.auth.models import AbstractUser
from django.db import models


class CustomUser(AbstractUser):
    """
    Portal account. Applicants sign in with their email; staff use the
    same model to reach the admin.
    """
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=20, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    # Asked by createsuperuser on top of email + password
    REQUIRED_FIELDS = ['username']

    class Meta:
        db_table = 'users_customuser'

    def __str__(self):
        return self.email

    @property
    def display_name(self):
        return self.get_full_name() or self.email
