from django import forms
from django.contrib.auth import authenticate
from django.core.exceptions import ValidationError


class TokenRequestForm(forms.Form):
    """
    Validates an email/password pair and exposes the authenticated user.
    """
    email = forms.EmailField(max_length=255)
    password = forms.CharField(strip=False)

    def clean(self):
        cleaned_data = super().clean()
        email = cleaned_data.get('email')
        password = cleaned_data.get('password')

        if email and password:
            user = authenticate(username=email, password=password)
            if user is None or not user.is_active:
                raise ValidationError("Invalid email or password.", code='invalid_login')
            self.user = user
        return cleaned_data
