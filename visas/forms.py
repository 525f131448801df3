import os
import re

from django import forms
from django.conf import settings
from django.core.exceptions import ValidationError
from django.utils.dateparse import parse_date
from django.utils.translation import gettext_lazy as _

from .models import ApplicationDocument
from .schema import (
    BOOL, CHOICE, DATE, EMAIL, FIELDS, STRING_LIST, TEXT, UUID, is_blank
)

ISO_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


# ==========================================
# 1. FIELD TYPES (JSON payload values)
# ==========================================

class IsoDateField(forms.Field):
    """Accepts only `YYYY-MM-DD` strings."""

    def to_python(self, value):
        if value in self.empty_values:
            return None
        if not isinstance(value, str) or not ISO_DATE_RE.match(value.strip()):
            raise ValidationError(_("Invalid date format (YYYY-MM-DD)"), code='invalid_date')
        try:
            parsed = parse_date(value.strip())
        except ValueError:
            parsed = None
        if parsed is None:
            raise ValidationError(_("Invalid date"), code='invalid_date')
        return parsed


class StrictBooleanField(forms.Field):
    """
    Only a real JSON boolean (or null, meaning "not supplied") is
    accepted; strings such as "yes" or "false" are rejected.
    """

    def to_python(self, value):
        if value is None or isinstance(value, bool):
            return value
        raise ValidationError(_("Expected true or false"), code='invalid')


class StrictTextMixin:
    """JSON strings only; numbers or lists are never coerced to text."""

    def to_python(self, value):
        if value is not None and not isinstance(value, str):
            raise ValidationError(_("Expected a string"), code='invalid')
        return super().to_python(value)


class StrictCharField(StrictTextMixin, forms.CharField):
    pass


class StrictEmailField(StrictTextMixin, forms.EmailField):
    pass


class StringListField(forms.Field):

    def __init__(self, *, item_max_length=None, **kwargs):
        self.item_max_length = item_max_length
        super().__init__(**kwargs)

    def to_python(self, value):
        if value in self.empty_values:
            return []
        if not isinstance(value, (list, tuple)):
            raise ValidationError(_("Expected a list of strings"), code='invalid_list')

        items = []
        for item in value:
            if not isinstance(item, str):
                raise ValidationError(_("Expected a list of strings"), code='invalid_list')
            item = item.strip()
            if not item:
                continue
            if self.item_max_length and len(item) > self.item_max_length:
                raise ValidationError(
                    _("Each entry must be at most %(max)d characters"),
                    code='max_length',
                    params={'max': self.item_max_length},
                )
            items.append(item)
        return items


def build_form_field(spec, creating=False):
    if spec.kind == TEXT:
        return StrictCharField(max_length=spec.max_length, required=False)
    if spec.kind == EMAIL:
        return StrictEmailField(max_length=spec.max_length, required=creating)
    if spec.kind == DATE:
        return IsoDateField(required=False)
    if spec.kind == BOOL:
        return StrictBooleanField(required=False)
    if spec.kind == CHOICE:
        choices = [('', '')] + [(c, c) for c in spec.choices]
        return forms.ChoiceField(choices=choices, required=False)
    if spec.kind == UUID:
        return forms.UUIDField(required=False)
    if spec.kind == STRING_LIST:
        return StringListField(item_max_length=spec.max_length, required=False)
    raise ValueError(f"Unknown field kind: {spec.kind}")


# ==========================================
# 2. DRAFT PAYLOAD (Validation Gateway)
# ==========================================

class DraftPayloadForm(forms.Form):
    """
    Validates a partial application payload.

    Every schema field is optional except `email` on creation. Keys
    outside the schema (status, is_locked, ...) are ignored.
    """

    def __init__(self, data, creating=False):
        super().__init__(data)
        self.creating = creating
        for spec in FIELDS:
            self.fields[spec.name] = build_form_field(spec, creating=creating)

    def sparse_update(self):
        """
        Only keys present in the payload with a non-empty cleaned value.
        Absent or empty keys never touch stored values.
        """
        return {
            name: value
            for name, value in self.cleaned_data.items()
            if name in self.data and not is_blank(value)
        }

    def issues(self):
        """Field errors as a flat list the client can map onto inputs."""
        return [
            {'field': field, 'message': error['message'], 'code': error['code']}
            for field, errors in self.errors.get_json_data().items()
            for error in errors
        ]


# ==========================================
# 3. DOCUMENT UPLOAD
# ==========================================

class ApplicationDocumentForm(forms.ModelForm):

    class Meta:
        model = ApplicationDocument
        fields = ['document_type', 'file']

    def clean_file(self):
        file = self.cleaned_data.get('file')
        if file:
            max_bytes = settings.DOCUMENT_MAX_UPLOAD_MB * 1024 * 1024
            if file.size > max_bytes:
                raise ValidationError(
                    _(f"File too large. Max size is {settings.DOCUMENT_MAX_UPLOAD_MB}MB."))

            ext = os.path.splitext(file.name)[1].lower()
            if ext not in ['.pdf', '.jpg', '.jpeg', '.png']:
                raise ValidationError(
                    _("Unsupported file extension. Use PDF, JPG, or PNG."))
        return file
