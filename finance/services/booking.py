import logging

from django.db import DatabaseError, transaction
from django.utils.dateparse import parse_date

from core.exceptions import StorageError, ValidationFailed
from core.services.audit import log_event
from ..models import Booking, Traveler
from .pricing import normalize_duration, quote

logger = logging.getLogger(__name__)


def _traveler_date_of_birth(traveler):
    """Either `date_of_birth` or the three dob_* parts."""
    raw = traveler.get('date_of_birth')
    try:
        if not raw and all(traveler.get(k) for k in ('dob_year', 'dob_month', 'dob_day')):
            raw = f"{int(traveler['dob_year']):04d}-{int(traveler['dob_month']):02d}-{int(traveler['dob_day']):02d}"
        return parse_date(str(raw)) if raw else None
    except (TypeError, ValueError):
        return None


def validate_booking_request(data):
    """
    Returns (contact, travelers) or raises ValidationFailed listing
    every problem with its traveler index.
    """
    issues = []
    email = str(data.get('email') or '').strip()
    phone = str(data.get('phone') or '').strip()
    if not email:
        issues.append({'field': 'email', 'message': 'Please enter your email address'})
    if not phone:
        issues.append({'field': 'phone', 'message': 'Please enter your phone number'})

    travelers = data.get('travelers')
    if not isinstance(travelers, list) or not travelers:
        issues.append({'field': 'travelers', 'message': 'At least one traveler is required'})
        travelers = []

    cleaned = []
    for i, traveler in enumerate(travelers, start=1):
        if not isinstance(traveler, dict):
            issues.append({'field': f'travelers[{i}]', 'message': f'Invalid data for Traveler {i}'})
            continue

        full_name = str(traveler.get('full_name') or '').strip()
        passport_number = str(traveler.get('passport_number') or '').strip()
        gender = str(traveler.get('gender') or '').strip()
        nationality = str(traveler.get('nationality') or data.get('nationality') or '').strip()
        date_of_birth = _traveler_date_of_birth(traveler)

        if not full_name:
            issues.append({'field': f'travelers[{i}].full_name',
                           'message': f'Please enter full name for Traveler {i}'})
        if not passport_number:
            issues.append({'field': f'travelers[{i}].passport_number',
                           'message': f'Please enter passport number for Traveler {i}'})
        if date_of_birth is None:
            issues.append({'field': f'travelers[{i}].date_of_birth',
                           'message': f'Please enter date of birth for Traveler {i}'})
        if not gender:
            issues.append({'field': f'travelers[{i}].gender',
                           'message': f'Please select gender for Traveler {i}'})
        if not nationality:
            issues.append({'field': f'travelers[{i}].nationality',
                           'message': f'Please select nationality for Traveler {i}'})

        cleaned.append({
            'full_name': full_name[:150],
            'passport_number': passport_number[:20],
            'date_of_birth': date_of_birth,
            'gender': gender[:10],
            'nationality': nationality[:100],
            'email': str(traveler.get('email') or email).strip()[:255],
            'phone': str(traveler.get('phone') or phone).strip()[:30],
        })

    if issues:
        raise ValidationFailed('Validation failed', details=issues)

    return {'email': email, 'phone': phone}, cleaned


def create_booking(user, data):
    """
    One Booking + N Travelers, all or nothing.
    """
    contact, travelers = validate_booking_request(data)

    duration = normalize_duration(data.get('duration') or data.get('visa_type'))
    currency, unit_price, total = quote(
        duration, data.get('country_code'), len(travelers))

    try:
        with transaction.atomic():
            booking = Booking.objects.create(
                user=user,
                visa_type=duration,
                nationality=str(data.get('nationality') or '')[:100],
                contact_email=contact['email'],
                contact_phone=contact['phone'],
                total_travelers=len(travelers),
                price_per_traveler=unit_price,
                total_amount=total,
                currency=currency,
                payment_status='pending',
            )
            Traveler.objects.bulk_create([
                Traveler(booking=booking, **traveler) for traveler in travelers
            ])
            log_event(
                'booking_created', 'booking', booking.id, user=user,
                changes={'travelers': len(travelers), 'total': str(total), 'currency': currency}
            )
    except DatabaseError as e:
        logger.exception(f"Booking creation failed for user {user.pk}: {e}")
        raise StorageError('Failed to create booking. Please try again.')

    logger.info(
        f"Booking {booking.id} created: {len(travelers)} traveler(s), {total} {currency}")
    return booking
