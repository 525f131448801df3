"""
Applicant eligibility for an Indian e-Visa.

Indian citizens (Indian nationality, not explicitly acquired otherwise,
holding an Indian-issued passport) cannot apply. Former citizens and
holders of a foreign passport can.
"""

INELIGIBLE_MESSAGE = (
    "Indian citizens are not eligible to apply for an Indian visa. "
    "Please select the correct service."
)

INDIA_IDENTIFIERS = ('india', 'in', 'ind', 'indian', 'republic of india', 'bharat')


def is_indian_value(value):
    if not value:
        return False
    normalized = str(value).strip().lower()
    return normalized in INDIA_IDENTIFIERS or 'india' in normalized


def check_eligibility(nationality, passport_place_of_issue, nationality_by_birth=None):
    """
    Returns (eligible, error_message).
    `nationality_by_birth` only exempts the applicant when it is exactly False.
    """
    is_indian_citizen = (
        is_indian_value(nationality)
        and nationality_by_birth is not False
        and is_indian_value(passport_place_of_issue)
    )
    if is_indian_citizen:
        return False, INELIGIBLE_MESSAGE
    return True, None


def check_application(values):
    return check_eligibility(
        values.get('nationality'),
        values.get('passport_place_of_issue'),
        values.get('nationality_by_birth'),
    )
