from decimal import Decimal

USA_COUNTRIES = ['US']
UK_COUNTRIES = ['GB']
EUROPE_COUNTRIES = [
    'AT', 'BE', 'BG', 'HR', 'CY', 'CZ', 'DK', 'EE', 'FI', 'FR', 'DE', 'GR',
    'HU', 'IE', 'IT', 'LV', 'LT', 'LU', 'MT', 'NL', 'PL', 'PT', 'RO', 'SK',
    'SI', 'ES', 'SE', 'NO', 'CH', 'IS',
]

DEFAULT_DURATION = '30_days'

# Price per traveler by visa duration and currency
VISA_PRICES = {
    '30_days': {'USD': Decimal('49.90'), 'GBP': Decimal('39.90'), 'EUR': Decimal('39.90')},
    '1_year': {'USD': Decimal('75.00'), 'GBP': Decimal('65.00'), 'EUR': Decimal('65.00')},
    '5_years': {'USD': Decimal('125.00'), 'GBP': Decimal('115.00'), 'EUR': Decimal('115.00')},
}


def normalize_duration(duration):
    """'30 days' and '30_days' are the same product."""
    key = (duration or '').strip().lower().replace(' ', '_')
    return key if key in VISA_PRICES else DEFAULT_DURATION


def currency_for_country(country_code):
    if not country_code:
        return 'USD'
    code = country_code.strip().upper()
    if code in USA_COUNTRIES:
        return 'USD'
    if code in UK_COUNTRIES:
        return 'GBP'
    if code == 'EU' or code in EUROPE_COUNTRIES:
        return 'EUR'
    # Rest of world
    return 'USD'


def price_per_traveler(duration, currency):
    prices = VISA_PRICES[normalize_duration(duration)]
    return prices.get(currency, prices['USD'])


def quote(duration, country_code=None, travelers=1):
    """
    Returns (currency, unit_price, total) for a purchase.
    """
    currency = currency_for_country(country_code)
    unit_price = price_per_traveler(duration, currency)
    return currency, unit_price, unit_price * max(int(travelers), 1)
