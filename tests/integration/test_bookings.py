from decimal import Decimal

import pytest
from django.urls import reverse

from finance.models import Booking

pytestmark = pytest.mark.django_db


def traveler(**overrides):
    data = {
        'full_name': 'Alice Walker',
        'passport_number': '123456789',
        'date_of_birth': '1990-04-12',
        'gender': 'female',
        'nationality': 'United Kingdom',
    }
    data.update(overrides)
    return data


def book(client, payload):
    return client.post(reverse('finance:api_booking_create'), payload, content_type='application/json')


def test_booking_with_travelers(api_client, user):
    response = book(api_client, {
        'duration': '1 year',
        'country_code': 'GB',
        'email': 'alice@example.com',
        'phone': '447700900123',
        'travelers': [
            traveler(),
            traveler(full_name='Tom Walker', date_of_birth=None,
                     dob_year='2015', dob_month='6', dob_day='3'),
        ],
    })

    assert response.status_code == 201
    data = response.json()['data']
    assert data['total_travelers'] == 2
    assert data['currency'] == 'GBP'
    assert data['total_amount'] == '130.00'

    booking = Booking.objects.get(pk=data['id'])
    assert booking.user == user
    assert booking.visa_type == '1_year'
    assert booking.price_per_traveler == Decimal('65.00')
    assert sorted(str(t.date_of_birth) for t in booking.travelers.all()) == ['1990-04-12', '2015-06-03']


def test_problems_are_reported_per_traveler(api_client):
    response = book(api_client, {
        'email': 'alice@example.com',
        'phone': '',
        'travelers': [traveler(), traveler(full_name='', gender='')],
    })

    assert response.status_code == 400
    messages = [issue['message'] for issue in response.json()['details']]
    assert messages == [
        'Please enter your phone number',
        'Please enter full name for Traveler 2',
        'Please select gender for Traveler 2',
    ]
    assert not Booking.objects.exists()


def test_at_least_one_traveler(api_client):
    response = book(api_client, {'email': 'a@example.com', 'phone': '1', 'travelers': []})
    assert response.status_code == 400
    assert response.json()['details'][0]['field'] == 'travelers'
