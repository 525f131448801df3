from django.urls import path
from .. import views

app_name = 'finance'

urlpatterns = [
    # Booking
    path('api/bookings/', views.create_booking_api, name='api_booking_create'),

    # Payments
    path('api/payments/create-order/', views.create_order_api,
         name='api_payment_create_order'),
    path('api/payments/capture/', views.capture_order_api,
         name='api_payment_capture'),
    path('api/payments/', views.payment_history_api, name='api_payment_history'),
    path('api/payments/<str:order_id>/status/', views.payment_status_api,
         name='api_payment_status'),
    path('api/payments/<str:order_id>/receipt/', views.download_receipt_pdf,
         name='payment_receipt_pdf'),
    path('webhooks/paypal/', views.paypal_webhook, name='paypal_webhook'),

    # Credits
    path('api/credits/', views.credits_api, name='api_credits'),
    path('api/credits/redeem/', views.redeem_credit_api, name='api_credit_redeem'),
]
