from django.contrib import admin
from django.contrib import messages
from django.utils.html import format_html

from core.exceptions import PortalError
from .models import Booking, CreditAccount, CreditTransaction, Payment, Traveler
from .services.payments import refund_payment

STATUS_COLORS = {
    'initiated': 'gray',
    'pending': 'orange',
    'completed': 'green',
    'failed': 'red',
    'refunded': 'blue',
}


# =========================================================
# 1. BOOKINGS (Travelers inline)
# =========================================================

class TravelerInline(admin.TabularInline):
    model = Traveler
    extra = 0
    # Identity is frozen at booking time; only the status moves
    readonly_fields = ('full_name', 'passport_number', 'date_of_birth',
                       'gender', 'nationality', 'email', 'phone')


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'visa_type', 'total_travelers',
                    'total_amount', 'currency', 'payment_status', 'created_at')
    list_filter = ('payment_status', 'visa_type', 'currency')
    search_fields = ('id', 'user__email', 'contact_email', 'payment_transaction_id')
    readonly_fields = ('user', 'total_travelers', 'price_per_traveler', 'total_amount',
                       'currency', 'payment_status', 'payment_transaction_id',
                       'created_at', 'updated_at')
    inlines = [TravelerInline]


# =========================================================
# 2. PAYMENTS (Refunds)
# =========================================================

@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ('paypal_order_id', 'user', 'total_amount', 'currency',
                    'status_badge', 'credit_state', 'application', 'captured_at')
    list_filter = ('status', 'credit_state', 'currency')
    search_fields = ('paypal_order_id', 'paypal_capture_id', 'user__email', 'payer_email')
    readonly_fields = [f.name for f in Payment._meta.fields]
    actions = ['action_refund']

    def status_badge(self, obj):
        color = STATUS_COLORS.get(obj.status, 'black')
        return format_html('<span style="color: {}; font-weight: bold;">{}</span>',
                           color, obj.get_status_display())
    status_badge.short_description = "Status"

    def has_add_permission(self, request):
        return False

    @admin.action(description="Mark selected payments as refunded")
    def action_refund(self, request, queryset):
        success_count = 0
        for payment in queryset:
            try:
                refund_payment(payment.paypal_order_id, user=request.user,
                               reason=f"Refunded by {request.user}")
                success_count += 1
            except PortalError as e:
                self.message_user(
                    request, f"{payment.paypal_order_id}: {e.message}", level=messages.ERROR)

        if success_count:
            self.message_user(
                request, f"{success_count} payment(s) refunded.", level=messages.SUCCESS)


# =========================================================
# 3. CREDITS (read only)
# =========================================================

class CreditTransactionInline(admin.TabularInline):
    model = CreditTransaction
    extra = 0
    can_delete = False
    readonly_fields = ('transaction_type', 'amount', 'balance_after', 'description',
                       'payment', 'application', 'created_by', 'created_at')

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(CreditAccount)
class CreditAccountAdmin(admin.ModelAdmin):
    list_display = ('user', 'available', 'updated_at')
    search_fields = ('user__email',)
    readonly_fields = ('user', 'available', 'updated_at')
    inlines = [CreditTransactionInline]

    def has_add_permission(self, request):
        return False
