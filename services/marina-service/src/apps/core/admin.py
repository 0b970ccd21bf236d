from django.contrib import admin
from .models import Berth, Booking, BookingRule, Club, Payment, Tariff, TariffBerth


class BerthInline(admin.TabularInline):
    model = Berth
    extra = 0


class TariffBerthInline(admin.TabularInline):
    model = TariffBerth
    extra = 0


@admin.register(Club)
class ClubAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'season', 'owner_id', 'is_active']
    list_filter = ['season', 'is_active']
    search_fields = ['name']
    inlines = [BerthInline]


@admin.register(Berth)
class BerthAdmin(admin.ModelAdmin):
    list_display = ['id', 'club', 'number', 'length', 'width', 'is_available']
    list_filter = ['club', 'is_available']


@admin.register(Tariff)
class TariffAdmin(admin.ModelAdmin):
    list_display = ['id', 'club', 'name', 'tariff_type', 'amount', 'season']
    list_filter = ['tariff_type', 'season']
    inlines = [TariffBerthInline]


@admin.register(BookingRule)
class BookingRuleAdmin(admin.ModelAdmin):
    list_display = ['id', 'club', 'tariff', 'rule_type']
    list_filter = ['rule_type']


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ['id', 'club', 'berth', 'status', 'start_date', 'end_date', 'total_price']
    list_filter = ['status', 'club']
    readonly_fields = ['price_breakdown', 'applied_rule_ids']


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['id', 'booking', 'payment_type', 'amount', 'status', 'due_date', 'penalty']
    list_filter = ['status', 'payment_type']
    readonly_fields = ['version']
