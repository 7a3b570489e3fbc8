"""Pointman admin.

Balances and history are read-only here: every change must go through
LedgerService so that it is recorded in the point history.
"""

from django.contrib import admin, messages
from django.utils.html import format_html

from pointman.models import Customer, PointHistoryEntry, PointProgram


# ===========================================
# PointProgram Admin
# ===========================================


@admin.register(PointProgram)
class PointProgramAdmin(admin.ModelAdmin):
    list_display = [
        "code",
        "name",
        "discount_rate_per_point",
        "accrual_unit_amount",
        "is_active",
        "customer_count",
    ]
    list_filter = ["is_active"]
    search_fields = ["code", "name"]
    readonly_fields = ["created_at", "updated_at"]

    def customer_count(self, obj):
        return obj.customers.count()

    customer_count.short_description = "Customers"


# ===========================================
# Inline Classes (must be defined before CustomerAdmin)
# ===========================================


class PointHistoryInline(admin.TabularInline):
    model = PointHistoryEntry
    extra = 0
    fields = ["transaction_type", "points", "balance_after", "amount", "description", "reference", "created_at"]
    readonly_fields = fields
    ordering = ["-created_at", "-id"]
    verbose_name_plural = "Point history"

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ===========================================
# Customer Admin
# ===========================================


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = [
        "code",
        "name",
        "program",
        "point_balance",
        "lifetime_points",
        "tier_badge",
        "is_active",
    ]
    list_filter = ["tier", "program", "is_active"]
    search_fields = ["code", "first_name", "last_name", "email", "phone"]
    raw_id_fields = ["program"]
    readonly_fields = ["point_balance", "lifetime_points", "tier", "created_at", "updated_at"]
    inlines = [PointHistoryInline]
    actions = ["reconcile_points"]

    def tier_badge(self, obj):
        colors = {
            "bronze": "#cd7f32",
            "silver": "#c0c0c0",
            "gold": "#ffd700",
            "platinum": "#e5e4e2",
        }
        color = colors.get(obj.tier, "#6c757d")
        text_color = "#000" if obj.tier in ("gold", "silver", "platinum") else "#fff"
        return format_html(
            '<span style="background:{}; color:{}; padding:2px 8px; '
            'border-radius:3px; font-size:11px;">{}</span>',
            color,
            text_color,
            obj.get_tier_display(),
        )

    tier_badge.short_description = "Tier"

    @admin.action(description="Reconcile points with history")
    def reconcile_points(self, request, queryset):
        from pointman.service import LedgerService

        drifted = []
        for customer in queryset.filter(is_active=True):
            result = LedgerService.reconcile(customer.code)
            if not result.is_consistent:
                drifted.append(f"{result.customer_code} ({result.drift:+d})")

        if drifted:
            self.message_user(
                request,
                f"Balance drift: {', '.join(drifted)}",
                level=messages.ERROR,
            )
        else:
            self.message_user(request, "All selected balances match their history.")


# ===========================================
# PointHistoryEntry Admin
# ===========================================


@admin.register(PointHistoryEntry)
class PointHistoryEntryAdmin(admin.ModelAdmin):
    list_display = [
        "created_at",
        "customer_code",
        "transaction_type",
        "points_display",
        "balance_after",
        "amount",
        "reference",
    ]
    list_select_related = ["customer"]
    list_filter = ["transaction_type"]
    search_fields = ["customer__code", "description", "reference"]
    readonly_fields = [
        "customer",
        "transaction_type",
        "points",
        "balance_after",
        "amount",
        "description",
        "reference",
        "created_at",
        "created_by",
    ]
    date_hierarchy = "created_at"

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def customer_code(self, obj):
        return obj.customer.code

    customer_code.short_description = "Customer"

    def points_display(self, obj):
        if obj.points > 0:
            return format_html('<span style="color:green">+{}</span>', obj.points)
        return format_html('<span style="color:red">{}</span>', obj.points)

    points_display.short_description = "Points"
