"""Customer model (ledger fields only).

Customer CRUD lives in the back office; this app only needs the stable
code, the program membership and the point counters.

    Customer.point_balance
        Authoritative balance. Only changed through
        pointman.services.ledger.adjust_balance(), which applies a single
        conditional UPDATE so concurrent redemptions cannot overdraw.

    PointHistoryEntry
        Audit trail. The sum of a customer's entries always equals
        point_balance.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class LoyaltyTier(models.TextChoices):
    """Customer loyalty tiers."""

    BRONZE = "bronze", _("Bronze")
    SILVER = "silver", _("Silver")
    GOLD = "gold", _("Gold")
    PLATINUM = "platinum", _("Platinum")


class Customer(models.Model):
    """Hotel customer as seen by the points ledger."""

    code = models.CharField(
        _("code"),
        max_length=50,
        unique=True,
        help_text=_("Unique customer code (e.g. KH-0001)"),
    )
    first_name = models.CharField(_("first name"), max_length=100)
    last_name = models.CharField(_("last name"), max_length=100, blank=True)
    email = models.EmailField(_("email"), blank=True)
    phone = models.CharField(_("phone"), max_length=20, blank=True)

    program = models.ForeignKey(
        "pointman.PointProgram",
        on_delete=models.PROTECT,
        related_name="customers",
        null=True,
        blank=True,
        verbose_name=_("point program"),
    )

    point_balance = models.IntegerField(
        _("point balance"),
        default=0,
        help_text=_("Points available for redemption"),
    )
    lifetime_points = models.IntegerField(
        _("lifetime points"),
        default=0,
        help_text=_("Total points ever accrued (never decreases)"),
    )
    tier = models.CharField(
        _("tier"),
        max_length=20,
        choices=LoyaltyTier.choices,
        default=LoyaltyTier.BRONZE,
    )

    is_active = models.BooleanField(_("active"), default=True, db_index=True)
    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        verbose_name = _("customer")
        verbose_name_plural = _("customers")
        ordering = ["code"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(point_balance__gte=0),
                name="pointman_customer_balance_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(lifetime_points__gte=0),
                name="pointman_customer_lifetime_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.code})"

    @property
    def name(self) -> str:
        """Full name (first + last)."""
        return f"{self.first_name} {self.last_name}".strip()
