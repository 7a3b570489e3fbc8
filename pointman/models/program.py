"""PointProgram model."""

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class PointProgram(models.Model):
    """
    Loyalty point program.

    Defines how much a redeemed point is worth and, optionally, how many
    currency units a member must spend to accrue one point. Read-only from
    the ledger's perspective.
    """

    code = models.SlugField(_("code"), max_length=50, unique=True)
    name = models.CharField(_("name"), max_length=200)
    description = models.TextField(_("description"), blank=True)

    discount_rate_per_point = models.DecimalField(
        _("discount per point"),
        max_digits=12,
        decimal_places=4,
        validators=[MinValueValidator(Decimal("0"))],
        help_text=_("Monetary value granted for each redeemed point"),
    )
    accrual_unit_amount = models.DecimalField(
        _("amount per point"),
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text=_("Currency units spent per accrued point (empty = global default)"),
    )

    is_active = models.BooleanField(_("active"), default=True)
    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        verbose_name = _("point program")
        verbose_name_plural = _("point programs")
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(discount_rate_per_point__gte=0),
                name="pointman_program_rate_non_negative",
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(accrual_unit_amount__isnull=True)
                    | models.Q(accrual_unit_amount__gt=0)
                ),
                name="pointman_program_unit_positive",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.code})"
