"""PointHistoryEntry model: append-only audit trail of balance changes."""

from django.db import models
from django.utils.translation import gettext_lazy as _

from pointman.exceptions import PointmanError


class TransactionType(models.TextChoices):
    """Kinds of balance-changing operations."""

    ACCRUE = "accrue", _("Accrual")
    REDEEM = "redeem", _("Redemption")
    ADJUST = "adjust", _("Adjustment")


class PointHistoryQuerySet(models.QuerySet):
    """Queryset that refuses bulk mutation of history rows."""

    def update(self, **kwargs):
        raise PointmanError("HISTORY_IMMUTABLE")

    def delete(self):
        raise PointmanError("HISTORY_IMMUTABLE")


class PointHistoryEntry(models.Model):
    """
    Immutable record of a point balance change.

    Written exactly once per successful accrual, redemption or adjustment,
    in the same transaction as the balance update. Corrections are new
    compensating entries, never edits.
    """

    customer = models.ForeignKey(
        "pointman.Customer",
        on_delete=models.PROTECT,
        related_name="point_history",
        verbose_name=_("customer"),
    )
    transaction_type = models.CharField(
        _("type"),
        max_length=20,
        choices=TransactionType.choices,
    )
    points = models.IntegerField(
        _("points"),
        help_text=_("Positive for accrual, negative for redemption"),
    )
    balance_after = models.IntegerField(
        _("balance after"),
        help_text=_("Point balance right after this entry"),
    )
    amount = models.DecimalField(
        _("amount"),
        max_digits=14,
        decimal_places=4,
        null=True,
        blank=True,
        help_text=_("Payment amount (accrual) or discount granted (redemption)"),
    )

    description = models.CharField(_("description"), max_length=200, blank=True)
    reference = models.CharField(
        _("reference"),
        max_length=100,
        blank=True,
        help_text=_("External ID (e.g. folio:123)"),
    )

    created_at = models.DateTimeField(_("created at"), auto_now_add=True, db_index=True)
    created_by = models.CharField(_("created by"), max_length=100, blank=True)

    objects = PointHistoryQuerySet.as_manager()

    class Meta:
        verbose_name = _("point history entry")
        verbose_name_plural = _("point history")
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["customer", "-created_at"], name="pointman_history_cust_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~models.Q(points=0),
                name="pointman_history_points_non_zero",
            ),
            models.CheckConstraint(
                condition=models.Q(balance_after__gte=0),
                name="pointman_history_balance_non_negative",
            ),
        ]

    def __str__(self):
        sign = "+" if self.points > 0 else ""
        return f"{sign}{self.points}pts ({self.transaction_type})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise PointmanError("HISTORY_IMMUTABLE", entry_id=self.pk)
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise PointmanError("HISTORY_IMMUTABLE", entry_id=self.pk)
