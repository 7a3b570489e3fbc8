# Generated migration for the points ledger

from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="PointProgram",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("code", models.SlugField(unique=True, verbose_name="code")),
                ("name", models.CharField(max_length=200, verbose_name="name")),
                ("description", models.TextField(blank=True, verbose_name="description")),
                (
                    "discount_rate_per_point",
                    models.DecimalField(
                        decimal_places=4,
                        help_text="Monetary value granted for each redeemed point",
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                        verbose_name="discount per point",
                    ),
                ),
                (
                    "accrual_unit_amount",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Currency units spent per accrued point (empty = global default)",
                        max_digits=12,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                        verbose_name="amount per point",
                    ),
                ),
                ("is_active", models.BooleanField(default=True, verbose_name="active")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
            ],
            options={
                "verbose_name": "point program",
                "verbose_name_plural": "point programs",
                "ordering": ["name"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(discount_rate_per_point__gte=0),
                        name="pointman_program_rate_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("accrual_unit_amount__isnull", True),
                            ("accrual_unit_amount__gt", 0),
                            _connector="OR",
                        ),
                        name="pointman_program_unit_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Customer",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "code",
                    models.CharField(
                        help_text="Unique customer code (e.g. KH-0001)",
                        max_length=50,
                        unique=True,
                        verbose_name="code",
                    ),
                ),
                ("first_name", models.CharField(max_length=100, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, max_length=100, verbose_name="last name")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="email")),
                ("phone", models.CharField(blank=True, max_length=20, verbose_name="phone")),
                (
                    "point_balance",
                    models.IntegerField(
                        default=0,
                        help_text="Points available for redemption",
                        verbose_name="point balance",
                    ),
                ),
                (
                    "lifetime_points",
                    models.IntegerField(
                        default=0,
                        help_text="Total points ever accrued (never decreases)",
                        verbose_name="lifetime points",
                    ),
                ),
                (
                    "tier",
                    models.CharField(
                        choices=[
                            ("bronze", "Bronze"),
                            ("silver", "Silver"),
                            ("gold", "Gold"),
                            ("platinum", "Platinum"),
                        ],
                        default="bronze",
                        max_length=20,
                        verbose_name="tier",
                    ),
                ),
                ("is_active", models.BooleanField(db_index=True, default=True, verbose_name="active")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                (
                    "program",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="customers",
                        to="pointman.pointprogram",
                        verbose_name="point program",
                    ),
                ),
            ],
            options={
                "verbose_name": "customer",
                "verbose_name_plural": "customers",
                "ordering": ["code"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(point_balance__gte=0),
                        name="pointman_customer_balance_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(lifetime_points__gte=0),
                        name="pointman_customer_lifetime_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PointHistoryEntry",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "transaction_type",
                    models.CharField(
                        choices=[
                            ("accrue", "Accrual"),
                            ("redeem", "Redemption"),
                            ("adjust", "Adjustment"),
                        ],
                        max_length=20,
                        verbose_name="type",
                    ),
                ),
                (
                    "points",
                    models.IntegerField(
                        help_text="Positive for accrual, negative for redemption",
                        verbose_name="points",
                    ),
                ),
                (
                    "balance_after",
                    models.IntegerField(
                        help_text="Point balance right after this entry",
                        verbose_name="balance after",
                    ),
                ),
                (
                    "amount",
                    models.DecimalField(
                        blank=True,
                        decimal_places=4,
                        help_text="Payment amount (accrual) or discount granted (redemption)",
                        max_digits=14,
                        null=True,
                        verbose_name="amount",
                    ),
                ),
                ("description", models.CharField(blank=True, max_length=200, verbose_name="description")),
                (
                    "reference",
                    models.CharField(
                        blank=True,
                        help_text="External ID (e.g. folio:123)",
                        max_length=100,
                        verbose_name="reference",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="created at"),
                ),
                ("created_by", models.CharField(blank=True, max_length=100, verbose_name="created by")),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="point_history",
                        to="pointman.customer",
                        verbose_name="customer",
                    ),
                ),
            ],
            options={
                "verbose_name": "point history entry",
                "verbose_name_plural": "point history",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(
                        fields=["customer", "-created_at"],
                        name="pointman_history_cust_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("points", 0), _negated=True),
                        name="pointman_history_points_non_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(balance_after__gte=0),
                        name="pointman_history_balance_non_negative",
                    ),
                ],
            },
        ),
    ]
