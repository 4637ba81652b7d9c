import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

FEED_TYPE_CHOICES = [
    ('LAYER_STARTER', 'Layer Starter'),
    ('REARING', 'Rearing'),
    ('PULLET_FEED', 'Pullet Feed'),
    ('LAYER', 'Layer'),
    ('LAYER_PHASE_1', 'Layer Phase 1'),
    ('CUSTOM', 'Custom'),
]

FEED_TYPES = frozenset(code for code, _ in FEED_TYPE_CHOICES)

FEED_TYPE_LABELS = dict(FEED_TYPE_CHOICES)


class Inventory(models.Model):
    """
    Aggregate stock ledger, one active row per inventory type.
    Feed stock is additionally broken down per feed type in feed_details,
    stored as {feed_type: "decimal string"} so sums stay exact.
    """
    FEED = 'FEED'
    EGG = 'EGG'
    BROILER = 'BROILER'
    MANURE = 'MANURE'
    MEDICINE = 'MEDICINE'
    OTHER = 'OTHER'

    TYPE_CHOICES = [
        (FEED, 'Feed'),
        (EGG, 'Egg'),
        (BROILER, 'Broiler'),
        (MANURE, 'Manure'),
        (MEDICINE, 'Medicine'),
        (OTHER, 'Other'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    name = models.CharField(max_length=255)
    quantity = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    unit = models.CharField(max_length=20, default='kg')

    # Type-specific counters
    egg_count = models.IntegerField(null=True, blank=True)
    broiler_count = models.IntegerField(null=True, blank=True)
    manure_weight = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    feed_details = models.JSONField(default=dict, blank=True, help_text="Feed stock per feed type (kg)")
    medicine_details = models.JSONField(null=True, blank=True)
    other_details = models.JSONField(null=True, blank=True)

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['type']
        verbose_name_plural = "Inventory"
        constraints = [
            models.UniqueConstraint(
                fields=['type'],
                condition=Q(is_active=True),
                name='unique_active_inventory_type',
            ),
            models.CheckConstraint(
                condition=Q(quantity__gte=0),
                name='inventory_quantity_non_negative',
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.quantity} {self.unit})"

    def get_feed_details(self):
        """Return the feed breakdown as {feed_type: Decimal}."""
        return {
            feed_type: Decimal(str(amount))
            for feed_type, amount in (self.feed_details or {}).items()
        }

    def set_feed_details(self, balances):
        self.feed_details = {
            feed_type: str(Decimal(amount).quantize(Decimal('0.01')))
            for feed_type, amount in balances.items()
        }

    def feed_balance(self, feed_type):
        return self.get_feed_details().get(feed_type, Decimal('0'))


class FeedProgram(models.Model):
    """
    Reference curve: recommended feed type and daily ration per hen for each
    week of age.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    breed = models.CharField(max_length=20, default='layer')
    age_in_weeks = models.PositiveIntegerField()
    age_in_days = models.CharField(max_length=20, help_text="Display range, e.g. '29-35'")
    feed_type = models.CharField(max_length=20, choices=FEED_TYPE_CHOICES)
    gram_per_hen = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        help_text="Daily ration per bird in grams"
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['age_in_weeks']
        constraints = [
            models.UniqueConstraint(
                fields=['age_in_weeks'],
                condition=Q(is_active=True),
                name='unique_active_program_week',
            ),
            models.CheckConstraint(
                condition=Q(gram_per_hen__gt=0),
                name='program_gram_per_hen_positive',
            ),
        ]

    def __str__(self):
        return f"Week {self.age_in_weeks}: {self.get_feed_type_display()} ({self.gram_per_hen} g/hen)"


class FeedUsage(models.Model):
    """
    A feed consumption event. feed_type is captured when the record is
    created and never recomputed from the program afterwards.
    """
    UNIT_CHOICES = [
        ('KG', 'Kilograms'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    # Usage history keeps the ledger balanced, so flocks with usage cannot be deleted
    flock = models.ForeignKey('flocks.Flock', on_delete=models.PROTECT, related_name='feed_usage')
    feed_type = models.CharField(max_length=20, choices=FEED_TYPE_CHOICES)
    date = models.DateField(default=timezone.localdate)
    amount_used = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))])
    unit = models.CharField(max_length=10, choices=UNIT_CHOICES, default='KG')
    unit_cost = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True, help_text="Cost per kg at time of consumption")
    cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    notes = models.TextField(null=True, blank=True)
    recorded_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='feed_usage_records')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-date', '-created_at']
        verbose_name_plural = "Feed usage"
        indexes = [
            models.Index(fields=['flock', 'date'], name='feedusage_flock_date_idx'),
            models.Index(fields=['feed_type', 'date'], name='feedusage_type_date_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount_used__gt=0),
                name='feedusage_amount_positive',
            ),
        ]

    def save(self, *args, **kwargs):
        if self.unit_cost is not None and self.amount_used:
            self.cost = self.unit_cost * self.amount_used
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.flock.batch_code} - {self.feed_type} ({self.amount_used} kg) on {self.date}"


class FeedSupplier(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    contact_name = models.CharField(max_length=255, null=True, blank=True)
    phone = models.CharField(max_length=50, null=True, blank=True)
    address = models.TextField(null=True, blank=True)
    notes = models.TextField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.name


class FeedPurchase(models.Model):
    """
    Stock receipt. Quantities entered in quintals are stored in kg as well so
    the ledger only ever sees kilograms.
    """
    KG = 'KG'
    QUINTAL = 'QUINTAL'

    UNIT_CHOICES = [
        (KG, 'Kilograms'),
        (QUINTAL, 'Quintal (100 kg)'),
    ]

    KG_PER_UNIT = {
        KG: Decimal('1'),
        QUINTAL: Decimal('100'),
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    feed_type = models.CharField(max_length=20, choices=FEED_TYPE_CHOICES)
    quantity = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))])
    unit = models.CharField(max_length=10, choices=UNIT_CHOICES, default=KG)
    quantity_kg = models.DecimalField(max_digits=12, decimal_places=2)
    cost_per_unit = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True, help_text="Price per entered unit")
    total_cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    supplier = models.ForeignKey(FeedSupplier, on_delete=models.SET_NULL, null=True, blank=True, related_name='purchases')
    purchase_date = models.DateField(default=timezone.localdate)
    notes = models.TextField(null=True, blank=True)
    recorded_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='feed_purchases')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-purchase_date', '-created_at']

    def save(self, *args, **kwargs):
        self.quantity_kg = self.quantity * self.KG_PER_UNIT[self.unit]
        if self.cost_per_unit is not None:
            self.total_cost = self.quantity * self.cost_per_unit
        super().save(*args, **kwargs)

    @property
    def cost_per_kg(self):
        if self.total_cost is None or not self.quantity_kg:
            return None
        return (self.total_cost / self.quantity_kg).quantize(Decimal('0.01'))

    def __str__(self):
        return f"{self.get_feed_type_display()} - {self.quantity} {self.unit} on {self.purchase_date}"
