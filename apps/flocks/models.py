import uuid
from django.db import models
from django.utils import timezone


class Flock(models.Model):
    """
    A tracked batch of birds.
    Feed logic only reads flocks; age in weeks is always derived from
    arrival_date and age_in_days, never stored.
    """
    BREED_CHOICES = [
        ('layer', 'Layer'),
        ('broiler', 'Broiler'),
        ('dual_purpose', 'Dual-Purpose'),
    ]

    STATUS_CHOICES = [
        ('ACTIVE', 'Active'),
        ('SOLD', 'Sold'),
        ('CLOSED', 'Closed'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    batch_code = models.CharField(max_length=50, unique=True)
    breed = models.CharField(max_length=20, choices=BREED_CHOICES, default='layer')
    arrival_date = models.DateField(default=timezone.localdate)
    age_in_days = models.PositiveIntegerField(default=0, help_text="Age of the birds in days on arrival")
    initial_count = models.PositiveIntegerField(default=0)
    current_count = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='ACTIVE')
    notes = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-arrival_date', 'batch_code']
        indexes = [
            models.Index(fields=['current_count'], name='flock_current_count_idx'),
        ]

    def __str__(self):
        return f"Flock {self.batch_code} ({self.current_count} birds)"

    @property
    def mortality_count(self):
        return max(0, self.initial_count - self.current_count)
