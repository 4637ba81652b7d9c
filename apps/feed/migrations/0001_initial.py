from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone
import uuid

FEED_TYPE_CHOICES = [
    ('LAYER_STARTER', 'Layer Starter'),
    ('REARING', 'Rearing'),
    ('PULLET_FEED', 'Pullet Feed'),
    ('LAYER', 'Layer'),
    ('LAYER_PHASE_1', 'Layer Phase 1'),
    ('CUSTOM', 'Custom'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('flocks', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Inventory',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('type', models.CharField(choices=[('FEED', 'Feed'), ('EGG', 'Egg'), ('BROILER', 'Broiler'), ('MANURE', 'Manure'), ('MEDICINE', 'Medicine'), ('OTHER', 'Other')], max_length=20)),
                ('name', models.CharField(max_length=255)),
                ('quantity', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('unit', models.CharField(default='kg', max_length=20)),
                ('egg_count', models.IntegerField(blank=True, null=True)),
                ('broiler_count', models.IntegerField(blank=True, null=True)),
                ('manure_weight', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('feed_details', models.JSONField(blank=True, default=dict, help_text='Feed stock per feed type (kg)')),
                ('medicine_details', models.JSONField(blank=True, null=True)),
                ('other_details', models.JSONField(blank=True, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name_plural': 'Inventory',
                'ordering': ['type'],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('is_active', True)), fields=('type',), name='unique_active_inventory_type'),
                    models.CheckConstraint(condition=models.Q(('quantity__gte', 0)), name='inventory_quantity_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='FeedProgram',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('breed', models.CharField(default='layer', max_length=20)),
                ('age_in_weeks', models.PositiveIntegerField()),
                ('age_in_days', models.CharField(help_text="Display range, e.g. '29-35'", max_length=20)),
                ('feed_type', models.CharField(choices=FEED_TYPE_CHOICES, max_length=20)),
                ('gram_per_hen', models.DecimalField(decimal_places=2, help_text='Daily ration per bird in grams', max_digits=8, validators=[MinValueValidator(Decimal('0.01'))])),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['age_in_weeks'],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('is_active', True)), fields=('age_in_weeks',), name='unique_active_program_week'),
                    models.CheckConstraint(condition=models.Q(('gram_per_hen__gt', 0)), name='program_gram_per_hen_positive'),
                ],
            },
        ),
        migrations.CreateModel(
            name='FeedUsage',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('feed_type', models.CharField(choices=FEED_TYPE_CHOICES, max_length=20)),
                ('date', models.DateField(default=django.utils.timezone.localdate)),
                ('amount_used', models.DecimalField(decimal_places=2, max_digits=10, validators=[MinValueValidator(Decimal('0.01'))])),
                ('unit', models.CharField(choices=[('KG', 'Kilograms')], default='KG', max_length=10)),
                ('unit_cost', models.DecimalField(blank=True, decimal_places=2, help_text='Cost per kg at time of consumption', max_digits=10, null=True)),
                ('cost', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('notes', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('flock', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='feed_usage', to='flocks.flock')),
                ('recorded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='feed_usage_records', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'Feed usage',
                'ordering': ['-date', '-created_at'],
                'indexes': [
                    models.Index(fields=['flock', 'date'], name='feedusage_flock_date_idx'),
                    models.Index(fields=['feed_type', 'date'], name='feedusage_type_date_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('amount_used__gt', 0)), name='feedusage_amount_positive'),
                ],
            },
        ),
        migrations.CreateModel(
            name='FeedPurchase',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('feed_type', models.CharField(choices=FEED_TYPE_CHOICES, max_length=20)),
                ('quantity', models.DecimalField(decimal_places=2, max_digits=10, validators=[MinValueValidator(Decimal('0.01'))])),
                ('unit', models.CharField(choices=[('KG', 'Kilograms'), ('QUINTAL', 'Quintal (100 kg)')], default='KG', max_length=10)),
                ('quantity_kg', models.DecimalField(decimal_places=2, max_digits=12)),
                ('cost_per_unit', models.DecimalField(blank=True, decimal_places=2, help_text='Price per entered unit', max_digits=10, null=True)),
                ('total_cost', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('supplier_name', models.CharField(blank=True, max_length=255, null=True)),
                ('purchase_date', models.DateField(default=django.utils.timezone.localdate)),
                ('notes', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('recorded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='feed_purchases', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-purchase_date', '-created_at'],
            },
        ),
    ]
