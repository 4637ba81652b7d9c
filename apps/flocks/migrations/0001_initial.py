from django.db import migrations, models
import django.utils.timezone
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Flock',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('batch_code', models.CharField(max_length=50, unique=True)),
                ('breed', models.CharField(choices=[('layer', 'Layer'), ('broiler', 'Broiler'), ('dual_purpose', 'Dual-Purpose')], default='layer', max_length=20)),
                ('arrival_date', models.DateField(default=django.utils.timezone.localdate)),
                ('age_in_days', models.PositiveIntegerField(default=0, help_text='Age of the birds in days on arrival')),
                ('initial_count', models.PositiveIntegerField(default=0)),
                ('current_count', models.PositiveIntegerField(default=0)),
                ('status', models.CharField(choices=[('ACTIVE', 'Active'), ('SOLD', 'Sold'), ('CLOSED', 'Closed')], default='ACTIVE', max_length=20)),
                ('notes', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['-arrival_date', 'batch_code'],
                'indexes': [models.Index(fields=['current_count'], name='flock_current_count_idx')],
            },
        ),
    ]
