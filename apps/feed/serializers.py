from decimal import Decimal

from rest_framework import serializers

from .models import FEED_TYPE_CHOICES, FEED_TYPES, FeedProgram, FeedPurchase, FeedSupplier, FeedUsage, Inventory


class InventorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Inventory
        fields = '__all__'
        read_only_fields = [field.name for field in Inventory._meta.fields]


class InventoryAdjustSerializer(serializers.Serializer):
    """Payload for the ledger add/deduct endpoints."""
    type = serializers.ChoiceField(choices=Inventory.TYPE_CHOICES)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    details = serializers.JSONField(required=False, allow_null=True)

    def validate(self, attrs):
        details = attrs.get('details')
        if attrs['type'] == Inventory.FEED and details is not None:
            if not isinstance(details, dict):
                raise serializers.ValidationError({'details': 'Feed details must map feed types to amounts.'})
            unknown = [key for key in details if key not in FEED_TYPES]
            if unknown:
                raise serializers.ValidationError({'details': f"Unknown feed type: {', '.join(unknown)}"})
        return attrs


class FeedProgramSerializer(serializers.ModelSerializer):
    feed_type_display = serializers.CharField(source='get_feed_type_display', read_only=True)

    class Meta:
        model = FeedProgram
        fields = '__all__'
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate(self, attrs):
        is_active = attrs.get('is_active', getattr(self.instance, 'is_active', True))
        age_in_weeks = attrs.get('age_in_weeks', getattr(self.instance, 'age_in_weeks', None))
        if is_active and age_in_weeks is not None:
            clash = FeedProgram.objects.filter(is_active=True, age_in_weeks=age_in_weeks)
            if self.instance is not None:
                clash = clash.exclude(pk=self.instance.pk)
            if clash.exists():
                raise serializers.ValidationError({
                    'age_in_weeks': f'An active program already exists for week {age_in_weeks}.'
                })
        return attrs


class FeedUsageSerializer(serializers.ModelSerializer):
    flock_id = serializers.UUIDField(source='flock.id', read_only=True)
    batch_code = serializers.CharField(source='flock.batch_code', read_only=True)
    recorded_by_name = serializers.CharField(source='recorded_by.get_username', read_only=True)

    class Meta:
        model = FeedUsage
        exclude = ['flock']
        read_only_fields = [
            'id', 'feed_type', 'unit', 'unit_cost', 'cost', 'recorded_by', 'created_at', 'updated_at'
        ]


class FeedUsageWriteSerializer(serializers.Serializer):
    """
    Input for creating or updating a usage record. On partial updates every
    field is optional and only supplied fields are applied.
    """
    flock_id = serializers.UUIDField()
    date = serializers.DateField(required=False)
    amount_used = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class FeedSupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = FeedSupplier
        fields = '__all__'
        read_only_fields = ['id', 'created_at', 'updated_at']


class FeedPurchaseSerializer(serializers.ModelSerializer):
    feed_type = serializers.ChoiceField(choices=FEED_TYPE_CHOICES)
    supplier_name = serializers.CharField(source='supplier.name', read_only=True)
    cost_per_kg = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = FeedPurchase
        fields = '__all__'
        read_only_fields = ['id', 'quantity_kg', 'total_cost', 'recorded_by', 'created_at']

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError('Quantity must be greater than zero.')
        return value


class ConsumptionQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    flock_id = serializers.UUIDField(required=False)

    def validate(self, attrs):
        start_date, end_date = attrs.get('start_date'), attrs.get('end_date')
        if start_date and end_date and start_date > end_date:
            raise serializers.ValidationError({'end_date': 'End date must be on or after the start date.'})
        return attrs


class ProjectionQuerySerializer(serializers.Serializer):
    feed_type = serializers.ChoiceField(choices=FEED_TYPE_CHOICES, required=False)
    days = serializers.IntegerField(required=False, min_value=1, max_value=365)
    threshold = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, min_value=Decimal('0'))
    window_days = serializers.IntegerField(required=False, min_value=1, max_value=365)
