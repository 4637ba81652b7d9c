from rest_framework import serializers

from apps.feed.programs import calculate_flock_age
from .models import Flock


class FlockSerializer(serializers.ModelSerializer):
    age_in_weeks = serializers.SerializerMethodField()
    mortality_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Flock
        fields = '__all__'
        read_only_fields = ['id', 'created_at', 'updated_at']

    def get_age_in_weeks(self, obj) -> int:
        return calculate_flock_age(obj)

    def validate(self, attrs):
        initial_count = attrs.get('initial_count', getattr(self.instance, 'initial_count', 0))
        current_count = attrs.get('current_count', getattr(self.instance, 'current_count', 0))
        if current_count > initial_count:
            raise serializers.ValidationError({
                'current_count': 'Current count cannot exceed the initial count.'
            })
        return attrs
