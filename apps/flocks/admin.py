from django.contrib import admin

from .models import Flock


@admin.register(Flock)
class FlockAdmin(admin.ModelAdmin):
    list_display = ('batch_code', 'breed', 'arrival_date', 'age_in_days', 'current_count', 'status')
    list_filter = ('breed', 'status', 'arrival_date')
    search_fields = ('batch_code', 'notes')
    ordering = ('-arrival_date',)
