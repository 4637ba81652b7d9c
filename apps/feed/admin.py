from django.contrib import admin

from .models import FeedProgram, FeedPurchase, FeedSupplier, FeedUsage, Inventory


@admin.register(Inventory)
class InventoryAdmin(admin.ModelAdmin):
    list_display = ('name', 'type', 'quantity', 'unit', 'is_active', 'updated_at')
    list_filter = ('type', 'is_active')
    search_fields = ('name',)
    # Balances move only through the ledger
    readonly_fields = (
        'type', 'quantity', 'unit', 'egg_count', 'broiler_count', 'manure_weight', 'feed_details',
        'medicine_details', 'other_details', 'is_active', 'created_at', 'updated_at'
    )

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(FeedProgram)
class FeedProgramAdmin(admin.ModelAdmin):
    list_display = ('age_in_weeks', 'age_in_days', 'feed_type', 'gram_per_hen', 'breed', 'is_active')
    list_filter = ('feed_type', 'breed', 'is_active')
    ordering = ('age_in_weeks',)


@admin.register(FeedSupplier)
class FeedSupplierAdmin(admin.ModelAdmin):
    list_display = ('name', 'contact_name', 'phone', 'is_active', 'created_at')
    list_filter = ('is_active',)
    search_fields = ('name', 'contact_name', 'phone')


@admin.register(FeedUsage)
class FeedUsageAdmin(admin.ModelAdmin):
    list_display = ('flock', 'feed_type', 'date', 'amount_used', 'cost', 'recorded_by')
    list_filter = ('feed_type', 'date')
    search_fields = ('flock__batch_code', 'notes')
    date_hierarchy = 'date'
    # Stock moves only through the usage services
    readonly_fields = ('feed_type', 'amount_used', 'unit_cost', 'cost', 'created_at', 'updated_at')

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(FeedPurchase)
class FeedPurchaseAdmin(admin.ModelAdmin):
    list_display = ('feed_type', 'quantity', 'unit', 'quantity_kg', 'total_cost', 'supplier', 'purchase_date')
    list_filter = ('feed_type', 'unit', 'purchase_date')
    search_fields = ('supplier__name', 'notes')
    readonly_fields = ('feed_type', 'quantity', 'unit', 'quantity_kg', 'total_cost', 'created_at')

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
