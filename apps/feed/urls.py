from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import (
    FeedProgramViewSet, FeedPurchaseViewSet, FeedSupplierViewSet, FeedUsageViewSet, FeedViewSet, InventoryViewSet
)

router = DefaultRouter()
router.register(r'feed-programs', FeedProgramViewSet, basename='feed-program')
router.register(r'feed-usage', FeedUsageViewSet, basename='feed-usage')
router.register(r'feed-purchases', FeedPurchaseViewSet, basename='feed-purchase')
router.register(r'feed-suppliers', FeedSupplierViewSet, basename='feed-supplier')
router.register(r'inventory', InventoryViewSet, basename='inventory')
router.register(r'feed', FeedViewSet, basename='feed')

urlpatterns = [
    path('', include(router.urls)),
]
