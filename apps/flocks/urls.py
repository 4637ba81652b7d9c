from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import FlockViewSet

router = SimpleRouter()
router.register(r'flocks', FlockViewSet, basename='flock')

urlpatterns = [
    path('', include(router.urls)),
]
