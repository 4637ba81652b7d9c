"""
URL configuration for the kuku feed backend.

Every API route lives under /api/v1/; the flock and feed apps each contribute
their own router.
"""
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView


def health_view(request):
    return JsonResponse({'service': 'kuku-feed', 'status': 'ok'})


urlpatterns = [
    # Admin site
    path('admin/', admin.site.urls),

    # API routes
    path('api/v1/', include('apps.flocks.urls')),
    path('api/v1/', include('apps.feed.urls')),

    # API schema & docs
    path('api/v1/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/v1/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),

    # Auth routes
    path('api/v1/auth/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('api/v1/auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    path('health/', health_view, name='health'),
]

if settings.DEBUG:
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
