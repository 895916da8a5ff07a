from django.contrib import admin
from django.urls import path, include
from rest_framework.permissions import AllowAny
from drf_yasg.views import get_schema_view
from drf_yasg import openapi

schema_view = get_schema_view(
    openapi.Info(
        title="HustleUp API",
        default_version='v1',
        description="Gig lifecycle, settlement and discovery API for the HustleUp marketplace",
    ),
    public=True,
    permission_classes=[AllowAny],
)

urlpatterns = [
    path('', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('admin/', admin.site.urls),
    path('', include('apps.gigs.urls')),
    path('', include('apps.payments.urls')),
    path('', include('apps.notifications.urls')),
    path('', include('apps.discovery.urls')),
    path('', include('apps.management.urls')),
]
