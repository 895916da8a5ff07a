from django.urls import path
from .views import DiscoverGigsView

urlpatterns = [
    path('discovery/gigs/', DiscoverGigsView.as_view(), name='discover_gigs'),
]
