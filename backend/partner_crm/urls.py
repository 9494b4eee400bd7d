"""
Root URL configuration for the Partner CRM lead service.

The internal dashboard talks to everything under /api/; /health is open
for load balancers.
"""
from django.urls import path, include
from django.http import JsonResponse


def health_check(request):
    return JsonResponse({"status": "healthy"})


urlpatterns = [
    path('api/', include('crm.urls')),
    path('health', health_check),
]
