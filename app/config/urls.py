"""
URL configuration for the settlement service.

URL Structure:
    /                                      - ReDoc API documentation
    /schema/                               - OpenAPI schema (YAML)
    /admin/                                - Django admin interface
    /health/                               - Health check endpoint
    /api/v1/settlements/                   - Settle an order (POST)
        transactions/{id}/                 - Transaction detail (GET)
        webhooks/gateway/                  - Payment gateway webhook (POST)
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
api_v1_patterns = [
    path("settlements/", include("settlements.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

admin.site.site_header = "Settlement Admin"
admin.site.site_title = "Settlement Admin"
admin.site.index_title = "Transactions"
