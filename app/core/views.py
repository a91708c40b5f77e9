"""
Infrastructure views that sit outside the settlement domain.
"""

import logging

from django.db import DatabaseError, connection
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def health_check(request):
    """
    Liveness/readiness probe for load balancers and orchestration.

    Returns:
        200 {"status": "healthy", "database": "connected"}
        503 {"status": "unhealthy", "database": "disconnected"}
    """
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError:
        logger.exception("Health check: database unreachable")
        return JsonResponse(
            {"status": "unhealthy", "database": "disconnected"}, status=503
        )

    return JsonResponse({"status": "healthy", "database": "connected"})
