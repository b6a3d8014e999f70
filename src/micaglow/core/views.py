"""Core views for MicaGlow."""

import json

from django.db import connection
from django.http import JsonResponse

from micaglow.uploads import storage


def health_check(request):
    """Health check endpoint for container orchestration.

    Only the database decides health; an unreachable image store is
    reported but does not fail the check.
    """
    try:
        # Check database connection
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")

        return JsonResponse({
            "status": "healthy",
            "database": "connected",
            "storage": "available" if storage.check_health() else "unavailable",
        })
    except Exception as e:
        return JsonResponse(
            {"status": "unhealthy", "error": str(e)},
            status=503,
        )


def read_json(request):
    """Decode a JSON request body.

    Returns:
        The decoded object, or None when the body is not a JSON object.
        An empty body decodes to an empty dict.
    """
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return data if isinstance(data, dict) else None


def invalid_json_response():
    return JsonResponse({"error": "Invalid JSON"}, status=400)


def form_errors_response(form):
    """400 with the form's field errors."""
    return JsonResponse(
        {"error": "Please check the highlighted fields.", "fields": form.errors.get_json_data()},
        status=400,
    )
