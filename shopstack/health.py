import logging

from django.core.cache import cache
from django.db import connections
from django.http import JsonResponse

logger = logging.getLogger(__name__)

_CACHE_CHECK_KEY = "health:check"


def health_check_view(request):
    """
    Checks the database and the cache; Celery workers only with
    ``?check_celery=1`` because the ping can take seconds.

    Returns 200 when the critical checks pass, 503 otherwise.
    """
    checks = {
        "db": False,
        "cache": False,
        "celery": "not_checked",
    }
    errors = []

    try:
        with connections["default"].cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        checks["db"] = True
    except Exception as exc:
        errors.append(f"DB error: {exc}")
        logger.error("Health check DB failed: %s", exc)

    try:
        cache.set(_CACHE_CHECK_KEY, "ok", timeout=5)
        checks["cache"] = cache.get(_CACHE_CHECK_KEY) == "ok"
        if not checks["cache"]:
            errors.append("Cache error: test value not returned")
    except Exception as exc:
        errors.append(f"Cache error: {exc}")
        logger.error("Health check cache failed: %s", exc)

    if request.GET.get("check_celery") == "1":
        try:
            from shopstack.celery import app as celery_app

            active_workers = celery_app.control.inspect(timeout=2.0).ping()
            checks["celery"] = bool(active_workers)
            if not active_workers:
                errors.append("No Celery workers responding")
        except Exception as exc:
            checks["celery"] = False
            errors.append(f"Celery error: {exc}")
            logger.error("Health check Celery failed: %s", exc)

    if checks["db"] and checks["cache"]:
        return JsonResponse({"status": "ok", "app": "shopstack", "checks": checks}, status=200)
    return JsonResponse(
        {"status": "error", "app": "shopstack", "checks": checks, "errors": errors},
        status=503,
    )
