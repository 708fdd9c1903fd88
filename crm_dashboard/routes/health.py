"""
Health check endpoints.
"""

import time

from fastapi import APIRouter

from crm_dashboard.config import settings
from crm_dashboard.services.ghl.client import ghl_client

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "crm-dashboard"}


@router.get("/readyz")
async def readyz():
    """
    Readiness check: configuration plus GHL API reachability.
    """
    checks = {}
    overall_ok = True

    # 1) Configuration checks
    config_issues = []
    if not settings.GHL_API_KEY:
        config_issues.append("GHL_API_KEY not set")
    if not settings.GHL_LOCATION_ID:
        config_issues.append("GHL_LOCATION_ID not set")
    if settings.REQUIRE_AUTH and not settings.jwks_url():
        config_issues.append("REQUIRE_AUTH set without SUPABASE_URL")

    checks["configuration"] = {
        "ok": not config_issues,
        "issues": config_issues or None,
        "environment": settings.environment,
    }
    overall_ok = overall_ok and not config_issues

    # 2) Upstream connectivity
    t0 = time.time()
    try:
        ghl_health = await ghl_client.health_check()
        checks["ghl_api"] = {
            "ok": bool(ghl_health.get("healthy")),
            "connectivity": ghl_health.get("api_connectivity", "unknown"),
            "latency_ms": round((time.time() - t0) * 1000, 1),
        }
    except Exception as e:
        checks["ghl_api"] = {
            "ok": False,
            "error": f"{type(e).__name__}: {e}",
            "latency_ms": round((time.time() - t0) * 1000, 1),
        }
    overall_ok = overall_ok and checks["ghl_api"]["ok"]

    return {"overall_ok": overall_ok, "checks": checks, "timestamp": time.time()}
