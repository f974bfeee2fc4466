# core/supabase_client.py

from typing import Optional

from supabase import create_client, Client
from core.config import settings
from core.errors import StoreFailure
from core.logging_config import logger


# ============================================================
# Supabase Client Factory (ALWAYS service role)
# ============================================================

def get_supabase_client() -> Optional[Client]:
    """
    Creates a Supabase client using the SERVICE ROLE KEY.
    Returns None when credentials are missing or the client fails to build.

    The client is handed explicitly to every store; nothing caches it
    at module level.
    """
    try:
        supabase_url = settings.SUPABASE_URL
        supabase_key = settings.SUPABASE_SERVICE_ROLE_KEY  # MUST be service-role

        if not supabase_url or not supabase_key:
            logger.error("Missing Supabase credentials")
            logger.error(f"   URL: {supabase_url}")
            logger.error(f"   SERVICE ROLE KEY: {'SET' if supabase_key else 'MISSING'}")
            return None

        return create_client(supabase_url, supabase_key)

    except Exception as e:
        logger.error(f"Supabase Init Error: {e}", exc_info=True)
        return None


# ============================================================
# FastAPI dependency: one store handle per request
# ============================================================

def get_store_client() -> Client:
    client = get_supabase_client()
    if client is None:
        raise StoreFailure("Supabase client not configured")
    return client


# ============================================================
# Ping Supabase for health checks
# ============================================================

def ping_supabase(client: Client) -> dict:
    """
    Simple connectivity check against the core tables.
    """
    tables = ["buildings", "apartments", "user_roles", "audit_logs"]
    results = {}

    for t in tables:
        try:
            res = client.table(t).select("id").limit(1).execute()
            results[t] = {
                "status": "ok",
                "rows_found": len(res.data or [])
            }
        except Exception as err:
            results[t] = {"status": "error", "detail": str(err)}

    status = "ok" if all(r["status"] == "ok" for r in results.values()) else "degraded"
    return {
        "service": "Supabase",
        "status": status,
        "tables": results,
    }
