from typing import Optional, Tuple

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from supabase import Client

from core.binding_store import RoleBindingStore
from core.config import settings
from core.errors import Unauthenticated
from core.logging_config import logger
from core.roles import Actor
from core.soft_delete import is_deleted
from core.store import TableStore
from core.supabase_client import get_store_client


bearer_scheme = HTTPBearer(auto_error=False)

INVALID_TOKEN = "Invalid or expired authentication token"
INACTIVE_ACCOUNT = "Account is inactive"


# ============================================================
# CREDENTIAL VERIFICATION → (user id, email)
# ============================================================
def decode_local_token(token: str) -> Tuple[str, Optional[str]]:
    """Verify a Supabase access token with the project's JWT secret."""
    try:
        payload = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
    except JWTError as e:
        logger.info(f"Rejected access token: {e}")
        raise Unauthenticated(INVALID_TOKEN)

    user_id = payload.get("sub")
    if not user_id:
        raise Unauthenticated(INVALID_TOKEN)
    return user_id, payload.get("email")


def verify_with_supabase(client: Client, token: str) -> Tuple[str, Optional[str]]:
    """Validate the token via Supabase GoTrue."""
    try:
        auth_resp = client.auth.get_user(token)
    except Exception as e:
        logger.info(f"Rejected access token: {type(e).__name__}")
        raise Unauthenticated(INVALID_TOKEN)

    if not auth_resp or not auth_resp.user:
        raise Unauthenticated(INVALID_TOKEN)
    return auth_resp.user.id, auth_resp.user.email


def verify_credentials(client: Client, token: str) -> Tuple[str, Optional[str]]:
    if settings.SUPABASE_JWT_SECRET:
        return decode_local_token(token)
    return verify_with_supabase(client, token)


# ============================================================
# ACCOUNT STATUS (soft-deleted or deactivated users are locked out)
# ============================================================
def require_active_account(client: Client, user_id: str, missing: str = INVALID_TOKEN) -> dict:
    profile = TableStore(client, "users", "User").get(user_id, include_deleted=True)
    if profile is None:
        logger.info(f"No profile for authenticated user {user_id}")
        raise Unauthenticated(missing)
    if is_deleted(profile) or profile.get("is_active") is False:
        logger.info(f"Rejected inactive account {user_id}")
        raise Unauthenticated(INACTIVE_ACCOUNT)
    return profile


# ============================================================
# CURRENT ACTOR (identity + role bindings, rebuilt per request)
# ============================================================
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    client: Client = Depends(get_store_client),
) -> Actor:
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Not authenticated")

    user_id, email = verify_credentials(client, credentials.credentials)
    if not email:
        raise Unauthenticated(INVALID_TOKEN)

    require_active_account(client, user_id)
    bindings = RoleBindingStore(client).bindings_for(user_id)
    return Actor(id=user_id, email=email, bindings=bindings)
