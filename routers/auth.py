from fastapi import APIRouter, Depends
from supabase import Client

from core.audit import AuditEntry, AuditLedger
from core.errors import Unauthenticated
from core.logging_config import logger
from core.permission_helpers import requires
from core.roles import Actor
from core.supabase_client import get_store_client
from dependencies.auth import get_current_user, require_active_account
from dependencies.stores import get_audit_ledger
from models.auth import LoginRequest, TokenResponse
from models.enums import AuditAction
from models.user import MeRead, RoleBindingRead


router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)

INVALID_LOGIN = "Invalid email or password"


# ============================================================
# LOGIN (SUPABASE AUTH)
# ============================================================
@router.post("/login", response_model=TokenResponse, summary="Authenticate user")
def login(
    payload: LoginRequest,
    client: Client = Depends(get_store_client),
    ledger: AuditLedger = Depends(get_audit_ledger),
):
    email = payload.email.strip().lower()

    try:
        response = client.auth.sign_in_with_password(
            {"email": email, "password": payload.password}
        )
    except Exception as e:
        # Log the error for debugging but don't expose details to user
        logger.warning(f"Login attempt failed for {email}: {type(e).__name__}")
        raise Unauthenticated(INVALID_LOGIN)

    session = getattr(response, "session", None)
    if not session or not session.access_token:
        raise Unauthenticated(INVALID_LOGIN)

    user = getattr(response, "user", None)
    if not user:
        raise Unauthenticated(INVALID_LOGIN)
    require_active_account(client, user.id, missing=INVALID_LOGIN)

    ledger.record(AuditEntry(
        user_id=user.id,
        action=AuditAction.LOGIN,
        entity="User",
        entity_id=user.id,
        metadata={"event": "User logged in"},
    ))

    return TokenResponse(
        access_token=session.access_token,
        refresh_token=getattr(session, "refresh_token", None),
        expires_in=getattr(session, "expires_in", None),
    )


# ============================================================
# CURRENT USER
# ============================================================
@router.get(
    "/me",
    response_model=MeRead,
    summary="Current authenticated user",
    dependencies=[Depends(requires("auth.me"))],
)
def read_me(actor: Actor = Depends(get_current_user)):
    return MeRead(
        id=actor.id,
        email=actor.email,
        roles=[
            RoleBindingRead(role=b.role, building_id=b.building_id)
            for b in sorted(actor.bindings, key=lambda b: (b.role, b.building_id or ""))
        ],
    )
