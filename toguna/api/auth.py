"""Authentication API endpoints and role guards."""

from datetime import datetime, timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import RedirectResponse
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from google_auth_oauthlib.flow import Flow
from googleapiclient.discovery import build
from jose import jwt, JWTError

from toguna.config import get_settings
from toguna.services.database import get_db
from toguna.models.operator import Operator
from toguna.schemas.operator import OperatorResponse

router = APIRouter()
settings = get_settings()
security = HTTPBearer()

# Google OAuth scopes: identity plus calendar sync for appointments
SCOPES = [
    "openid",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
    "https://www.googleapis.com/auth/calendar",
    "https://www.googleapis.com/auth/calendar.events",
]


def create_access_token(operator: Operator) -> tuple[str, int]:
    """Create JWT access token carrying the operator id and role."""
    expire = datetime.utcnow() + timedelta(minutes=settings.jwt_expire_minutes)
    to_encode = {"sub": str(operator.id), "role": operator.role.value, "exp": expire}
    encoded_jwt = jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)
    return encoded_jwt, settings.jwt_expire_minutes * 60


def get_google_flow() -> Flow:
    """Create Google OAuth flow."""
    client_config = {
        "web": {
            "client_id": settings.google_client_id,
            "client_secret": settings.google_client_secret,
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "redirect_uris": [settings.google_redirect_uri],
        }
    }
    flow = Flow.from_client_config(client_config, scopes=SCOPES)
    flow.redirect_uri = settings.google_redirect_uri
    return flow


@router.get("/google")
async def google_login() -> RedirectResponse:
    """Initiate Google OAuth login."""
    flow = get_google_flow()
    authorization_url, _ = flow.authorization_url(
        access_type="offline",
        include_granted_scopes="true",
        prompt="consent",
    )
    return RedirectResponse(url=authorization_url)


@router.get("/google/callback")
async def google_callback(
    code: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RedirectResponse:
    """Handle Google OAuth callback. Only registered operators may sign in."""
    flow = get_google_flow()

    try:
        flow.fetch_token(code=code)
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Failed to exchange authorization code: {str(e)}",
        )

    credentials = flow.credentials
    service = build("oauth2", "v2", credentials=credentials)
    user_info = service.userinfo().get().execute()

    result = await db.execute(select(Operator).where(Operator.email == user_info["email"]))
    operator = result.scalar_one_or_none()
    if operator is None or not operator.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No active operator account for this Google account",
        )

    operator.google_access_token = credentials.token
    if credentials.refresh_token:
        operator.google_refresh_token = credentials.refresh_token
    operator.google_token_expires_at = credentials.expiry
    operator.last_login_at = datetime.utcnow()

    await db.commit()
    await db.refresh(operator)

    access_token, _ = create_access_token(operator)
    return RedirectResponse(url=f"{settings.frontend_url}?token={access_token}")


async def get_current_operator(
    db: Annotated[AsyncSession, Depends(get_db)],
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> Operator:
    """Get the authenticated operator from the JWT token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            credentials.credentials, settings.secret_key, algorithms=[settings.jwt_algorithm]
        )
        operator_id: str | None = payload.get("sub")
        if operator_id is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    result = await db.execute(select(Operator).where(Operator.id == int(operator_id)))
    operator = result.scalar_one_or_none()

    if operator is None or not operator.is_active:
        raise credentials_exception

    return operator


async def require_director(
    operator: Annotated[Operator, Depends(get_current_operator)],
) -> Operator:
    """Allow only directors through."""
    if not operator.is_director:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Director role required",
        )
    return operator


CurrentOperator = Annotated[Operator, Depends(get_current_operator)]
Director = Annotated[Operator, Depends(require_director)]


@router.get("/me", response_model=OperatorResponse)
async def get_me(operator: CurrentOperator) -> OperatorResponse:
    """Get current operator info."""
    return OperatorResponse.model_validate(operator)


@router.post("/logout")
async def logout() -> dict:
    """Logout current operator. Tokens expire on their own."""
    return {"message": "Logged out successfully"}
