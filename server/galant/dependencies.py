"""FastAPI dependencies for authentication, database and score sessions."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from galant.core.security import decode_access_token
from galant.db.session import get_db
from galant.models.user import User
from galant.overlay.engine import create_engine
from galant.overlay.session import ScoreSession, SessionRegistry
from galant.services.user_service import UserService

bearer_scheme = HTTPBearer(auto_error=False)

_session_registry: SessionRegistry | None = None


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Get the contributor a bearer token from the identity provider belongs to."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception
    try:
        claims = decode_access_token(credentials.credentials)
    except ValueError:
        raise credentials_exception

    return await UserService(db).upsert_from_claims(claims)


async def get_current_active_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get current active user (must be authenticated and active)."""
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")
    return current_user


def get_session_registry() -> SessionRegistry:
    """Process-wide score sessions, each with its own Verovio toolkit."""
    global _session_registry
    if _session_registry is None:
        _session_registry = SessionRegistry(create_engine)
    return _session_registry


async def get_score_session(
    session_id: str,
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> ScoreSession:
    """Look up a score session by the id in the path."""
    session = registry.get(session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Score session not found")
    return session
