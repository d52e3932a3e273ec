"""
Mock authentication dependencies for FastAPI.

The portal identifies the caller with the ``x-mock-user-id`` header (and
optionally ``x-mock-role``); there is no token verification. Users are
looked up in the database so services get a real account.
"""
from typing import Optional
from fastapi import Depends, Header, HTTPException

from campusfix.models.database import User, get_session_factory


def get_db_session_factory():
    """Session factory dependency; tests override this with an in-memory DB."""
    return get_session_factory()


def _lookup(session_factory, user_id: str) -> Optional[User]:
    with session_factory() as session:
        user = session.get(User, user_id)
        if user is not None:
            session.expunge(user)
        return user


async def get_current_user(
    x_mock_user_id: Optional[str] = Header(None),
    x_mock_role: Optional[str] = Header(None),
    session_factory=Depends(get_db_session_factory),
) -> User:
    """Resolve the caller from the mock headers."""
    if not x_mock_user_id:
        raise HTTPException(status_code=401, detail="Missing user ID")

    user = _lookup(session_factory, x_mock_user_id)
    if user is None:
        raise HTTPException(status_code=401, detail=f"Unknown user: {x_mock_user_id}")

    # The role header must agree with the stored role
    if x_mock_role and x_mock_role.upper() != user.role:
        raise HTTPException(status_code=403, detail="Role header does not match user")

    return user


def require_roles(*roles: str):
    """Dependency factory that only lets the given roles through."""
    async def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail=f"{user.role} users cannot do this")
        return user
    return checker
