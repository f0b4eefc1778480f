from __future__ import annotations
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from memevsmeme.db import get_session
from memevsmeme.security import InvalidToken, user_id_from_token
from memevsmeme.models.user import User

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)

async def _user_from_token(token: str, session: AsyncSession) -> User:
    try:
        user_id = user_id_from_token(token, "access")
    except InvalidToken as e:
        raise HTTPException(status_code=401, detail=str(e))
    user = await session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user

async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    session: AsyncSession = Depends(get_session)
) -> User:
    return await _user_from_token(credentials.credentials, session)

async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(optional_security),
    session: AsyncSession = Depends(get_session),
) -> User | None:
    # Anonymous callers are allowed; a bad token is still rejected
    if credentials is None:
        return None
    return await _user_from_token(credentials.credentials, session)
