import jwt
import logging
import os
from datetime import datetime, timedelta, timezone
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from fastapi import Depends
from typing import Annotated, Optional
from helpers.errors import AuthenticationError, AuthorizationError
from models.user import User, UserRole

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def _jwt_key() -> str:
    jwt_key = os.getenv("JWT_SECRET")
    if not jwt_key:
        raise ValueError("JWT_SECRET environment variable is not set")
    return jwt_key


def generate_user_token(payload: dict):
    hours = int(os.getenv("JWT_EXPIRES_HOURS", "24"))
    claims = {**payload, "exp": datetime.now(timezone.utc) + timedelta(hours=hours)}
    token = jwt.encode(claims, _jwt_key(), algorithm='HS256')
    return token


def decode_user_token(token: str):
    try:
        return jwt.decode(token, _jwt_key(), algorithms=['HS256'])
    except jwt.PyJWTError as e:
        logger.info("Token verification failed: %s", e)
        raise AuthenticationError("Not authorized, token failed")


async def get_current_user(credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)]) -> User:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authorized, no token provided")

    user_credential = decode_user_token(token=credentials.credentials)
    user = await User.get_or_none(id=user_credential.get("id"))
    if not user:
        raise AuthenticationError("User not found")
    return user


def require_role(*roles: UserRole):
    async def checker(user: Annotated[User, Depends(get_current_user)]) -> User:
        if user.role not in roles:
            raise AuthorizationError(f"User role '{user.role.value}' is not authorized")
        return user

    return checker


CurrentUser = Annotated[User, Depends(get_current_user)]
DoctorUser = Annotated[User, Depends(require_role(UserRole.DOCTOR))]
PatientUser = Annotated[User, Depends(require_role(UserRole.PATIENT))]
AdminUser = Annotated[User, Depends(require_role(UserRole.ADMIN))]
