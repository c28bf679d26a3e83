"""Session tokens for LRH Flow.

Users sign in through Microsoft OAuth elsewhere; the API only sees the short-lived
JWT issued after that exchange.
"""

import os
import jwt
from datetime import datetime, timedelta
from typing import Optional, Dict
from dotenv import load_dotenv

from lrhflow.database.models import enum_to_value
from lrhflow.models.user import User

load_dotenv()

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRATION_HOURS = int(os.getenv("JWT_EXPIRATION_HOURS", "24"))


def create_access_token(user: User, now: Optional[datetime] = None) -> str:
    """Issue a session token carrying the user id and role."""
    issued = now or datetime.utcnow()
    payload = {
        "sub": user.id,
        "role": enum_to_value(user.role),
        "exp": issued + timedelta(hours=JWT_EXPIRATION_HOURS),
        "iat": issued,
    }
    return jwt.encode(payload, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict]:
    """Decode and validate a session token; None if invalid or expired."""
    try:
        return jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def get_user_id_from_token(token: str) -> Optional[str]:
    payload = decode_access_token(token)
    if payload:
        return payload.get("sub")
    return None
