"""Authentication middleware - admin JWT auth mapped onto platform users."""

import uuid
from datetime import datetime, timedelta

from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from leadintel.config import settings
from leadintel.database import get_db
from leadintel.services.users import SqlUserDirectory

security = HTTPBearer(auto_error=False)

ALGORITHM = "HS256"


def create_admin_token(email: str) -> str:
    """Create a JWT token for admin access."""
    expire = datetime.utcnow() + timedelta(hours=settings.access_token_expire_hours)
    payload = {"sub": email, "exp": expire, "type": "admin"}
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def verify_admin_token(credentials: HTTPAuthorizationCredentials = Security(security)) -> str:
    """Verify admin JWT token. Returns admin email."""
    if not credentials:
        raise HTTPException(status_code=401, detail="Authentication required")
    try:
        payload = jwt.decode(credentials.credentials, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    email = payload.get("sub")
    if not email:
        raise HTTPException(status_code=401, detail="Invalid token")
    return email


def get_acting_user_id(
    email: str = Depends(verify_admin_token),
    db: Session = Depends(get_db),
) -> uuid.UUID:
    """The platform user behind the token; pipeline writes are attributed to it."""
    user_id = SqlUserDirectory(db).id_for_email(email)
    if user_id is None:
        raise HTTPException(status_code=403, detail="No active user for this account")
    return user_id
