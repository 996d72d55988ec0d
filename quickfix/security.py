from datetime import datetime, timedelta, timezone

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from .admins import AdminStore
from .config import Settings
from .deps import get_db, get_token_service
from .errors import AuthorizationError
from .models import Admin

bearer_scheme = HTTPBearer(auto_error=False)


class TokenService:
    """Issues and checks the signed, time-boxed bearer tokens handed to admins."""

    def __init__(self, settings: Settings):
        self.secret = settings.JWT_SECRET
        self.algorithm = settings.JWT_ALGORITHM
        self.ttl = timedelta(hours=settings.TOKEN_TTL_HOURS)

    def issue(self, admin: Admin, issued_at: datetime | None = None) -> str:
        iat = issued_at or datetime.now(timezone.utc)
        claims = {
            "sub": str(admin.id),
            "adminId": admin.id,
            "username": admin.username,
            "role": admin.role,
            "iat": int(iat.timestamp()),
            "exp": int((iat + self.ttl).timestamp()),
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> dict:
        """Signature and expiry check only; see `authorize` for the account check."""
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError:
            raise AuthorizationError() from None

        if not isinstance(payload.get("adminId"), int):
            raise AuthorizationError()
        return payload

    async def authorize(self, db: AsyncSession, token: str) -> Admin:
        claims = self.verify(token)

        # deactivation takes effect on the next request, there is no revocation list
        admin = await AdminStore(db).get(claims["adminId"])
        if not admin or not admin.is_active:
            raise AuthorizationError()
        return admin


async def get_current_admin(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> Admin:
    token = None
    if creds and creds.scheme.lower() == "bearer":
        token = creds.credentials

    if not token:
        raise AuthorizationError("Access denied. No token provided.")

    admin = await tokens.authorize(db, token)

    request.state.admin_username = admin.username
    request.state.admin_role = admin.role
    return admin
