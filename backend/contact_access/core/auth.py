"""Session token verification.

Resolves a signed, time-limited session token to the acting user's id. Tokens
are JWTs (python-jose) carrying ``sub`` (user id), ``email`` and
``type="session"``. The email must also be on an allow-list, which is an
``AuthorizedUserStore`` handed to ``SessionTokenService`` by whoever builds
the application, so the access core never reads process-wide state.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from contact_access.core.errors import AuthenticationError, InvalidRequest, StoreError
from contact_access.db.uow import UnitOfWork
from contact_access.models.authorized_user import AuthorizedUser
from contact_access.utils.clock import utcnow

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthorizedUserStore(ABC):
    """Queryable allow-list of emails permitted to hold a session."""

    @abstractmethod
    def is_authorized(self, email: str) -> bool:
        raise NotImplementedError


class StaticAuthorizedUserStore(AuthorizedUserStore):
    """Fixed allow-list, e.g. seeded from configuration."""

    def __init__(self, emails: Iterable[str]):
        self._emails = frozenset(normalize_email(e) for e in emails if e and e.strip())

    def is_authorized(self, email: str) -> bool:
        return normalize_email(email) in self._emails


class SqlAuthorizedUserStore(AuthorizedUserStore):
    """Allow-list persisted in the ``authorized_users`` table."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def is_authorized(self, email: str) -> bool:
        with UnitOfWork(self._session_factory) as uow:
            return uow.session.execute(
                select(AuthorizedUser.id).where(AuthorizedUser.email == normalize_email(email)).limit(1)
            ).first() is not None

    def list_emails(self) -> List[str]:
        with UnitOfWork(self._session_factory) as uow:
            return list(uow.session.execute(
                select(AuthorizedUser.email).order_by(AuthorizedUser.email)
            ).scalars())

    def add(self, email: str, added_by: Optional[int] = None, notes: Optional[str] = None) -> None:
        normalized = normalize_email(email)
        if not normalized or "@" not in normalized:
            raise InvalidRequest(message="Invalid email format", details={"email": email})
        try:
            with UnitOfWork(self._session_factory) as uow:
                existing = uow.session.execute(
                    select(AuthorizedUser.id).where(AuthorizedUser.email == normalized)
                ).first()
                if existing is not None:
                    return
                uow.session.add(AuthorizedUser(email=normalized, added_by=added_by, notes=notes))
        except StoreError as exc:
            if not isinstance(exc.cause, IntegrityError):
                raise
            # Concurrent insert of the same email
            logger.info("authorized_user.already_present")

    def remove(self, email: str) -> bool:
        with UnitOfWork(self._session_factory) as uow:
            row = uow.session.execute(
                select(AuthorizedUser).where(AuthorizedUser.email == normalize_email(email))
            ).scalar_one_or_none()
            if row is None:
                return False
            uow.session.delete(row)
            return True


class SessionTokenService:
    def __init__(
        self,
        *,
        secret_key: str,
        algorithm: str,
        expire_minutes: int,
        store: AuthorizedUserStore,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes
        self._store = store
        self._clock = clock

    def create_session_token(self, user_id: int, email: str, expires_delta: Optional[timedelta] = None) -> str:
        expire = self._clock() + (expires_delta or timedelta(minutes=self._expire_minutes))
        to_encode = {
            "sub": str(user_id),
            "email": normalize_email(email),
            "type": "session",
            "exp": expire,
        }
        return jwt.encode(to_encode, self._secret_key, algorithm=self._algorithm)

    def resolve_current_user(self, token: str) -> int:
        """Return the user id a valid session token belongs to.

        Raises:
            AuthenticationError: Token invalid, expired, wrong type, or email not authorized.
        """
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except ExpiredSignatureError:
            raise AuthenticationError(message="Session expired")
        except JWTError:
            raise AuthenticationError(message="Could not validate credentials")

        if payload.get("type") != "session":
            raise AuthenticationError(message="Could not validate credentials")

        email = payload.get("email")
        if not email or not self._store.is_authorized(email):
            logger.warning("auth.email_not_authorized")
            raise AuthenticationError(message="Email is not authorized")

        try:
            return int(payload.get("sub"))
        except (TypeError, ValueError):
            raise AuthenticationError(message="Could not validate credentials")


def get_token_service(request: Request) -> SessionTokenService:
    return request.app.state.token_service


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    token_service: SessionTokenService = Depends(get_token_service),
) -> int:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(message="Not authenticated")
    return token_service.resolve_current_user(credentials.credentials)
