"""FastAPI dependency injection — database sessions, auth and dispatch."""
from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.security import TokenDecodeError, TokenService
from app.core.settings import get_settings
from app.db.models import User
from app.db.repositories import UserRepository
from app.db.session import get_session_factory
from app.distribution.dispatcher import DistributionDispatcher
from app.distribution.mail_transport import SmtpMailTransport
from app.distribution.pdf_renderer import PdfRenderer

_bearer = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """Yield a SQLAlchemy session; commit on success, rollback on error."""
    db = get_session_factory()()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_token_service() -> TokenService:
    settings = get_settings()
    return TokenService(
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        expire_minutes=settings.access_token_expire_minutes,
    )


def get_dispatcher() -> DistributionDispatcher:
    """Build a dispatcher wired to the configured SMTP relay and PDF layout."""
    settings = get_settings()
    renderer = PdfRenderer(
        page_size=settings.pdf_page_size,
        font_family=settings.pdf_font_family,
        font_size=settings.pdf_font_size,
    )
    transport = SmtpMailTransport(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_username,
        password=settings.smtp_password,
        use_tls=settings.smtp_use_tls,
        timeout=settings.smtp_timeout,
    )
    return DistributionDispatcher(renderer=renderer, transport=transport, sender=settings.mail_sender)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    tokens: TokenService = Depends(get_token_service),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to a ``User`` or fail with 401."""
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        payload = tokens.decode_access_token(credentials.credentials)
    except TokenDecodeError as exc:
        raise HTTPException(status_code=401, detail=str(exc))

    user = UserRepository(db).get_by_username(payload.subject)
    if user is None:
        raise HTTPException(status_code=401, detail="Unknown user")
    return user
