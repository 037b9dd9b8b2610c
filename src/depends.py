from typing import Optional

from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from libs.result import Error
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.cookies import ACCESS_COOKIE, SESSION_COOKIE
from src.api.error import ClientError, http_error
from src.app.services.security_services import SecurityServices
from src.app.services.session_manager import SessionData
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import PurgeExpiredSessionsUseCase, ValidateSessionUseCase
from src.domain.entities import AuthErrorCode

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)


def get_security_services(request: Request) -> SecurityServices:
    return request.app.state.security


async def get_unit_of_work(services: SecurityServices = Depends(get_security_services)):
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session, services.password_hasher)


def extract_session_token(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    """Bearer token first, then the session-token cookie, then the auth-token cookie"""
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(SESSION_COOKIE) or request.cookies.get(ACCESS_COOKIE)


async def get_current_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    uow: UnitOfWork = Depends(get_unit_of_work),
    services: SecurityServices = Depends(get_security_services),
) -> SessionData:
    """
    Dependency resolving the caller's live session.

    Raises:
        ClientError: 401 if the token is missing, invalid or expired
    """
    token = extract_session_token(request, credentials)
    result = await ValidateSessionUseCase(uow, services).resolve(token)

    if result.is_err():
        raise http_error(result.error)

    if result.value is None:
        raise ClientError(
            Error(AuthErrorCode.UNAUTHORIZED, "Authentication required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    return result.value


async def purge_expired_sessions(services: SecurityServices) -> int:
    """Sweeper hook: delete expired session rows in a fresh database session"""
    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUnitOfWork(session, services.password_hasher)
        result = await PurgeExpiredSessionsUseCase(uow).execute()
    return result.value if result.is_ok() else 0
