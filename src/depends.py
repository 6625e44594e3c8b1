from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.cache_service import create_cache_service
from src.adapter.services.reference_validator import create_reference_validator
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.cache_service import CacheService
from src.app.services.reference_validator import ReferenceValidator

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

_cache_service = create_cache_service(
    ApplicationConfig.CACHE_BACKEND,
    ApplicationConfig.REDIS_URL,
    key_prefix=ApplicationConfig.CACHE_KEY_PREFIX,
)

_reference_validator = create_reference_validator(
    ApplicationConfig.REFERENCE_SERVICE_URL,
    timeout=ApplicationConfig.REFERENCE_SERVICE_TIMEOUT,
)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session, ApplicationConfig.TRANSACTION_TIMEOUT_SECONDS)


def get_cache_service() -> CacheService:
    return _cache_service


def get_reference_validator() -> ReferenceValidator:
    return _reference_validator
