# storefront/api/__init__.py
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from sqlalchemy.engine import Engine

from storefront.api.routers import carts, categories, health, orders, payments, products, users
from storefront.data.database import Base, create_db_engine, make_session_factory
from storefront.domain.errors import DomainError
from storefront.services.notification_service import NotificationService
from storefront.services.payment_client import PaystackClient
from storefront.utils.settings import DATABASE_URL
from storefront.utils.logging import get_logger

# register every model in Base.metadata before create_all
import storefront.data.models  # noqa: F401

logger = get_logger(__name__)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message, "data": jsonable_encoder(exc.data)},
    )


def create_app(
    engine: Engine | None = None,
    gateway: PaystackClient | None = None,
    notifier: NotificationService | None = None,
) -> FastAPI:
    """Build the app. Engine, gateway client and notifier live on app.state for the process lifetime."""
    engine = engine or create_db_engine(DATABASE_URL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        Base.metadata.create_all(bind=engine)
        logger.info(f"Database ready, tables: {sorted(Base.metadata.tables.keys())}")
        yield
        app.state.gateway.close()
        engine.dispose()
        logger.info("Gateway client and database engine released")

    app = FastAPI(title="Storefront Order Service", version="1.0.0", lifespan=lifespan)
    app.state.session_factory = make_session_factory(engine)
    app.state.gateway = gateway or PaystackClient()
    app.state.notifier = notifier or NotificationService()

    app.add_exception_handler(DomainError, domain_error_handler)

    app.include_router(health.router)
    app.include_router(carts.router)
    app.include_router(payments.router)
    app.include_router(orders.router)
    app.include_router(orders.admin_router)
    app.include_router(products.router)
    app.include_router(categories.router)
    app.include_router(users.router)

    return app
