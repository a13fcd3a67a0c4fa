# easybuy/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from easybuy.api.errors import register_error_handlers
from easybuy.api.routers import users, carts, orders, health
from easybuy.data.database import init_db
from easybuy.services.catalog import CatalogGateway, build_catalog
from easybuy.services.credentials import CredentialStore
from easybuy.services.lock_service import build_lock_service
from easybuy.utils.logging import get_logger

logger = get_logger(__name__)


def create_app(
    catalog: CatalogGateway | None = None,
    lock_service=None,
    credentials: CredentialStore | None = None,
    create_tables: bool = True,
) -> FastAPI:
    """
    Katalog, lock i hashowanie hasel zyja przez caly proces (app.state).
    Katalog ladowany raz przy starcie jesli nie zostal podany.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if create_tables:
            init_db()
        if app.state.catalog is None:
            app.state.catalog = build_catalog()
        logger.info("easybuy started")
        yield

    app = FastAPI(
        title="easybuy",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.catalog = catalog
    app.state.lock_service = lock_service or build_lock_service()
    app.state.credentials = credentials or CredentialStore()

    register_error_handlers(app)

    # Include routers
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(carts.router)
    app.include_router(orders.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
