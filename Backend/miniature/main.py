import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import Settings, get_settings
from .core.db import AsyncSessionLocal, init_models
from .core.errors import install_exception_handlers
from .customer_routes import router as customer_router
from .product_routes import router as product_router
from .seed import seed_initial_data
from .shop_routes import router as shop_router


logger = logging.getLogger(__name__)

ROUTERS = {
    "customer": customer_router,
    "shop": shop_router,
    "product": product_router,
}


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API. ENABLED_SERVICES picks which routers are mounted, so the
    same code runs as one process or as separate customer/shop/product
    services behind a gateway.
    """
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Miniature Marketplace")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_exception_handlers(app)

    enabled = settings.enabled_services_list
    for name in enabled:
        router = ROUTERS.get(name)
        if router is None:
            logger.warning(f"Unknown service in ENABLED_SERVICES: {name}")
            continue
        app.include_router(router)
    logger.info(f"Mounted services: {', '.join(n for n in enabled if n in ROUTERS)}")

    @app.get("/health")
    async def health():
        return {"status": "UP"}

    @app.on_event("startup")
    async def on_startup():
        await init_models()
        if settings.seed_on_startup:
            async with AsyncSessionLocal() as session:
                await seed_initial_data(session)

    return app


app = create_app()
