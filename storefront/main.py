"""
Storefront API

FastAPI application: catalog, cart, checkout and order history over the
document store selected by DOCUMENT_STORE.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text

from storefront.api.deps import get_memory_store
from storefront.api.routes import auth, cart, categories, checkout, orders, products
from storefront.core.config import settings
from storefront.core.database import AsyncSessionLocal, create_tables
from storefront.core.error_handler import register_error_handlers
from storefront.core.rate_limit import limiter, rate_limit_exceeded_handler
from storefront.db.seed import seed_database, seed_memory_store

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and seed demo data on startup when configured."""
    if settings.DOCUMENT_STORE == "sql":
        if settings.SEED_ON_STARTUP:
            await seed_database()
        elif settings.DB_CREATE_TABLES:
            await create_tables()
            logger.info("Database tables ready")
    elif settings.SEED_ON_STARTUP:
        await seed_memory_store(get_memory_store())

    logger.info(f"{settings.APP_NAME} started (store={settings.DOCUMENT_STORE}, env={settings.ENVIRONMENT})")
    yield


app = FastAPI(
    lifespan=lifespan,
    title=f"{settings.APP_NAME} API",
    description="""
## Storefront API

Browse products and categories, keep a cart, check out and review orders.

### Authentication
Use `/api/auth/login` or `/api/auth/register`. The session token is set as an
HttpOnly cookie; API clients may send it as a Bearer token instead.

### Rate Limits
- Auth endpoints: 5 requests/minute
- Checkout: 10 requests/minute
    """,
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "Health", "description": "Health check endpoints"},
        {"name": "Authentication", "description": "Sign in, sign up and sign out"},
        {"name": "Products", "description": "Product catalog"},
        {"name": "Categories", "description": "Product categories"},
        {"name": "Cart", "description": "Shopping cart operations"},
        {"name": "Checkout", "description": "Order placement"},
        {"name": "Orders", "description": "Order history and status"},
    ],
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(products.router, prefix="/api/products", tags=["Products"])
app.include_router(categories.router, prefix="/api/categories", tags=["Categories"])
app.include_router(cart.router, prefix="/api/cart", tags=["Cart"])
app.include_router(checkout.router, prefix="/api", tags=["Checkout"])
app.include_router(orders.router, prefix="/api/orders", tags=["Orders"])


@app.get("/", tags=["Health"])
async def root():
    return {
        "message": f"{settings.APP_NAME} API",
        "version": VERSION,
        "status": "operational",
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Returns 503 if the database is unreachable."""
    health_status = {"status": "healthy", "store": settings.DOCUMENT_STORE, "database": "n/a"}

    if settings.DOCUMENT_STORE == "sql":
        try:
            async with AsyncSessionLocal() as db:
                await db.execute(text("SELECT 1"))
            health_status["database"] = "connected"
        except Exception as e:
            logger.error(f"Health check database ping failed: {type(e).__name__}: {e}")
            health_status["database"] = f"error: {type(e).__name__}"
            health_status["status"] = "unhealthy"
            return JSONResponse(status_code=503, content=health_status)

    return health_status
