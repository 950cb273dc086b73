"""
# `storefront/main.py`

Entry point of the FastAPI application.
Routers are mounted under `/api`, CORS is configured, and domain errors
(`StorefrontError` subclasses) are turned into JSON responses.

## Public routers (prefix `/api`)
- `/auth`, `/users`, `/contact`
- `/products` (catalog + reviews)
- `/cart`
- `/orders`
- `/payments`

## Admin routers (prefix `/api/admin`)
- `/products`

All admin routes are guarded by `get_current_admin` in their modules.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.config import settings
from storefront.core.errors import StorefrontError
from storefront.routers import auth, carts, orders, payments, products, reviews, users

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("storefront")

# Initialize FastAPI app
app = FastAPI(
    title="Storefront API",
    description="Backend API for a clothing storefront: catalog, reviews, cart, orders and payments.",
    version="1.0.0",
    redirect_slashes=False,
)

# Configure CORS (allow front-end domain or all origins when unset)
allow_origins = [origin.strip() for origin in settings.allowed_origins.split(',')] if settings.allowed_origins else ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# Include public routers
app.include_router(auth.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(users.contact_router, prefix="/api")
app.include_router(products.router, prefix="/api")
app.include_router(reviews.router, prefix="/api")
app.include_router(carts.router, prefix="/api")
app.include_router(orders.router, prefix="/api")
app.include_router(payments.router, prefix="/api")

# Include admin routers (with prefix /api/admin)
app.include_router(products.admin_router, prefix="/api/admin")


@app.get("/api/health", tags=["Health"])
def health():
    return {"status": "ok"}


# Run the app directly with uvicorn (for development)
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("storefront.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
