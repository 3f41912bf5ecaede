"""FastAPI application for the marketplace listings backend."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.config import API_PREFIX, CORS_ORIGINS, DB_FILE, LOG_LEVEL, MAX_BODY_SIZE
from src.db.json_store import JsonDocumentStore
from src.exceptions import NotFoundError, StoreIOError, ValidationError
from src.loaders.document_loader import DocumentLoader
from src.models.products import ProductCreate, ProductPatch, SortOrder
from src.services.product_service import ProductRepository
from src.utils.middleware import BodySizeLimitMiddleware, RateLimitMiddleware, SecurityHeadersMiddleware
from src.utils.rate_limiter import build_rate_limiter

# Configure logging
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

router = APIRouter()


def get_repository(request: Request) -> ProductRepository:
    """Repository bound to the application's document store."""
    return request.app.state.repository


# Health check endpoint
@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"ok": True}


# Product Endpoints
@router.get("/products")
def list_products(
    q: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    subcategory: Optional[str] = Query(None),
    sort: str = Query(SortOrder.NEWEST.value),
    repository: ProductRepository = Depends(get_repository),
):
    """List products with optional text, category and subcategory filters."""
    items = repository.list_products(q=q, category=category, subcategory=subcategory, sort=sort)
    return {"items": items}


@router.post("/products", status_code=201)
def create_product(
    payload: Optional[ProductCreate] = Body(None),
    repository: ProductRepository = Depends(get_repository),
):
    """Create a new listing."""
    return repository.create_product(payload or ProductCreate())


@router.put("/products/{product_id}")
def update_product(
    product_id: str,
    patch: Optional[ProductPatch] = Body(None),
    repository: ProductRepository = Depends(get_repository),
):
    """Merge the given fields into an existing listing."""
    return repository.update_product(product_id, patch or ProductPatch())


@router.delete("/products/{product_id}", status_code=204)
def delete_product(product_id: str, repository: ProductRepository = Depends(get_repository)):
    """Delete a listing."""
    repository.delete_product(product_id)
    return Response(status_code=204)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()))
            message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
        else:
            message = "Invalid request"
        logger.warning(f"Rejected request to {request.url.path}: {message}")
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"error": str(exc)})

    @app.exception_handler(StoreIOError)
    async def store_error_handler(request: Request, exc: StoreIOError):
        logger.error(f"Document store failure for {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    # Generic exception handler to ensure JSON responses on uncaught exceptions
    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception for {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(store: JsonDocumentStore | None = None, rate_limiter=None) -> FastAPI:
    """
    Build the application around a document store.

    Args:
        store: Document store to serve; defaults to the configured DB_FILE
        rate_limiter: Limiter with a ``hit(client_id)`` method; defaults to RATE_LIMIT_BACKEND

    Returns:
        Configured FastAPI app
    """
    store = store if store is not None else JsonDocumentStore(DB_FILE)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        DocumentLoader(app.state.store).load_products()
        logger.info(f"Serving products from {app.state.store.path}")
        yield

    app = FastAPI(
        title="Marketplace Listings API",
        description="CRUD API for marketplace product listings backed by a JSON file",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.repository = ProductRepository(store)

    # The last middleware added runs first
    app.add_middleware(RateLimitMiddleware, limiter=rate_limiter or build_rate_limiter())
    app.add_middleware(BodySizeLimitMiddleware, max_body_size=MAX_BODY_SIZE)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)

    register_exception_handlers(app)
    app.include_router(router, prefix=API_PREFIX)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    from src.config import HOST, PORT

    uvicorn.run(app, host=HOST, port=PORT)
