"""Storefront HTTP API.

Every request runs inside the storefront domain context; anything that
escapes the routes and the registered error handlers is logged and returned
as a 500 envelope.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from protean.domain import Domain

from storefront.api.envelope import api_response, register_exception_handlers, server_error
from storefront.api.routes import cart_router, order_router, product_router
from storefront.utils.logging import add_context, clear_context

API_PREFIX = "/api"


def create_app(domain: Domain) -> FastAPI:
    app = FastAPI(
        title="Storefront API",
        description="Shopping carts, checkout and order management",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the storefront domain context and bind request log context."""
        clear_context()
        add_context(method=request.method, path=request.url.path)
        with domain.domain_context():
            try:
                return await call_next(request)
            except Exception as exc:
                return server_error(exc, request)
            finally:
                clear_context()

    register_exception_handlers(app)

    app.include_router(cart_router, prefix=API_PREFIX)
    app.include_router(order_router, prefix=API_PREFIX)
    app.include_router(product_router, prefix=API_PREFIX)

    @app.get(f"{API_PREFIX}/health")
    async def health():
        return api_response(200, "API is running", {"domain": domain.name})

    return app
