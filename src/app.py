"""Storefront FastAPI application.

Processes commands synchronously via HTTP inside the storefront domain
context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the configuration overlay from pyproject.toml.
from storefront.access import get_verifier
from storefront.api import create_app
from storefront.domain import storefront

storefront.init()

# Token verifier configuration is checked at startup
get_verifier()

app = create_app(storefront)
