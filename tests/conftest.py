import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Fetch and activate the domain by pushing the associated domain_context. The activated domain can then be referred to elsewhere as `current_domain`
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env

    from storefront.domain import storefront

    storefront.init()
    storefront.domain_context().push()


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(scope="session", autouse=True)
def setup_db(request):
    from storefront.domain import storefront
    from storefront.utils.db import drop_db, setup_db

    setup_db(storefront)

    yield

    drop_db(storefront)


@pytest.fixture(autouse=True)
def run_around_tests():
    """Fixture to automatically cleanup infrastructure after every test"""
    yield

    from protean import current_domain

    from storefront.access import reset_verifier

    # Clear all databases
    for _, provider in current_domain.providers.items():
        provider._data_reset()

    # Drain event stores
    current_domain.event_store.store._data_reset()

    reset_verifier()


@pytest.fixture()
def make_product():
    """Persist a product through the catalogue and return it."""
    from protean import current_domain

    from storefront.catalogue.management import CreateProduct
    from storefront.catalogue.product import Product

    def _make(name="Widget", price=50.0, quantity=10, **overrides):
        product_id = current_domain.process(
            CreateProduct(name=name, price=price, quantity=quantity, **overrides),
            asynchronous=False,
        )
        return current_domain.repository_for(Product).get(product_id)

    return _make


@pytest.fixture()
def shipping_address():
    return {
        "first_name": "Jane",
        "last_name": "Doe",
        "address1": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "postal_code": "62701",
        "country": "US",
        "phone": "555-0100",
    }


@pytest.fixture()
def client():
    from fastapi.testclient import TestClient

    from storefront.api import create_app
    from storefront.domain import storefront

    return TestClient(create_app(storefront), raise_server_exceptions=False)


@pytest.fixture()
def auth_headers():
    """Build request headers carrying a signed bearer token for a user and role."""
    from storefront.access.jwt_adapter import JwtTokenVerifier

    def _headers(user_id="user-001", role="customer"):
        token = JwtTokenVerifier().issue(user_id, role=role)
        return {"Authorization": f"Bearer {token}"}

    return _headers
