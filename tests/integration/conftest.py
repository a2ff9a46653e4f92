import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from storefront.api.errors import register_error_handlers
from storefront.api.routes import address_router, cart_router, order_router


@pytest.fixture()
def app():
    app = FastAPI()
    register_error_handlers(app)
    app.include_router(cart_router)
    app.include_router(address_router)
    app.include_router(order_router)
    return app


@pytest.fixture()
def client(app):
    return TestClient(app)
