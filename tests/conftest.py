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
    """Select the config overlay before the domain is imported."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def storefront_bed():
    from protean.integrations.pytest import DomainFixture
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def run_around_tests(storefront_bed):
    """Push domain context before each test, cleanup after."""
    with storefront_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()

        for _, broker in current_domain.brokers.items():
            broker._data_reset()

        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def monitor():
    """Capture reported failures in memory for every test."""
    from storefront.monitoring import reset_monitor, set_monitor
    from storefront.monitoring.fake_adapter import FakeMonitor

    fake = FakeMonitor()
    set_monitor(fake)
    yield fake
    reset_monitor()


@pytest.fixture()
def register_product():
    """Register a product through the catalogue command path and return its id."""
    from protean import current_domain
    from storefront.catalogue.management import RegisterProduct

    def _register(name="Thermos", price=10.0, stock=10, category="Kitchen"):
        return current_domain.process(
            RegisterProduct(name=name, price=price, stock=stock, category=category),
            asynchronous=False,
        )

    return _register
