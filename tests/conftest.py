"""
Test Configuration and Fixtures

Shared fixtures: validator and factories, a temporary SQLite content
database, and a registry populated with a small sample site.
"""

import pytest

from tuskfish.content.objects import ContentObject
from tuskfish.content.types import ContentType
from tuskfish.content_handlers.registry import HandlerRegistry
from tuskfish.core.config.models import DatabaseConfig, SiteConfig
from tuskfish.core.validation import DataValidator
from tuskfish.criteria.factory import CriteriaFactory, CriteriaItemFactory
from tuskfish.database.database import Database


@pytest.fixture
def validator():
    """Create a DataValidator instance."""
    return DataValidator()


@pytest.fixture
def criteria_factory(validator):
    return CriteriaFactory(validator)


@pytest.fixture
def item_factory(validator):
    return CriteriaItemFactory(validator)


@pytest.fixture
def criteria(criteria_factory):
    """An empty criteria object."""
    return criteria_factory.get_criteria()


# Database Fixtures
@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "tuskfish.db"


@pytest.fixture
def database(db_path):
    """Create a temporary content database with the schema applied."""
    db = Database(DatabaseConfig(path=db_path))
    db.initialize_schema()
    yield db
    db.close()


@pytest.fixture
def site_config():
    return SiteConfig(min_search_length=3, search_pagination=20)


@pytest.fixture
def registry(database, site_config):
    """Handler registry over the empty temporary database."""
    return HandlerRegistry(database, site_config)


def _sample_objects():
    return [
        ('fish_tag', ContentObject(type=ContentType.TAG, title="Fish")),
        ('elephant_tag', ContentObject(type=ContentType.TAG, title="Elephant")),
        ('hidden_tag', ContentObject(type=ContentType.TAG, title="Hidden", online=0)),
        ('guides', ContentObject(type=ContentType.COLLECTION, title="Field guides",
                                 date="2024-01-01")),
        ('tusk_care', ContentObject(type=ContentType.ARTICLE, title="Tusk care",
                                    teaser="About <b>tusks</b> &amp; care",
                                    description="Keeping ivory healthy.",
                                    creator="Ada", date="2024-03-01", tags=[1])),
        ('reef_fish', ContentObject(type=ContentType.ARTICLE, title="Fish of the reef",
                                    date="2024-02-01", tags=[1, 2])),
        ('elephant_walk', ContentObject(type=ContentType.VIDEO, title="Elephant walk",
                                        description="A herd on the move.",
                                        date="2024-04-01", tags=[2])),
        ('reef_photo', ContentObject(type=ContentType.IMAGE, title="Reef photo",
                                     caption="Coral at dawn", date="2024-01-15", tags=[1])),
        ('sidebar', ContentObject(type=ContentType.BLOCK, title="Sidebar",
                                  description="fish block")),
        ('draft', ContentObject(type=ContentType.ARTICLE, title="Draft fish",
                                date="2024-05-01", online=0)),
    ]


@pytest.fixture
def populated(registry):
    """
    Registry over a database holding a small sample site.

    Returns:
        (registry, ids) where ids maps sample names to content ids
    """
    handler = registry.content_handler
    ids = {}
    for name, obj in _sample_objects():
        ids[name] = handler.insert(obj)

    # children of the collection
    for name in ('tusk_care', 'reef_photo'):
        obj = handler.get_object(ids[name])
        obj.parent = ids['guides']
        handler.update(obj)

    return registry, ids


# Pytest Configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "cli: marks tests that invoke the command line interface"
    )
