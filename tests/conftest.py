"""
Shared pytest fixtures for vecfilter tests.
"""

import pytest
import pytest_asyncio
import tempfile
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from vecfilter.db.document_store import DocumentStore
from vecfilter.db.filters import SQLITE, WhereClauseBuilder


SAMPLE_DOCUMENTS = [
    {"content": "foo", "metadata": {
        "start": 100, "end": 150, "quality": "good", "ready": True, "published": "2024-01-15"
    }},
    {"content": "bar", "metadata": {
        "start": 200, "end": 250, "quality": "bad", "ready": False, "published": "2024-03-01"
    }},
    {"content": "baz", "metadata": {
        "start": 300, "end": 350, "quality": "ugly", "ready": True, "published": "2024-06-30",
        "Owner": "Steve"
    }},
]


@pytest.fixture
def builder():
    """WhereClauseBuilder with the default dialect and no dedicated columns."""
    return WhereClauseBuilder(dedicated_columns=[], metadata_column="VEC_META")


@pytest.fixture
def column_builder():
    """WhereClauseBuilder with a few dedicated columns."""
    return WhereClauseBuilder(dedicated_columns=["quality", "a", "b", "c"], metadata_column="VEC_META")


@pytest.fixture
def sqlite_builder():
    """WhereClauseBuilder rendering SQLite SQL."""
    return WhereClauseBuilder(dedicated_columns=["quality"], metadata_column="meta", dialect=SQLITE)


@pytest_asyncio.fixture
async def document_store():
    """Provide a clean DocumentStore for each test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        store = DocumentStore(str(db_path), specific_metadata_columns=["quality"])
        await store.initialize()
        yield store


@pytest_asyncio.fixture
async def populated_store(document_store):
    """Provide DocumentStore with the sample documents."""
    await document_store.add_documents(SAMPLE_DOCUMENTS)
    yield document_store
