"""Pytest configuration and shared fixtures for RoofReport tests."""

import base64
import io
import os
import sys
from datetime import datetime
from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock, patch

import pytest


# ============================================================================
# Ensure local imports work (assemblers/, models/, services/, config/)
# ============================================================================
#
# Our codebase uses absolute imports like `from models...` / `from services...`.
# This guarantees that `functions/` is importable as the top-level module root.
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


# ============================================================================
# Firebase Mocks
# ============================================================================

@pytest.fixture
def mock_firestore_client():
    """Mock Firestore client."""
    client = MagicMock()

    # Set up chain: client.collection().document()
    collection_mock = MagicMock()
    document_mock = MagicMock()
    client.collection.return_value = collection_mock
    collection_mock.document.return_value = document_mock

    document_mock.id = "report-123"
    document_mock.get = AsyncMock(return_value=MagicMock(
        exists=True,
        id="report-123",
        to_dict=lambda: {"fileName": "report.pdf", "userId": "user-1"}
    ))
    document_mock.set = AsyncMock()
    document_mock.update = AsyncMock()
    document_mock.delete = AsyncMock()

    return client


@pytest.fixture
def mock_firestore_service(mock_firestore_client):
    """FirestoreService backed by the mocked client."""
    from services.firestore_service import FirestoreService

    return FirestoreService(db=mock_firestore_client)


@pytest.fixture
def fake_firestore_service():
    """FirestoreService stand-in with every method as an AsyncMock."""
    service = MagicMock()
    service.add_report = AsyncMock(return_value="report-123")
    service.get_report = AsyncMock(return_value=None)
    service.list_user_reports = AsyncMock(return_value=[])
    service.delete_report = AsyncMock()
    service.get_user_role = AsyncMock(return_value=None)
    service.set_user_role = AsyncMock()
    service.delete_user_role = AsyncMock()
    return service


# ============================================================================
# LLM Mocks
# ============================================================================

@pytest.fixture
def mock_chat_openai():
    """Mock ChatOpenAI client."""
    mock = AsyncMock()
    mock.ainvoke.return_value = MagicMock(
        content='{"imageAnalysis": ["Granule loss near the ridge"]}',
        response_metadata={"token_usage": {"total_tokens": 100}}
    )
    return mock


# ============================================================================
# Sessions
# ============================================================================

@pytest.fixture
def signed_in_session():
    from services.session import UserSession

    return UserSession(user_id="user-1", email="pat.doe@example.com")


@pytest.fixture
def anonymous_session():
    from services.session import UserSession

    return UserSession(user_id=None)


# ============================================================================
# Sample Data Fixtures
# ============================================================================

@pytest.fixture
def fixed_now():
    """Fixed clock for dates in reports and file names."""
    return datetime(2024, 3, 1, 9, 30, 0)


@pytest.fixture
def png_base64():
    """A tiny valid PNG, base64 encoded."""
    from PIL import Image

    buffer = io.BytesIO()
    Image.new("RGB", (4, 3), (200, 80, 10)).save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


@pytest.fixture
def austin_form() -> Dict[str, Any]:
    """Residential project in Austin with a 1200 sq ft roof."""
    from tests.fixtures.sample_projects import AUSTIN_RESIDENTIAL

    return dict(AUSTIN_RESIDENTIAL)


@pytest.fixture
def fake_pdf_backend():
    """Skip WeasyPrint: serialization returns a fixed PDF body."""
    with patch("renderer.pdf_writer._html_to_pdf", return_value=b"%PDF-1.4\n%fake\n") as mock:
        yield mock


# ============================================================================
# Environment Setup
# ============================================================================

@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep tests offline and on defaults regardless of the local .env."""
    from config.settings import settings

    monkeypatch.setattr(settings, "pricing_feed_url", None)
    monkeypatch.setattr(settings, "brand_name", "RoofReport")
    monkeypatch.setattr(settings, "default_language", "english")
    monkeypatch.setattr(settings, "default_currency", "USD")
    monkeypatch.setattr(settings, "_openai_api_key", "test-api-key")
    yield settings
