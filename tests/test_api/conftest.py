"""
API fixtures: the app wired to the in-memory database and a test notification center
"""
import pytest
from fastapi.testclient import TestClient

from taskapp.api.deps import get_center, get_db, get_response_handler
from taskapp.application.notification_responses import ResponseHandler
from taskapp.main import create_app


@pytest.fixture
def app(session_factory, center):
    app = create_app()
    handler = ResponseHandler(center, session_factory, is_ready=lambda: True)

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_center] = lambda: center
    app.dependency_overrides[get_response_handler] = lambda: handler
    return app


@pytest.fixture
def client(app):
    """Test client (startup events are not run)"""
    return TestClient(app)
