import pytest

from clima import create_app
from clima.extensions import db
from clima.models import SurveyResponse


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def add_response(app):
    """Insert a response row directly, bypassing the submission path."""
    def _add(created_at=None, **answers):
        response = SurveyResponse(ip_address="127.0.0.1", **answers)
        if created_at is not None:
            response.created_at = created_at
        db.session.add(response)
        db.session.commit()
        return response
    return _add
