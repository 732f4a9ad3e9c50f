"""Tests for error handling and custom exceptions."""

import pytest
from flask import Flask

from authtrail.exceptions import (
    AuthenticationError,
    AuthorizationError,
    AuthTrailError,
    ConfigurationError,
    ConflictError,
    InvalidEmail,
    ResourceNotFound,
    StoreError,
    ValidationError,
)
from authtrail.main import register_error_handlers


@pytest.fixture
def error_app():
    """Create a test app with error testing routes."""
    test_app = Flask(__name__)
    test_app.config['TESTING'] = True
    register_error_handlers(test_app)

    @test_app.route('/test/validation')
    def test_validation():
        raise ValidationError("Invalid request data", details={"field": "email"})

    @test_app.route('/test/domain')
    def test_domain():
        raise InvalidEmail("E-mail inválido.", details={"field": "email"})

    @test_app.route('/test/conflict')
    def test_conflict():
        raise ConflictError("E-mail já está em uso.")

    @test_app.route('/test/authentication')
    def test_authentication():
        raise AuthenticationError("Usuário ou senha inválidos.")

    @test_app.route('/test/authorization')
    def test_authorization():
        raise AuthorizationError("Authentication required", {"code": "missing_auth"})

    @test_app.route('/test/not-found')
    def test_not_found():
        raise ResourceNotFound("User not found", details={"id": "123"})

    @test_app.route('/test/not-found-no-details')
    def test_not_found_no_details():
        raise ResourceNotFound("Not found")

    @test_app.route('/test/store')
    def test_store():
        raise StoreError("Failed to read user", {"cause": "database is locked"})

    @test_app.route('/test/other')
    def test_other():
        raise ConfigurationError("bad key", {"secret": "value"})

    return test_app


@pytest.fixture
def error_client(error_app):
    """Create test client for error testing."""
    return error_app.test_client()


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_message_and_details(self):
        error = AuthTrailError("boom", {"a": 1})
        assert error.message == "boom"
        assert error.details == {"a": 1}
        assert str(error) == "boom"

    def test_details_default_to_empty_dict(self):
        assert AuthTrailError("boom").details == {}


class TestErrorHandlers:
    """Tests for the JSON error responses."""

    def test_validation_error(self, error_client):
        response = error_client.get('/test/validation')

        assert response.status_code == 400
        assert response.get_json() == {
            "error": {
                "type": "ValidationError",
                "message": "Invalid request data",
                "details": {"field": "email"}
            }
        }

    def test_domain_rule_violation_keeps_subclass_name(self, error_client):
        response = error_client.get('/test/domain')

        assert response.status_code == 400
        assert response.get_json()["error"]["type"] == "InvalidEmail"

    def test_conflict(self, error_client):
        response = error_client.get('/test/conflict')
        assert response.status_code == 400
        assert response.get_json()["error"]["type"] == "ConflictError"

    @pytest.mark.parametrize("path", ['/test/authentication', '/test/authorization'])
    def test_unauthorized(self, error_client, path):
        assert error_client.get(path).status_code == 401

    def test_not_found(self, error_client):
        response = error_client.get('/test/not-found')

        assert response.status_code == 404
        assert response.get_json()["error"]["details"] == {"id": "123"}

    def test_not_found_without_details(self, error_client):
        response = error_client.get('/test/not-found-no-details')

        assert response.status_code == 404
        assert "details" not in response.get_json()["error"]

    def test_store_error_hides_cause(self, error_client):
        response = error_client.get('/test/store')

        assert response.status_code == 500
        assert response.get_json() == {
            "error": {"type": "InternalServerError", "message": "An internal error occurred"}
        }

    def test_other_errors_hide_details(self, error_client):
        response = error_client.get('/test/other')

        assert response.status_code == 500
        assert "details" not in response.get_json()["error"]
