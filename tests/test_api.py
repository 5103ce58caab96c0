"""Tests for the HTTP surface."""
import pytest
from unittest.mock import Mock

from fastapi.testclient import TestClient

from feedback_analytics.api.app import create_app
from feedback_analytics.config.settings import Settings
from feedback_analytics.data_access.auth_client import AuthClient, AuthSession
from feedback_analytics.data_access.topic_client import TopicClient
from feedback_analytics.exceptions import AuthError, AuthErrorKind, StoreError
from feedback_analytics.models.schemas import TopicWithStats
from feedback_analytics.pipelines.fallback import FeedbackRepository


@pytest.fixture
def mock_config():
    """Create a mock configuration without a store."""
    config = Mock(spec=Settings)
    config.is_store_configured = False
    config.is_auth_configured = True
    config.max_workers = 2
    config.hardware_keywords = ["lcd", "screen", "display"]
    config.recent_window_days = 7
    config.topic_trend_limit = 8
    config.alert_limit = 3
    config.sentiment_trend_days = 30
    config.response_time_fallback_hours = 24.0
    return config


@pytest.fixture
def auth_client():
    return Mock(spec=AuthClient)


@pytest.fixture
def client(mock_config, auth_client):
    app = create_app(mock_config, auth_client=auth_client, repository=FeedbackRepository(mock_config))
    return TestClient(app)


class TestLogin:
    """Test POST/GET /api/login."""

    def test_missing_email(self, client):
        response = client.post("/api/login", json={"password": "password123"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Email dan password harus diisi"}

    def test_missing_password(self, client):
        response = client.post("/api/login", json={"email": "test@example.com"})

        assert response.status_code == 400
        assert response.json()["error"] == "Email dan password harus diisi"

    def test_invalid_credentials(self, client, auth_client):
        auth_client.sign_in.side_effect = AuthError(AuthErrorKind.INVALID_CREDENTIALS, "Invalid login credentials")

        response = client.post("/api/login", json={"email": "test@example.com", "password": "wrongpassword"})

        assert response.status_code == 401
        assert response.json()["error"] == "Email atau password salah"

    def test_unconfirmed_email(self, client, auth_client):
        auth_client.sign_in.side_effect = AuthError(AuthErrorKind.EMAIL_NOT_CONFIRMED, "Email not confirmed")

        response = client.post("/api/login", json={"email": "test@example.com", "password": "password123"})

        assert response.status_code == 401
        assert response.json()["error"] == "Email belum dikonfirmasi. Silakan cek email Anda."

    def test_successful_login(self, client, auth_client):
        user = {"id": "123", "email": "test@example.com", "user_metadata": {"name": "Test User"}}
        session = {"access_token": "mock-token", "refresh_token": "mock-refresh-token"}
        auth_client.sign_in.return_value = AuthSession(user=user, session=session)

        response = client.post("/api/login", json={"email": "test@example.com", "password": "password123"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Login berhasil"
        assert body["user"] == user
        assert body["session"] == session
        auth_client.sign_in.assert_called_once_with("test@example.com", "password123")

    def test_unexpected_error(self, client, auth_client):
        auth_client.sign_in.side_effect = RuntimeError("Database connection failed")

        response = client.post("/api/login", json={"email": "test@example.com", "password": "password123"})

        assert response.status_code == 500
        assert response.json()["error"] == "Terjadi kesalahan server"

    def test_non_string_email_keeps_response_shape(self, client, auth_client):
        response = client.post("/api/login", json={"email": 123, "password": "password123"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Email dan password harus diisi"}
        auth_client.sign_in.assert_not_called()

    def test_malformed_json_is_a_server_error(self, client):
        response = client.post(
            "/api/login", content="{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Terjadi kesalahan server"}

    def test_get_returns_endpoint_info(self, client):
        response = client.get("/api/login")

        assert response.status_code == 200
        assert response.json() == {"message": "Login API endpoint", "methods": ["POST"]}


class TestRegister:
    """Test POST/GET /api/register."""

    def _post(self, client, **overrides):
        payload = {"email": "new@example.com", "password": "secret1", "confirmPassword": "secret1"}
        payload.update(overrides)
        return client.post("/api/register", json=payload)

    def test_missing_fields(self, client):
        response = self._post(client, confirmPassword=None)

        assert response.status_code == 400
        assert response.json()["message"] == "Email, password, dan konfirmasi password harus diisi"

    def test_bad_email_format(self, client):
        response = self._post(client, email="not-an-email")

        assert response.status_code == 400
        assert response.json()["message"] == "Format email tidak valid"

    def test_password_mismatch(self, client):
        response = self._post(client, confirmPassword="secret2")

        assert response.status_code == 400
        assert response.json()["message"] == "Password dan konfirmasi password tidak cocok"

    def test_password_too_short(self, client, auth_client):
        response = self._post(client, password="12345", confirmPassword="12345")

        assert response.status_code == 400
        assert response.json()["message"] == "Password harus minimal 6 karakter"
        auth_client.sign_up.assert_not_called()

    @pytest.mark.parametrize("kind, message", [
        (AuthErrorKind.ALREADY_REGISTERED, "Email sudah terdaftar. Silakan gunakan email lain atau login"),
        (AuthErrorKind.WEAK_PASSWORD, "Password terlalu lemah. Gunakan minimal 6 karakter"),
        (AuthErrorKind.INVALID_EMAIL, "Format email tidak valid"),
        (AuthErrorKind.SIGNUP_DISABLED, "Registrasi sementara dinonaktifkan"),
        (AuthErrorKind.UNKNOWN, "Registrasi gagal"),
    ])
    def test_upstream_failures(self, client, auth_client, kind, message):
        auth_client.sign_up.side_effect = AuthError(kind, "upstream")

        response = self._post(client)

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": message}

    def test_success_pending_confirmation(self, client, auth_client):
        auth_client.sign_up.return_value = AuthSession(user={"id": "u1", "email_confirmed_at": None})

        response = self._post(client)

        assert response.status_code == 201
        assert response.json()["message"] == "Registrasi berhasil! Silakan cek email untuk konfirmasi akun"

    def test_success_confirmed(self, client, auth_client):
        auth_client.sign_up.return_value = AuthSession(
            user={"id": "u1", "email_confirmed_at": "2025-03-14T09:00:00Z"},
            session={"access_token": "token"},
        )

        response = self._post(client)

        assert response.status_code == 201
        assert response.json()["message"] == "Registrasi berhasil! Anda sudah bisa login"

    def test_unexpected_error(self, client, auth_client):
        auth_client.sign_up.side_effect = RuntimeError("boom")

        response = self._post(client)

        assert response.status_code == 500
        assert response.json()["message"] == "Terjadi kesalahan server"

    def test_non_string_password_keeps_response_shape(self, client):
        response = self._post(client, password=["secret1"])

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Email, password, dan konfirmasi password harus diisi",
        }

    def test_malformed_json_is_a_server_error(self, client):
        response = client.post(
            "/api/register", content="[oops", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 500
        assert response.json()["message"] == "Terjadi kesalahan server"

    def test_get_returns_endpoint_info(self, client):
        body = client.get("/api/register").json()

        assert body["message"] == "Register API endpoint"
        assert body["method"] == "POST"


class TestFeedbackRoutes:
    """Test feedback, stats and dashboard routes on sample data."""

    def test_health(self, client):
        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["store_configured"] is False

    def test_list_feedbacks_with_filters(self, client):
        response = client.get("/api/feedbacks", params={"sentiment": "Negative", "date_from": "2025-03-10"})

        assert response.status_code == 200
        body = response.json()
        assert body["is_using_fallback"] is True
        assert body["error"] == "Database is not configured. Using sample data."
        assert body["data"]
        assert all(item["sentiment"] == "Negative" for item in body["data"])

    def test_get_feedback(self, client):
        response = client.get("/api/feedbacks/40")

        assert response.status_code == 200
        assert response.json()["product"] == "Galaxy Z Flip"

    def test_get_feedback_not_found(self, client):
        response = client.get("/api/feedbacks/nope")

        assert response.status_code == 404
        assert response.json()["detail"] == "Feedback not found"

    def test_create_without_store(self, client):
        response = client.post("/api/feedbacks", json={"message": "Halo"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Database is not configured"

    def test_create_rejects_unknown_enum_values(self, client):
        response = client.post("/api/feedbacks", json={"message": "x", "sentiment": "Happy", "status": "Done"})

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Invalid sentiment value 'Happy'")

    def test_update_rejects_unknown_status(self, client):
        response = client.patch("/api/feedbacks/40", json={"status": "Done"})

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Invalid status value 'Done'")

    def test_other_routes_keep_default_validation_errors(self, client):
        response = client.post(
            "/api/feedbacks", content="{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 422
        assert "detail" in response.json()

    def test_stats(self, client):
        body = client.get("/api/stats").json()

        assert body["is_using_fallback"] is True
        assert body["data"]["total"] == 12

    def test_dashboard(self, client):
        response = client.get("/api/dashboard", params={"category": "Im"})

        assert response.status_code == 200
        body = response.json()
        assert body["is_using_fallback"] is True
        assert body["total_feedbacks"] == 6
        assert 0.0 <= body["overall_sentiment_score"] <= 10.0
        assert body["crisis_risk_level"] in ("LOW", "MEDIUM", "HIGH")

    def test_topics_without_store(self, client):
        assert client.get("/api/topics").status_code == 503


class TestTopicRoutes:
    """Test /api/topics with a topic client."""

    def test_topics_with_stats(self, mock_config, auth_client):
        topic_client = Mock(spec=TopicClient)
        topic_client.get_topics_with_stats.return_value = [
            TopicWithStats(id="t1", name="Battery", feedback_count=4, positive_percentage=25.0)
        ]
        app = create_app(mock_config, auth_client=auth_client,
                         repository=FeedbackRepository(mock_config), topic_client=topic_client)

        body = TestClient(app).get("/api/topics").json()

        assert body[0]["name"] == "Battery"
        assert body[0]["feedback_count"] == 4

    def test_topics_store_error(self, mock_config, auth_client):
        topic_client = Mock(spec=TopicClient)
        topic_client.get_topics_with_stats.side_effect = StoreError("relation does not exist")
        app = create_app(mock_config, auth_client=auth_client,
                         repository=FeedbackRepository(mock_config), topic_client=topic_client)

        response = TestClient(app).get("/api/topics")

        assert response.status_code == 500
