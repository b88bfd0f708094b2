"""
ScamShield - API Tests

Exercises the FastAPI routes through TestClient.
"""

import pytest
from fastapi.testclient import TestClient

from conftest import PHISHING_MESSAGE, SAFE_MESSAGE, fixed_clock


@pytest.fixture
def client():
    from scamshield.main import app
    from scamshield.services import ThreatScoringEngine

    with TestClient(app) as test_client:
        app.state.engine = ThreatScoringEngine(clock=fixed_clock)
        yield test_client


def submit_feedback(client, text, feedback_type="false_positive", confidence=0.9):
    assessment = client.post("/api/v1/analyze", json={"text": text}).json()
    return client.post("/api/v1/feedback", json={
        "message_id": assessment["message_id"],
        "original_message": text,
        "original_assessment": assessment,
        "feedback": {"feedback_type": feedback_type, "confidence": confidence},
        "user_id": "user-1",
    })


class TestRootEndpoints:
    """Tests for root-level endpoints."""

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["name"] == "ScamShield API"

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_readiness(self, client):
        response = client.get("/api/v1/health/ready")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["checks"]["external_judge"] == "unavailable"
        assert data["checks"]["ioc_count"] == 2


class TestAnalyzeRoutes:
    """Tests for /api/v1/analyze."""

    def test_safe_message(self, client):
        response = client.post("/api/v1/analyze", json={"text": SAFE_MESSAGE})
        assert response.status_code == 200
        data = response.json()
        assert data["risk_level"] == "SAFE"
        assert data["message_id"]
        assert data["allow_feedback"] is True

    def test_phishing_message(self, client):
        response = client.post("/api/v1/analyze", json={
            "text": PHISHING_MESSAGE,
            "message_id": "chat-1",
            "context": {"message_source": "sms"},
        })
        data = response.json()
        assert data["message_id"] == "chat-1"
        assert data["risk_level"] == "CRITICAL"
        assert data["threat_class"] == "phishing"
        assert data["category"]["key"] == "financial_fraud"

    def test_empty_text_rejected(self, client):
        assert client.post("/api/v1/analyze", json={"text": ""}).status_code == 422

    def test_classify(self, client):
        response = client.post("/api/v1/analyze/classify", json={"text": "โทร 0812345678"})
        assert response.status_code == 200
        assert response.json()["category"]["key"] == "romance_scam"


class TestFeedbackRoutes:
    """Tests for /api/v1/feedback."""

    def test_record_feedback(self, client):
        response = submit_feedback(client, PHISHING_MESSAGE)
        assert response.status_code == 200
        assert response.json()["feedback_id"]
        assert response.json()["status"] == "recorded"

        metrics = client.get("/api/v1/learning/metrics").json()
        assert metrics["total_feedback"] == 1
        assert metrics["false_positives"] == 1
        assert metrics["processed_feedback"] == 1

    def test_invalid_feedback(self, client):
        response = client.post("/api/v1/feedback", json={
            "message_id": "m-1",
            "original_message": PHISHING_MESSAGE,
            "original_assessment": {},
            "feedback": {"feedback_type": "false_positive"},
        })
        assert response.status_code == 422
        assert "Invalid feedback" in response.json()["detail"]["message"]
        assert client.get("/api/v1/learning/metrics").json()["total_feedback"] == 0


class TestLearningRoutes:
    """Tests for /api/v1/learning."""

    def test_process_pending(self, client):
        submit_feedback(client, PHISHING_MESSAGE, confidence=0.4)
        assert client.get("/api/v1/learning/metrics").json()["pending_feedback"] == 1

        summary = client.post("/api/v1/learning/process").json()
        assert summary["processed"] == 1
        assert client.get("/api/v1/learning/metrics").json()["pending_feedback"] == 0

    def test_recommendations(self, client):
        submit_feedback(client, PHISHING_MESSAGE)
        recs = client.get("/api/v1/learning/recommendations").json()["recommendations"]
        assert "More feedback is needed for reliable learning" in recs

    def test_pattern_views(self, client):
        submit_feedback(client, PHISHING_MESSAGE)

        review = client.get("/api/v1/learning/patterns/review").json()
        assert "ระงับบัญชี" in [p["pattern"] for p in review]

        learned = client.get("/api/v1/learning/patterns/learned", params={"limit": 2}).json()
        assert len(learned) <= 2
        assert all(p["accuracy"] > 0.7 for p in learned)

    def test_export_import(self, client):
        submit_feedback(client, PHISHING_MESSAGE)
        snapshot = client.get("/api/v1/learning/export").json()
        assert len(snapshot["feedback"]) == 1

        response = client.post("/api/v1/learning/import", json=snapshot)
        assert response.status_code == 200
        assert response.json()["imported"]["feedback"] == 0

    def test_import_malformed(self, client):
        response = client.post("/api/v1/learning/import", json={"feedback": [{"id": "x"}]})
        assert response.status_code == 400


class TestThreatIntelRoutes:
    """Tests for /api/v1/threat-intel."""

    def test_categories(self, client):
        categories = client.get("/api/v1/threat-intel/categories").json()
        assert len(categories) == 10
        assert categories[0]["key"] == "financial_fraud"

    def test_get_category(self, client):
        response = client.get("/api/v1/threat-intel/categories/fake_delivery")
        assert response.status_code == 200
        assert response.json()["key"] == "fake_delivery"

        assert client.get("/api/v1/threat-intel/categories/nope").status_code == 404

    def test_add_and_list_iocs(self, client):
        response = client.post("/api/v1/threat-intel/iocs", json={
            "type": "phone",
            "value": "089-999-9999",
            "category": "gambling",
            "severity": "HIGH",
        })
        assert response.status_code == 200
        assert response.json()["value"] == "0899999999"

        iocs = client.get("/api/v1/threat-intel/iocs").json()
        assert "0899999999" in [i["value"] for i in iocs]

    def test_invalid_ioc(self, client):
        response = client.post("/api/v1/threat-intel/iocs", json={
            "type": "phone",
            "value": "not a number",
            "category": "gambling",
        })
        assert response.status_code == 422

    def test_unknown_category_rejected(self, client):
        response = client.post("/api/v1/threat-intel/iocs", json={
            "type": "phone", "value": "0899999999", "category": "astrology",
        })
        assert response.status_code == 422
