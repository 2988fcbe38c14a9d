"""Unit tests for the cohort query endpoints."""

from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from cohortline.api.app import create_app
from cohortline.api.dependencies import get_components, reset_dependencies
from cohortline.bootstrap import Components, bootstrap
from cohortline.config.settings import Settings


@pytest.fixture
def components() -> Components:
    return bootstrap(Settings())


@pytest.fixture
def client(
    components: Components,
    test_config_dir: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[TestClient, None, None]:
    (test_config_dir / "default.toml").write_text("debug = false\n")
    monkeypatch.setenv("COHORTLINE_CONFIG_DIR", str(test_config_dir))
    reset_dependencies()

    app = create_app()
    app.dependency_overrides[get_components] = lambda: components
    yield TestClient(app)

    reset_dependencies()


def _seed(client: TestClient) -> None:
    for customer_id, spend in (("alice", 4000.0), ("bob", 6000.0)):
        client.post(
            "/api/cohorts/classify",
            json={"customerId": customer_id, "dailySpend": spend, "userType": "PAID"},
        )


class TestMembershipCheck:
    """Tests for GET /api/cohorts/check."""

    def test_member_and_non_member(self, client):
        _seed(client)

        member = client.get(
            "/api/cohorts/check", params={"customerId": "alice", "cohortType": "PREMIUM"}
        )
        non_member = client.get(
            "/api/cohorts/check", params={"customerId": "bob", "cohortType": "NORMAL"}
        )

        assert member.status_code == 200
        assert member.json() is True
        assert non_member.json() is False

    def test_blank_customer_id_is_rejected(self, client):
        response = client.get(
            "/api/cohorts/check", params={"customerId": "  ", "cohortType": "PREMIUM"}
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "INVALID_REQUEST"
        assert error["details"][0]["field"] == "customerId"

    def test_unknown_cohort_type_is_rejected(self, client):
        response = client.get(
            "/api/cohorts/check", params={"customerId": "alice", "cohortType": "GOLD"}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"


class TestListings:
    """Tests for the per-customer and per-cohort listings."""

    def test_customer_cohort_types(self, client):
        _seed(client)

        response = client.get("/api/cohorts/customer/alice")

        assert response.status_code == 200
        assert response.json() == ["NORMAL", "PREMIUM"]

    def test_unknown_customer_has_no_cohorts(self, client):
        response = client.get("/api/cohorts/customer/nobody")

        assert response.status_code == 200
        assert response.json() == []

    def test_cohort_members(self, client):
        _seed(client)

        response = client.get("/api/cohorts/type/PREMIUM/customers")

        assert response.json() == ["alice", "bob"]


class TestManualClassification:
    """Tests for POST /api/cohorts/classify."""

    def test_classifies_and_records_membership(self, client):
        response = client.post(
            "/api/cohorts/classify",
            json={"customerId": "carol", "dailySpend": 4000.0, "userType": "PAID"},
        )

        assert response.status_code == 200
        assert response.json() == {"customerId": "carol", "cohortTypes": ["NORMAL", "PREMIUM"]}
        check = client.get(
            "/api/cohorts/check", params={"customerId": "carol", "cohortType": "PREMIUM"}
        )
        assert check.json() is True

    def test_malformed_payload_is_rejected(self, client):
        response = client.post(
            "/api/cohorts/classify",
            json={"customerId": "carol", "dailySpend": "lots", "userType": "PAID"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"
