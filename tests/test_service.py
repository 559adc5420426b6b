"""Tests for the cashreg Flask service."""

import io

import pytest
from flask.testing import FlaskClient

from cashreg.config import ConfigStore
from cashreg.domain.models import PolicyConfig
from cashreg.service import MAX_UPLOAD_BYTES, create_app


class ZeroRandom:
    """Random source that always draws zero, so randomized change is all pennies."""

    def randint(self, a: int, b: int) -> int:
        return a


@pytest.fixture
def store() -> ConfigStore:
    return ConfigStore(PolicyConfig(random_divisor=1000))


@pytest.fixture
def client(store: ConfigStore) -> FlaskClient:
    app = create_app(store=store, rng=ZeroRandom())
    return app.test_client()


def upload(client: FlaskClient, content: bytes, name: str = "change.csv"):
    return client.post(
        "/api/change/file",
        data={"file": (io.BytesIO(content), name)},
        content_type="multipart/form-data",
    )


class TestHealth:
    """Tests for the liveness endpoint."""

    def test_healthy(self, client: FlaskClient) -> None:
        """Should report a fixed healthy payload."""
        resp = client.get("/health")

        assert resp.status_code == 200
        assert resp.get_json() == {"status": "healthy"}

    def test_cors_headers(self, client: FlaskClient) -> None:
        """Should allow cross-origin callers."""
        resp = client.get("/health")

        assert resp.headers["Access-Control-Allow-Origin"] == "*"
        assert "POST" in resp.headers["Access-Control-Allow-Methods"]
        assert resp.headers["Access-Control-Allow-Headers"] == "Content-Type"

    def test_preflight(self, client: FlaskClient) -> None:
        """Should answer OPTIONS with CORS headers."""
        resp = client.options("/api/change")

        assert resp.status_code == 200
        assert resp.headers["Access-Control-Allow-Origin"] == "*"


class TestCalculateChange:
    """Tests for POST /api/change."""

    def test_minimum_change(self, client: FlaskClient) -> None:
        """Should return the full response shape."""
        resp = client.post("/api/change", json={"amountOwed": 1.00, "amountPaid": 1.99})

        assert resp.status_code == 200
        assert resp.get_json() == {
            "amountOwed": 1.0,
            "amountPaid": 1.99,
            "change": 0.99,
            "denominations": {"quarter": 3, "dime": 2, "penny": 4},
            "formattedChange": "3 quarters,2 dimes,4 pennies",
        }

    def test_exact_payment(self, client: FlaskClient) -> None:
        """Should return no denominations."""
        resp = client.post("/api/change", json={"amountOwed": 4.2, "amountPaid": 4.2})

        body = resp.get_json()
        assert body["change"] == 0
        assert body["denominations"] == {}
        assert body["formattedChange"] == ""

    def test_paid_less_than_owed(self, client: FlaskClient) -> None:
        """Should reject with 400 INVALID_AMOUNT."""
        resp = client.post("/api/change", json={"amountOwed": 5.00, "amountPaid": 3.00})

        assert resp.status_code == 400
        assert resp.get_json()["error"] == "INVALID_AMOUNT"

    def test_invalid_body(self, client: FlaskClient) -> None:
        """Should reject unparseable JSON."""
        resp = client.post("/api/change", data="{not json", content_type="application/json")

        assert resp.status_code == 400
        assert resp.get_json() == {"error": "MALFORMED_INPUT", "detail": "Invalid request body"}

    def test_non_numeric_amount(self, client: FlaskClient) -> None:
        """Should reject non-numeric amounts."""
        resp = client.post("/api/change", json={"amountOwed": "one", "amountPaid": 2})

        assert resp.status_code == 400
        assert "amountOwed" in resp.get_json()["detail"]

    def test_huge_amount(self, client: FlaskClient) -> None:
        """Should reject amounts too large for cents with a JSON 400."""
        resp = client.post("/api/change", json={"amountOwed": 0, "amountPaid": 1e30})

        assert resp.status_code == 400
        assert resp.get_json()["error"] == "MALFORMED_INPUT"

    def test_wrong_method(self, client: FlaskClient) -> None:
        """Should only accept POST."""
        assert client.get("/api/change").status_code == 405

    def test_uses_current_policy(self, client: FlaskClient, store: ConfigStore) -> None:
        """Should randomize when the configured divisor divides the change."""
        store.set(PolicyConfig(random_divisor=99))

        resp = client.post("/api/change", json={"amountOwed": 1.00, "amountPaid": 1.99})

        assert resp.get_json()["denominations"] == {"penny": 99}
        assert resp.get_json()["formattedChange"] == "99 pennies"


class TestBatch:
    """Tests for POST /api/change/batch."""

    def test_batch(self, client: FlaskClient) -> None:
        """Should return results in request order."""
        payload = [{"amountOwed": 1.00, "amountPaid": 1.99}, {"amountOwed": 0.50, "amountPaid": 1.00}]

        resp = client.post("/api/change/batch", json=payload)

        assert resp.status_code == 200
        assert [r["formattedChange"] for r in resp.get_json()] == ["3 quarters,2 dimes,4 pennies", "2 quarters"]

    def test_aborts_on_invalid_entry(self, client: FlaskClient) -> None:
        """Should fail the whole batch and name the bad entry."""
        payload = [{"amountOwed": 1.00, "amountPaid": 1.99}, {"amountOwed": 5.00, "amountPaid": 3.00}]

        resp = client.post("/api/change/batch", json=payload)

        assert resp.status_code == 400
        body = resp.get_json()
        assert body["error"] == "INVALID_AMOUNT"
        assert "entry 2" in body["detail"]

    def test_rejects_object(self, client: FlaskClient) -> None:
        """Should require a JSON array."""
        resp = client.post("/api/change/batch", json={"amountOwed": 1, "amountPaid": 2})

        assert resp.status_code == 400

    def test_empty_batch(self, client: FlaskClient) -> None:
        """Should return an empty list."""
        assert client.post("/api/change/batch", json=[]).get_json() == []


class TestFileUpload:
    """Tests for POST /api/change/file."""

    def test_processes_lines(self, client: FlaskClient) -> None:
        """Should skip blank lines and keep order."""
        resp = upload(client, b"1.00,1.99\n\n0.50,1.00\n")

        assert resp.status_code == 200
        body = resp.get_json()
        assert len(body) == 2
        assert body[0]["amountOwed"] == 1.0
        assert body[1]["formattedChange"] == "2 quarters"

    def test_bad_line(self, client: FlaskClient) -> None:
        """Should abort and name the malformed line."""
        resp = upload(client, b"1.00,1.99\n1.00\n")

        assert resp.status_code == 400
        assert resp.get_json()["detail"] == "Invalid line format: 1.00"

    def test_bad_amount(self, client: FlaskClient) -> None:
        """Should abort and name the unparseable value."""
        resp = upload(client, b"1.00,abc\n")

        assert resp.status_code == 400
        assert resp.get_json()["detail"] == "Invalid amount paid: abc"

    def test_huge_amount(self, client: FlaskClient) -> None:
        """Should reject an out-of-range line with a JSON 400."""
        resp = upload(client, b"0,1e30\n")

        assert resp.status_code == 400
        assert resp.get_json()["detail"] == "Invalid amount paid: 1e30"

    def test_missing_file(self, client: FlaskClient) -> None:
        """Should require the file field."""
        resp = client.post("/api/change/file", data={}, content_type="multipart/form-data")

        assert resp.status_code == 400

    def test_empty_file(self, client: FlaskClient) -> None:
        """Should reject an empty upload."""
        resp = upload(client, b"")

        assert resp.status_code == 400
        assert resp.get_json()["detail"] == "Failed to read file content"

    def test_too_large(self, client: FlaskClient) -> None:
        """Should refuse uploads over the size limit."""
        resp = upload(client, b"1.00,2.00\n" * (MAX_UPLOAD_BYTES // 10 + 1))

        assert resp.status_code == 413


class TestConfigEndpoints:
    """Tests for GET/POST /api/config."""

    def test_get(self, client: FlaskClient) -> None:
        """Should expose the policy verbatim."""
        resp = client.get("/api/config")

        assert resp.get_json() == {"randomDivisor": 1000, "country": "US", "specialCases": []}

    def test_set(self, client: FlaskClient, store: ConfigStore) -> None:
        """Should replace the policy wholesale."""
        resp = client.post("/api/config", json={"randomDivisor": 7, "specialCases": ["holiday"]})

        assert resp.status_code == 200
        assert resp.get_json() == {"randomDivisor": 7, "country": "US", "specialCases": ["holiday"]}
        assert store.get() == PolicyConfig(random_divisor=7, special_cases=("holiday",))
        assert client.get("/api/config").get_json()["randomDivisor"] == 7

    def test_set_invalid(self, client: FlaskClient, store: ConfigStore) -> None:
        """Should reject bad config and keep the old one."""
        resp = client.post("/api/config", json={"randomDivisor": "seven"})

        assert resp.status_code == 400
        assert store.get().random_divisor == 1000

    def test_seeds_store_from_config_file(self, tmp_path) -> None:
        """Should load the initial policy from the config file."""
        path = tmp_path / "config.toml"
        path.write_text("[policy]\nrandom_divisor = 13\n")

        app = create_app(config_path=path)

        assert app.test_client().get("/api/config").get_json()["randomDivisor"] == 13
