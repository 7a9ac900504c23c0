"""Tests HTTP de punta a punta (TestClient + SQLite + FixedClock)."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from latency_api.queries import LatencyQueryEngine

UTC = timezone.utc
NOW = datetime(2026, 10, 19, 3, 0, 0, tzinfo=UTC)  # mismo instante que el FixedClock de conftest
NOW_EPOCH = float(int(NOW.timestamp()))


def _post(client, payload):
    return client.post("/api/latency", json=payload)


# =============================================================================
# ESCENARIOS DE PUNTA A PUNTA
# =============================================================================

class TestEndToEnd:

    def test_ingest_then_read_rolling_window(self, client):
        response = _post(client, {"broker": "IBKR", "latency_ms": 12.5})

        assert response.status_code == 201
        assert response.json() == {"message": "Data inserted successfully"}

        series = client.get("/api/latency/timeseries").json()
        assert series == [{"timestamp": NOW_EPOCH, "broker": "IBKR", "latency_ms": 12.5}]

    def test_empty_broker_rejected(self, client):
        response = _post(client, {"broker": "", "latency_ms": 5})

        assert response.status_code == 400
        assert response.json() == {"error": "broker must be a non-empty string with max 50 characters"}

    def test_negative_latency_rejected(self, client):
        response = _post(client, {"broker": "X", "latency_ms": -1})

        assert response.status_code == 400
        assert response.json() == {"error": "latency_ms must be a non-negative finite number"}

    def test_overnight_excludes_rows_outside_window(self, client):
        for ts in ("2026-10-19T02:00:00Z", "2026-10-19T07:00:00Z", "2026-10-18T02:00:00Z"):
            assert _post(client, {"broker": "IBKR", "latency_ms": 3, "timestamp": ts}).status_code == 201

        series = client.get("/api/latency").json()

        expected = datetime(2026, 10, 19, 2, 0, tzinfo=UTC).timestamp()
        assert [p["timestamp"] for p in series] == [expected]


# =============================================================================
# INGESTA
# =============================================================================

class TestIngest:

    def test_missing_fields_rejected_and_not_persisted(self, client):
        response = _post(client, {"broker": "IBKR"})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields: broker and latency_ms are required"}
        assert client.get("/api/latency/timeseries").json() == []

    def test_malformed_json_rejected(self, client):
        response = client.post(
            "/api/latency",
            content=b"{broker: IBKR",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Malformed JSON body"}

    def test_non_object_body_rejected(self, client):
        response = _post(client, [{"broker": "IBKR", "latency_ms": 1}])

        assert response.status_code == 400
        assert response.json() == {"error": "Request body must be a JSON object"}

    def test_unparseable_timestamp_rejected(self, client):
        response = _post(client, {"broker": "IBKR", "latency_ms": 1, "timestamp": "yesterday"})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid timestamp format"}

    def test_unrepresentable_timestamp_rejected(self, client):
        for value in ("0001-01-01T00:00:00+01:00", [], {}):
            response = _post(client, {"broker": "IBKR", "latency_ms": 1, "timestamp": value})

            assert response.status_code == 400
            assert response.json() == {"error": "Invalid timestamp format"}

        assert client.get("/api/latency/timeseries").json() == []

    def test_iso_timestamp_persisted_at_second_precision(self, client):
        _post(client, {"broker": "IBKR", "latency_ms": 1, "timestamp": "2026-10-19T02:30:15.900Z"})

        [point] = client.get("/api/latency").json()

        assert point["timestamp"] == datetime(2026, 10, 19, 2, 30, 15, tzinfo=UTC).timestamp()

    def test_all_optional_fields_accepted(self, client):
        response = _post(
            client,
            {"broker": "IBKR", "latency_ms": 4.2, "symbol": "AAPL", "side": "S", "price": 10.5, "volume": 300},
        )

        assert response.status_code == 201
        assert client.get("/api/latency/timeseries").json() == [
            {"timestamp": NOW_EPOCH, "broker": "IBKR", "latency_ms": 4.2}
        ]


# =============================================================================
# LECTURAS
# =============================================================================

class TestReads:

    def test_rolling_alias_matches_timeseries(self, client):
        _post(client, {"broker": "IBKR", "latency_ms": 1})
        _post(client, {"broker": "SAXO", "latency_ms": 2})

        assert client.get("/api/latency/rolling").json() == client.get("/api/latency/timeseries").json()

    def test_overnight_is_idempotent(self, client):
        for minute in range(5):
            _post(client, {"broker": "IBKR", "latency_ms": minute, "timestamp": f"2026-10-19T01:0{minute}:00Z"})

        first = client.get("/api/latency").json()
        second = client.get("/api/latency").json()

        assert first == second
        assert len(first) == 5

    def test_store_failure_is_opaque_500(self, client, fixed_clock):
        broken = MagicMock()
        broken.connect.side_effect = OperationalError("SELECT", {}, Exception("password authentication failed"))
        broken.begin.side_effect = broken.connect.side_effect
        client.app.state.query_engine = LatencyQueryEngine(broken, fixed_clock)

        for response in (
            client.get("/api/latency"),
            client.get("/api/latency/timeseries"),
            _post(client, {"broker": "IBKR", "latency_ms": 1}),
        ):
            assert response.status_code == 500
            assert response.json() == {"error": "Database error"}

    def test_driver_value_error_is_opaque_500(self, client, fixed_clock):
        broken = MagicMock()
        broken.begin.side_effect = ValueError("A string literal cannot contain NUL (0x00) characters.")
        client.app.state.query_engine = LatencyQueryEngine(broken, fixed_clock)

        response = _post(client, {"broker": "a\u0000b", "latency_ms": 1})

        assert response.status_code == 500
        assert response.json() == {"error": "Database error"}

    def test_validation_happens_before_store(self, client, fixed_clock):
        broken = MagicMock()
        client.app.state.query_engine = LatencyQueryEngine(broken, fixed_clock)

        response = _post(client, {"broker": "X", "latency_ms": -1})

        assert response.status_code == 400
        broken.begin.assert_not_called()
        broken.connect.assert_not_called()


# =============================================================================
# PLUMBING
# =============================================================================

class TestPlumbing:

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_ready(self, client):
        response = client.get("/ready")
        assert response.status_code == 200
        assert response.json() == {"status": "ready"}

    def test_metrics_exposed(self, client):
        _post(client, {"broker": "IBKR", "latency_ms": 1})

        body = client.get("/metrics").text

        assert "latency_ingest_requests_total" in body
        assert "latency_store_operation_seconds" in body

    def test_index_page(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert "Latency Dashboard" in response.text

    def test_static_pages(self, client):
        for path in ("/latency-heatmap", "/latency"):
            response = client.get(path)
            assert response.status_code == 200
            assert response.headers["content-type"].startswith("text/html")

    def test_cors_headers(self, client):
        response = client.get("/health", headers={"Origin": "http://dashboard.local"})
        assert response.headers["access-control-allow-origin"] == "*"
