from observability import metrics


def test_record_request_counts(monkeypatch):
    monkeypatch.setenv("METRICS_ENABLED", "1")
    metrics.record_request("resources/list", True, 0.01)
    metrics.record_request("resources/list", False, 0.02)
    payload = metrics.metrics_payload_bytes().decode("utf-8")
    assert 'mcp_requests_total{method="resources/list",outcome="success"}' in payload
    assert 'mcp_requests_total{method="resources/list",outcome="failure"}' in payload


def test_project_gauge(monkeypatch):
    monkeypatch.setenv("METRICS_ENABLED", "1")
    metrics.set_project_count(7)
    assert "mcp_projects 7.0" in metrics.metrics_payload_bytes().decode("utf-8")


def test_disabled_is_noop(monkeypatch):
    monkeypatch.setenv("METRICS_ENABLED", "0")
    metrics.record_request("never_recorded", True, 0.0)
    assert "never_recorded" not in metrics.metrics_payload_bytes().decode("utf-8")
