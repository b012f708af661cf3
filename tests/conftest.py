import pytest
import json
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock


@pytest.fixture
def base_time():
    return datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_status_sources(base_time):
    """Raw _source documents as stored in the status index"""
    return [
        {
            "container_id": "container1",
            "status": "ON",
            "uptime": 3600,
            "last_updated": (base_time - timedelta(minutes=30)).isoformat(),
            "counter": 1
        },
        {
            "container_id": "container1",
            "status": "OFF",
            "uptime": 0,
            "last_updated": (base_time - timedelta(minutes=10)).isoformat(),
            "counter": 2
        }
    ]


@pytest.fixture
def mock_registry_payload():
    return json.dumps([
        {"container_id": "container1", "status": "ON"},
        {"container_id": "container2", "status": "OFF"}
    ])


@pytest.fixture
def mock_redis_client(mock_registry_payload):
    client = AsyncMock()
    client.get.return_value = mock_registry_payload.encode()
    return client


@pytest.fixture
def mock_env_vars(monkeypatch):
    monkeypatch.setenv("ELASTICSEARCH_URL", "http://es.test:9200")
    monkeypatch.setenv("REDIS_HOST", "redis.test")
    monkeypatch.setenv("REDIS_PORT", "6380")
    monkeypatch.setenv("MAIL_USERNAME", "reports@example.com")
    monkeypatch.setenv("REPORT_RECIPIENT", "ops@example.com")
    monkeypatch.setenv("REPORT_INTERVAL", "PT1H")
    monkeypatch.setenv("REPORT_SINKS", '["email", "database"]')
    monkeypatch.setenv("DB_HOST", "localhost")
    monkeypatch.setenv("DB_NAME", "test_db")
    monkeypatch.setenv("DB_USER", "test_user")
    monkeypatch.setenv("DB_PASSWORD", "test_password")
