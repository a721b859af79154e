"""Shared fixtures for PI Dashboard API tests."""

import json
import os
import sys
from unittest.mock import Mock

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))


@pytest.fixture
def jira_config(tmp_path):
    """Config mapping used instead of the environment."""
    return {
        "JIRA_BASE_URL": "https://jira.example.com",
        "JIRA_TOKEN": "test-token-123",
        "JIRA_TIMEOUT": 30,
        "JIRA_SPRINT_FIELD": "customfield_10020",
        "NOTES_FILE": str(tmp_path / "notes.json"),
        "CORS_ORIGINS": ["*"],
        "PORT": 3001,
        "LOG_LEVEL": "INFO",
    }


@pytest.fixture
def notes_file(jira_config):
    """Path of the notes file the test app uses."""
    return jira_config["NOTES_FILE"]


@pytest.fixture
def app(jira_config):
    """Create Flask test app."""
    from pi_dashboard import create_app
    app = create_app(jira_config)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    """Create Flask test client."""
    return app.test_client()


@pytest.fixture
def make_response():
    """Build a fake ``requests.Response``."""
    def _make(status_code=200, payload=None, text=None):
        response = Mock(status_code=status_code, ok=200 <= status_code < 300)
        if payload is not None:
            response.content = json.dumps(payload).encode()
            response.json = Mock(return_value=payload)
        else:
            response.text = text or ""
            response.content = response.text.encode()
            response.json = Mock(side_effect=ValueError("No JSON object could be decoded"))
        return response
    return _make


@pytest.fixture
def sample_boards():
    """Boards of one project, one of them Kanban."""
    return [
        {"id": 1, "name": "Team Alpha", "type": "scrum"},
        {"id": 2, "name": "Team Beta", "type": "Scrum"},
        {"id": 3, "name": "Ops Flow", "type": "kanban"},
    ]


@pytest.fixture
def sample_sprints():
    """Sprints per board id; sprint 101 is shared by boards 1 and 2."""
    return {
        1: [
            {"id": 100, "name": "Sprint 1", "state": "closed"},
            {"id": 101, "name": "Sprint 2", "state": "active"},
        ],
        2: [
            {"id": 101, "name": "Sprint 2", "state": "active"},
            {"id": 102, "name": "Sprint 3", "state": "future"},
        ],
        3: [
            {"id": 900, "name": "Kanban Iteration", "state": "active"},
        ],
    }


@pytest.fixture
def legacy_sprint_value():
    """Sprint field value in the pre-REST-v3 string encoding."""
    return (
        "com.atlassian.greenhopper.service.sprint.Sprint@1f2e3d"
        "[id=12,rapidViewId=4,state=CLOSED,name=Sprint 12,"
        "startDate=2024-01-01T00:00:00.000Z,endDate=2024-01-14T00:00:00.000Z]"
    )
