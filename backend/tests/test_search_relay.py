"""Tests for SearchRelay."""

from unittest.mock import Mock, patch

import pytest

from pi_services.errors import UpstreamError, ValidationError
from pi_services.jira_client import JiraClient
from pi_services.search_relay import DEFAULT_SEARCH_FIELDS, SearchRelay


def issue_pages(total):
    """Fake search endpoint serving ``total`` issues."""
    issues = [{"key": f"ABC-{i}", "fields": {"summary": f"Issue {i}"}} for i in range(total)]

    def fake_post(path, body=None):
        start, size = body["startAt"], body["maxResults"]
        return {"startAt": start, "total": total, "issues": issues[start:start + size]}

    return fake_post


@pytest.fixture
def jira():
    return JiraClient("https://jira.example.com", "token")


class TestSearch:
    """Test JQL search pagination."""

    def test_pages_to_completion(self, jira):
        """maxResults=2 against 5 issues should take 3 calls at offsets 0, 2, 4."""
        with patch.object(jira, "post", side_effect=issue_pages(5)) as mock_post:
            issues = SearchRelay(jira).search("project = ABC", max_results=2)

        assert [i["key"] for i in issues] == ["ABC-0", "ABC-1", "ABC-2", "ABC-3", "ABC-4"]
        assert [c.args[1]["startAt"] for c in mock_post.call_args_list] == [0, 2, 4]
        assert all(c.args[0] == "/rest/api/2/search" for c in mock_post.call_args_list)

    def test_defaults(self, jira):
        """Should use the dashboard fields and pages of 100."""
        with patch.object(jira, "post", side_effect=issue_pages(1)) as mock_post:
            SearchRelay(jira).search("project = ABC")

        body = mock_post.call_args.args[1]
        assert body["fields"] == DEFAULT_SEARCH_FIELDS
        assert body["maxResults"] == 100
        assert body["jql"] == "project = ABC"
        assert len(DEFAULT_SEARCH_FIELDS) == 21

    def test_explicit_fields(self, jira):
        with patch.object(jira, "post", side_effect=issue_pages(1)) as mock_post:
            SearchRelay(jira).search("project = ABC", fields=["summary"], max_results="50")

        body = mock_post.call_args.args[1]
        assert body["fields"] == ["summary"]
        assert body["maxResults"] == 50

    def test_returns_issues_verbatim(self, jira):
        """Issue payloads should not be reshaped."""
        issue = {"key": "ABC-1", "expand": "x", "fields": {"customfield_10020": [{"name": "S1"}]}}
        with patch.object(jira, "post", return_value={"issues": [issue], "total": 1}):
            assert SearchRelay(jira).search("key = ABC-1") == [issue]

    def test_stops_on_empty_page(self, jira):
        """An upstream that overstates total should not loop forever."""
        pages = [{"issues": [{"key": "ABC-1"}], "total": 10}, {"issues": [], "total": 10}]
        with patch.object(jira, "post", side_effect=pages) as mock_post:
            assert len(SearchRelay(jira).search("project = ABC")) == 1
        assert mock_post.call_count == 2

    def test_upstream_error_propagates(self, jira):
        with patch.object(jira, "post", side_effect=UpstreamError(400, {"errorMessages": ["Bad JQL"]})):
            with pytest.raises(UpstreamError):
                SearchRelay(jira).search("project = = ABC")


class TestValidation:
    """Test input validation happens before any upstream call."""

    @pytest.mark.parametrize("jql", [None, "", "   ", 42])
    def test_rejects_missing_jql(self, jql):
        jira = Mock()
        with pytest.raises(ValidationError) as exc_info:
            SearchRelay(jira).search(jql)

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Missing jql"
        jira.paged.assert_not_called()

    @pytest.mark.parametrize("max_results", [0, -1, "lots", True])
    def test_rejects_bad_page_size(self, max_results):
        jira = Mock()
        with pytest.raises(ValidationError):
            SearchRelay(jira).search("project = ABC", max_results=max_results)
        jira.paged.assert_not_called()

    def test_rejects_bad_fields(self):
        jira = Mock()
        with pytest.raises(ValidationError):
            SearchRelay(jira).search("project = ABC", fields="summary,status")
        jira.paged.assert_not_called()
