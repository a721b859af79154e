"""JQL search paged to completion."""

import logging
from typing import Optional

from pi_services.errors import ValidationError
from pi_services.jira_client import JiraClient, ResultField

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 100

DEFAULT_SEARCH_FIELDS = [
    "summary", "issuetype", "status", "assignee", "reporter", "priority",
    "created", "updated", "duedate", "parent",
    "components",
    "customfield_10020",  # Sprint
    "customfield_10014",  # Epic Link
    "customfield_10002",  # Story Points
    "customfield_10705",  # Parent Summary
    "customfield_16002",  # Parent Story Points
    "customfield_16000",  # Go Live Status
    "customfield_16001",  # Parent Go Live Status
    "timeoriginalestimate", "timeestimate", "timespent"
]


class SearchRelay:
    """Runs a JQL query and returns every matching issue."""

    def __init__(self, client: JiraClient):
        self.client = client

    def search(self, jql: str, fields: Optional[list] = None,
               max_results: Optional[int] = None) -> list:
        """Return all issues matching ``jql``, unchanged.

        Args:
            jql: Query in Jira Query Language (required, non-blank)
            fields: Fields to request (default: the dashboard fields)
            max_results: Page size (default 100)
        """
        if not isinstance(jql, str) or not jql.strip():
            raise ValidationError("Missing jql")

        if fields is None:
            fields = DEFAULT_SEARCH_FIELDS
        elif not isinstance(fields, list) or not all(isinstance(f, str) for f in fields):
            raise ValidationError("fields must be a list of field names")

        page_size = _parse_page_size(max_results)

        logger.info(f"JQL: {jql}")
        return self.client.paged(
            "/rest/api/2/search",
            {"jql": jql, "fields": fields},
            ResultField.ISSUES,
            page_size=page_size,
            hard_limit=None,
            method="POST"
        )


def _parse_page_size(max_results) -> int:
    if max_results is None:
        return DEFAULT_MAX_RESULTS
    if isinstance(max_results, bool):
        raise ValidationError("maxResults must be a positive integer")
    try:
        page_size = int(max_results)
    except (TypeError, ValueError):
        raise ValidationError("maxResults must be a positive integer")
    if page_size <= 0:
        raise ValidationError("maxResults must be a positive integer")
    return page_size
