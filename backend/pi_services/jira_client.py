"""Jira REST client authenticated with the server-side bearer token."""

import logging
from enum import Enum
from typing import Optional

import requests

from pi_services.errors import NetworkError, UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
DEFAULT_PAGE_SIZE = 50
DEFAULT_HARD_LIMIT = 5000


class ResultField(Enum):
    """Name of the array a paginated Jira endpoint returns its items under."""

    VALUES = "values"
    ISSUES = "issues"
    SPRINTS = "sprints"


class JiraClient:
    """Thin wrapper around the Jira REST API."""

    def __init__(self, base_url: str, token: str, timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        })

    @classmethod
    def from_config(cls, config) -> "JiraClient":
        """Build a client from a Flask config mapping."""
        return cls(
            config["JIRA_BASE_URL"],
            config["JIRA_TOKEN"],
            timeout=config.get("JIRA_TIMEOUT", DEFAULT_TIMEOUT),
        )

    def close(self) -> None:
        self.session.close()

    def get(self, path: str, params: Optional[dict] = None):
        """GET a Jira endpoint and return the decoded JSON."""
        return self._request("GET", path, params=params)

    def post(self, path: str, body: Optional[dict] = None):
        """POST a JSON body to a Jira endpoint and return the decoded JSON."""
        return self._request("POST", path, json=body)

    def _request(self, method: str, path: str, params: Optional[dict] = None,
                 json: Optional[dict] = None):
        try:
            response = self.session.request(
                method,
                f"{self.base_url}{path}",
                params=params,
                json=json,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise NetworkError(str(e)) from e

        if not response.ok:
            raise UpstreamError(response.status_code, _response_body(response))

        if not response.content:
            return None
        return response.json()

    def paged(self, path: str, params: Optional[dict], result_field: ResultField,
              page_size: int = DEFAULT_PAGE_SIZE,
              hard_limit: Optional[int] = DEFAULT_HARD_LIMIT,
              method: str = "GET") -> list:
        """Fetch every page of a paginated endpoint and concatenate the items.

        Stops on the first of: ``isLast`` set, the running count reaching the
        reported ``total``, an empty page, or ``hard_limit`` items collected.

        Args:
            path: Endpoint path relative to the base URL
            params: Base query params (GET) or body fields (POST)
            result_field: Which array of the response holds the items
            page_size: ``maxResults`` sent with each page request
            hard_limit: Safety cap on collected items, None for no cap
            method: "GET" sends paging as query params, "POST" in the body
        """
        start_at = 0
        items = []

        while True:
            page_params = dict(params or {}, startAt=start_at, maxResults=page_size)
            if method == "POST":
                data = self.post(path, page_params)
            else:
                data = self.get(path, page_params)
            data = data or {}

            page = data.get(result_field.value) or []
            items.extend(page)

            total = data.get("total")
            if data.get("isLast") or not page:
                break
            if total is not None and len(items) >= total:
                break
            if hard_limit is not None and len(items) >= hard_limit:
                logger.warning(f"Stopped paging {path} at safety cap of {hard_limit} items")
                break

            start_at += len(page)

        return items


def _response_body(response):
    """Decode an error response body, preferring JSON over text."""
    try:
        return response.json()
    except ValueError:
        return response.text
