"""Issue search endpoint."""

from flask import Blueprint, current_app, g, jsonify, request

from pi_services.jira_client import JiraClient
from pi_services.search_relay import SearchRelay

bp = Blueprint("search", __name__, url_prefix="/api/search")


def get_jira_client():
    if "jira_client" not in g:
        g.jira_client = JiraClient.from_config(current_app.config)
    return g.jira_client


@bp.route("", methods=["POST"])
def search_issues():
    """Run a JQL search and return every matching issue.

    Expects JSON body with:
        - jql: JQL query (required)
        - fields: Optional list of fields to return
        - maxResults: Optional page size (default 100)
    """
    data = request.get_json(silent=True) or {}

    if not isinstance(data, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400

    relay = SearchRelay(get_jira_client())
    issues = relay.search(data.get("jql"), data.get("fields"), data.get("maxResults"))

    return jsonify({"issues": issues})
