"""Sprint listing endpoint."""

from flask import Blueprint, current_app, g, jsonify, request

from pi_services.jira_client import JiraClient
from pi_services.sprint_aggregator import SprintAggregator

bp = Blueprint("sprints", __name__, url_prefix="/api/sprints")


def get_jira_client():
    if "jira_client" not in g:
        g.jira_client = JiraClient.from_config(current_app.config)
    return g.jira_client


@bp.route("", methods=["GET"])
def list_sprints():
    """List every sprint of a project, active first.

    Query params:
        - projectKeyOrId: Jira project key or numeric id (required)
    """
    project_key_or_id = request.args.get("projectKeyOrId", "").strip()

    if not project_key_or_id:
        return jsonify({"error": "Missing projectKeyOrId"}), 400

    aggregator = SprintAggregator(
        get_jira_client(),
        sprint_field=current_app.config.get("JIRA_SPRINT_FIELD", "customfield_10020")
    )
    sprints = aggregator.list_sprints(project_key_or_id)

    return jsonify({"sprints": [s.to_dict() for s in sprints]})
