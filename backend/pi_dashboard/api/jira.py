"""Pass-through Jira endpoints: current user, fields and projects."""

from flask import Blueprint, current_app, g, jsonify

from pi_services.jira_client import JiraClient

bp = Blueprint("jira", __name__, url_prefix="/api")


def get_jira_client():
    """Jira client for this request, closed when the app context ends."""
    if "jira_client" not in g:
        g.jira_client = JiraClient.from_config(current_app.config)
    return g.jira_client


@bp.route("/me", methods=["GET"])
def get_me():
    """Return the user the server-side token belongs to."""
    data = get_jira_client().get("/rest/api/2/myself") or {}

    return jsonify({
        "ok": True,
        "displayName": data.get("displayName"),
        "name": data.get("name") or data.get("accountId")
    })


@bp.route("/fields", methods=["GET"])
def list_fields():
    """List field metadata so the frontend can resolve custom field ids."""
    fields = get_jira_client().get("/rest/api/2/field") or []

    return jsonify([
        {"id": f.get("id"), "name": f.get("name"), "schema": f.get("schema")}
        for f in fields
    ])


@bp.route("/projects", methods=["GET"])
def list_projects():
    """List visible projects sorted by name."""
    data = get_jira_client().get("/rest/api/2/project")
    projects = [
        {"id": p.get("id"), "key": p.get("key"), "name": p.get("name")}
        for p in (data if isinstance(data, list) else [])
    ]
    projects.sort(key=lambda p: ((p["name"] or "").casefold(), p["name"] or ""))

    return jsonify({"projects": projects})
