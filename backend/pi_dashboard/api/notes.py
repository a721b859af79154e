"""Notes and blocker flags stored locally per sprint.

Jira has no place for these, so they live in the server's notes file.
"""

from flask import Blueprint, current_app, jsonify, request

from pi_services.annotation_store import AnnotationStore

bp = Blueprint("notes", __name__, url_prefix="/api")


def get_store():
    return AnnotationStore(current_app.config["NOTES_FILE"])


def get_issue_target(data):
    """Extract (projectKey, sprintName, issueKey) from a request body."""
    project_key = data.get("projectKey")
    sprint_name = data.get("sprintName")
    issue_key = data.get("issueKey")

    if not all([project_key, sprint_name, issue_key]):
        return None

    return project_key, sprint_name, issue_key


@bp.route("/notes", methods=["GET"])
def get_notes():
    """Get notes and blockers for one sprint.

    Query params:
        - project: Jira project key
        - sprint: Sprint name
    """
    project = request.args.get("project")
    sprint = request.args.get("sprint")

    if not project or not sprint:
        return jsonify({"error": "Missing project or sprint"}), 400

    return jsonify(get_store().get_bucket(project, sprint))


@bp.route("/notes", methods=["PUT"])
def put_note():
    """Set the note for one issue. Blank text removes the note.

    Expects JSON body with:
        - projectKey, sprintName, issueKey (required)
        - text
    """
    data = request.get_json(silent=True) or {}

    if not isinstance(data, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400

    target = get_issue_target(data)

    if not target:
        return jsonify({"error": "Missing projectKey, sprintName, or issueKey"}), 400

    return jsonify(get_store().set_note(*target, data.get("text")))


@bp.route("/blocker", methods=["PUT"])
def put_blocker():
    """Flag or unflag one issue as blocked.

    Expects JSON body with:
        - projectKey, sprintName, issueKey (required)
        - blocked
    """
    data = request.get_json(silent=True) or {}

    if not isinstance(data, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400

    target = get_issue_target(data)

    if not target:
        return jsonify({"error": "Missing projectKey, sprintName, or issueKey"}), 400

    return jsonify(get_store().set_blocker(*target, data.get("blocked")))
