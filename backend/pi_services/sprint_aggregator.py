"""Sprint discovery for a project across all of its Scrum boards.

Jira has no "sprints for project" endpoint, so sprints are gathered board by
board. Projects without Scrum sprints fall back to the sprint names found on
the project's issues.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional, Union

from pi_services.errors import NetworkError, UpstreamError
from pi_services.jira_client import JiraClient, ResultField

logger = logging.getLogger(__name__)

DEFAULT_SPRINT_FIELD = "customfield_10020"
DERIVED_BOARD_NAME = "derived-from-issues"
DERIVED_ID_PREFIX = "derived:"

STATE_ORDER = {"active": 0, "future": 1, "closed": 2, "unknown": 3}
UNRANKED_STATE = 9

UNSUPPORTED_BOARD_PATTERN = re.compile(r"doesn'?t support sprints", re.IGNORECASE)
LEGACY_SPRINT_NAME_PATTERN = re.compile(r"name=([^,]+)")


@dataclass(frozen=True)
class UpstreamSprintId:
    """Id of a sprint Jira returned for a board."""

    value: Union[int, str]

    def to_wire(self):
        return self.value


@dataclass(frozen=True)
class DerivedSprintId:
    """Id of a sprint reconstructed from issue data."""

    name: str

    def to_wire(self):
        return f"{DERIVED_ID_PREFIX}{self.name}"


SprintId = Union[UpstreamSprintId, DerivedSprintId]


@dataclass
class Sprint:
    id: SprintId
    name: str
    state: str
    board_id: Optional[Union[int, str]] = None
    board_name: Optional[str] = None

    @classmethod
    def derived(cls, name: str) -> "Sprint":
        return cls(
            id=DerivedSprintId(name),
            name=name,
            state="unknown",
            board_id=None,
            board_name=DERIVED_BOARD_NAME
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id.to_wire(),
            "name": self.name,
            "state": self.state,
            "boardId": self.board_id,
            "boardName": self.board_name
        }


def sort_key(sprint: Sprint):
    """Order by state (active, future, closed, unknown, other), then name ignoring case."""
    rank = STATE_ORDER.get((sprint.state or "").lower(), UNRANKED_STATE)
    name = sprint.name or ""
    return rank, name.casefold(), name


def parse_sprint_names(value) -> list:
    """Extract sprint names from an issue's sprint field value.

    The value is a single entry or a list of entries. Each entry is either an
    object with a ``name`` or a legacy string such as
    ``com.atlassian...Sprint@1a2b[id=7,state=CLOSED,name=Sprint 7,...]``.
    """
    if not value:
        return []

    entries = value if isinstance(value, list) else [value]
    names = []
    for entry in entries:
        if isinstance(entry, str):
            match = LEGACY_SPRINT_NAME_PATTERN.search(entry)
            if match and match.group(1):
                names.append(match.group(1))
        elif isinstance(entry, dict) and entry.get("name"):
            names.append(entry["name"])
    return names


class SprintAggregator:
    """Builds the ordered sprint list for a project."""

    def __init__(self, client: JiraClient, sprint_field: str = DEFAULT_SPRINT_FIELD):
        self.client = client
        self.sprint_field = sprint_field

    def list_sprints(self, project_key_or_id: str) -> list:
        """Return every sprint of a project, ordered by state then name.

        Board sprint failures only reduce coverage. Failures listing the
        boards or scanning issues propagate.
        """
        boards = self._get_scrum_boards(project_key_or_id)

        seen = {}
        for board in boards:
            for sprint in self._get_board_sprints(board):
                if sprint.id not in seen:
                    seen[sprint.id] = sprint

        sprints = list(seen.values())
        if not sprints:
            logger.info(f"No Scrum sprints found for {project_key_or_id}; scanning issues")
            sprints = self._derive_sprints_from_issues(project_key_or_id)

        sprints.sort(key=sort_key)
        return sprints

    def _get_scrum_boards(self, project_key_or_id: str) -> list:
        try:
            boards = self.client.paged(
                "/rest/agile/1.0/board",
                {"projectKeyOrId": project_key_or_id, "type": "scrum"},
                ResultField.VALUES
            )
        except (UpstreamError, NetworkError) as e:
            logger.warning(f"Filtered board listing failed for {project_key_or_id}, "
                           f"retrying without type filter: {e}")
            boards = self.client.paged(
                "/rest/agile/1.0/board",
                {"projectKeyOrId": project_key_or_id},
                ResultField.VALUES
            )

        return [b for b in boards if (b.get("type") or "").lower() == "scrum"]

    def _get_board_sprints(self, board: dict) -> list:
        board_id = board.get("id")
        board_name = board.get("name")

        try:
            values = self.client.paged(
                f"/rest/agile/1.0/board/{board_id}/sprint",
                {"state": "active,future,closed"},
                ResultField.VALUES
            )
        except UpstreamError as e:
            message = e.upstream_message
            if UNSUPPORTED_BOARD_PATTERN.search(message):
                logger.info(f"Board {board_id} ({board_name}) skipped: {message}")
            else:
                logger.warning(f"Failed to read sprints for board {board_id}: {message}")
            return []
        except NetworkError as e:
            logger.warning(f"Failed to read sprints for board {board_id}: {e}")
            return []

        return [
            Sprint(
                id=UpstreamSprintId(s.get("id")),
                name=s.get("name"),
                state=s.get("state"),
                board_id=board_id,
                board_name=board_name
            )
            for s in values
        ]

    def _derive_sprints_from_issues(self, project_key_or_id: str) -> list:
        issues = self.client.paged(
            "/rest/api/2/search",
            {"jql": f"project = {project_key_or_id}", "fields": [self.sprint_field]},
            ResultField.ISSUES,
            page_size=100,
            hard_limit=None,
            method="POST"
        )

        names = set()
        for issue in issues:
            value = (issue.get("fields") or {}).get(self.sprint_field)
            names.update(parse_sprint_names(value))

        return [Sprint.derived(name) for name in sorted(names)]
