"""Per-sprint notes and blocker flags kept in a local JSON file.

The whole file is one JSON object keyed by ``<projectKey>|||<sprintName>``.
Each write loads the file, changes one bucket and rewrites the whole file.
Writers are not locked against each other: two concurrent writes are
last-writer-wins on the file, which is acceptable for a single-user
dashboard.
"""

import json
import logging
import os
from dataclasses import dataclass, field

from pi_services.errors import StorageError

logger = logging.getLogger(__name__)

KEY_SEPARATOR = "|||"


def bucket_key(project_key: str, sprint_name: str) -> str:
    """Composite key of the bucket for a (project, sprint) pair."""
    return f"{project_key}{KEY_SEPARATOR}{sprint_name}"


@dataclass
class AnnotationBucket:
    """Notes and blocker flags for one (project, sprint) pair."""

    notes: dict = field(default_factory=dict)
    blockers: dict = field(default_factory=dict)

    @classmethod
    def from_stored(cls, raw) -> "AnnotationBucket":
        """Resolve a stored bucket into the current shape.

        Current buckets look like ``{"notes": {...}, "blockers": {...}}``;
        either side may be missing. Older files stored a flat
        ``{issueKey: text}`` map, which becomes the notes of a bucket with
        no blockers.
        """
        if not isinstance(raw, dict):
            return cls()

        notes = raw.get("notes")
        blockers = raw.get("blockers")
        if isinstance(notes, dict) or isinstance(blockers, dict):
            return cls(
                notes=dict(notes) if isinstance(notes, dict) else {},
                blockers=dict(blockers) if isinstance(blockers, dict) else {}
            )

        return cls(notes=dict(raw), blockers={})

    def set_note(self, issue_key: str, text) -> None:
        if text is not None and str(text).strip():
            self.notes[issue_key] = text
        else:
            self.notes.pop(issue_key, None)

    def set_blocker(self, issue_key: str, blocked) -> None:
        if blocked:
            self.blockers[issue_key] = True
        else:
            self.blockers.pop(issue_key, None)

    def to_dict(self) -> dict:
        return {"notes": dict(self.notes), "blockers": dict(self.blockers)}


class AnnotationStore:
    """Read and write annotation buckets in a JSON file."""

    def __init__(self, path: str):
        self.path = path

    def ensure_file(self) -> None:
        """Create the notes file holding an empty object if it is missing."""
        if os.path.exists(self.path):
            return
        try:
            self._write_root({})
            logger.info(f"Created notes file at {self.path}")
        except StorageError as e:
            logger.error(f"Failed to create notes file: {e}")

    def get_bucket(self, project_key: str, sprint_name: str) -> dict:
        """Return copies of the notes and blockers of one bucket.

        A missing bucket yields two empty maps. An unreadable file is logged
        and read as empty.
        """
        try:
            root = self._read_root()
        except StorageError as e:
            logger.error(f"Failed to parse notes file: {e}")
            root = {}

        bucket = AnnotationBucket.from_stored(root.get(bucket_key(project_key, sprint_name)))
        return bucket.to_dict()

    def set_note(self, project_key: str, sprint_name: str, issue_key: str, text) -> dict:
        """Store a note, or delete it when the text is blank."""
        return self._update(project_key, sprint_name,
                            lambda bucket: bucket.set_note(issue_key, text))

    def set_blocker(self, project_key: str, sprint_name: str, issue_key: str, blocked) -> dict:
        """Flag an issue as blocked, or clear the flag."""
        return self._update(project_key, sprint_name,
                            lambda bucket: bucket.set_blocker(issue_key, blocked))

    def _update(self, project_key: str, sprint_name: str, change) -> dict:
        root = self._read_root()
        key = bucket_key(project_key, sprint_name)

        bucket = AnnotationBucket.from_stored(root.get(key))
        change(bucket)
        root[key] = bucket.to_dict()

        self._write_root(root)
        return {"ok": True}

    def _read_root(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = f.read()
        except OSError as e:
            raise StorageError(f"Failed to read notes file: {e}") from e

        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Notes file is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise StorageError("Notes file does not hold a JSON object")
        return data

    def _write_root(self, root: dict) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = f"{self.path}.tmp"
        try:
            os.makedirs(directory, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(root, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageError(f"Failed to save notes file: {e}") from e
