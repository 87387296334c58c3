"""
Editing session: the single owner of one TableDocument while it is being edited.

A pull from the remote repository never merges into the owned document. It is
reviewed as a separate document and then explicitly accepted or discarded.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .errors import ValidationError
from .reconciliation import PendingPull, Resolution, TableDiff, diff_tables, resolve_pull, review_pull
from .table_model.table_editor import EDIT_OPERATIONS
from .table_model.table_schema import TableDocument

logger = logging.getLogger(__name__)


@dataclass
class RepoInfo:
    owner: str
    repo: str
    path: str
    branch: str = 'main'
    token: Optional[str] = None

    @property
    def has_token(self) -> bool:
        return bool(self.token)

    def to_dict(self) -> Dict:
        # the token itself is never echoed back
        return {
            'owner': self.owner,
            'name': self.repo,
            'filePath': self.path,
            'branch': self.branch,
            'hasToken': self.has_token,
        }


class EditingSession:
    def __init__(self, doc: TableDocument, repo_info: Optional[RepoInfo] = None,
                 remote_sha: Optional[str] = None):
        self.document: TableDocument = doc
        self.repo_info = repo_info
        self.remote_sha = remote_sha
        self._baseline = doc.clone()
        self.has_unsaved_changes = False

    def load(self, doc: TableDocument, repo_info: Optional[RepoInfo] = None,
             remote_sha: Optional[str] = None):
        """Replace the owned document, e.g. after a fresh upload or fetch."""
        self.document = doc
        if repo_info is not None:
            self.repo_info = repo_info
        self.remote_sha = remote_sha
        self._baseline = doc.clone()
        self.has_unsaved_changes = False

    def apply(self, operation: Callable, *args, **kwargs):
        """Run an edit operation against the owned document and mark the session dirty."""
        result = operation(self.document, *args, **kwargs)
        self.has_unsaved_changes = True
        return result

    def apply_named(self, op_name: str, args: Dict):
        operation = EDIT_OPERATIONS.get(op_name)
        if operation is None:
            raise ValidationError(f"Unknown edit operation '{op_name}'. Valid: {sorted(EDIT_OPERATIONS)}")
        try:
            return self.apply(operation, **(args or {}))
        except TypeError as e:
            raise ValidationError(f"Invalid arguments for '{op_name}': {e}")

    def mark_saved(self, remote_sha: Optional[str] = None):
        """Re-baseline after the document was written out or committed."""
        self._baseline = self.document.clone()
        self.has_unsaved_changes = False
        if remote_sha is not None:
            self.remote_sha = remote_sha

    def local_changes(self) -> TableDiff:
        """What the user changed since the last load/save (baseline vs current)."""
        return diff_tables(self._baseline, self.document)

    def review_pull(self, pulled: TableDocument, source: Optional[Dict] = None) -> PendingPull:
        return review_pull(self.document, pulled, source)

    def resolve(self, pending: PendingPull, resolution: Resolution) -> TableDocument:
        owned = resolve_pull(self.document, pending, resolution)
        if resolution == Resolution.ACCEPT_PULLED:
            # an uploaded file carries no sha; keep the one last seen on the remote
            self.load(owned, remote_sha=pending.source.get('sha', self.remote_sha))
        return self.document

    def to_dict(self) -> Dict:
        return {
            'data': self.document.to_dict(),
            'repoInfo': self.repo_info.to_dict() if self.repo_info else None,
            'hasUnsavedChanges': self.has_unsaved_changes,
            'remoteSha': self.remote_sha,
        }
