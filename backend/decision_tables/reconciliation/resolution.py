"""
Explicit, caller-driven resolution of a reviewed pull: take the pulled table
wholesale or keep the local one. There is no partial merge.
"""
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from ..errors import ValidationError
from ..table_model.table_schema import TableDocument
from .table_differ import TableDiff, diff_tables

logger = logging.getLogger(__name__)


class Resolution(str, Enum):
    ACCEPT_PULLED = 'accept'
    KEEP_LOCAL = 'keep'

    @classmethod
    def parse(cls, value: str) -> 'Resolution':
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValidationError(f"Resolution must be 'accept' or 'keep', got '{value}'")


@dataclass
class PendingPull:
    """A pulled table waiting for the caller's decision, with its diff against the local table."""
    pulled: TableDocument
    diff: TableDiff
    base_snapshot: Dict[str, Any]
    source: Dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict:
        return {'pullId': self.id, 'source': self.source, 'diff': self.diff.to_dict()}


def review_pull(current: TableDocument, pulled: TableDocument, source: Dict = None) -> PendingPull:
    """Diff ``pulled`` against ``current`` without touching either document."""
    diff = diff_tables(current, pulled)
    logger.info(f"Reviewed pull: {diff.summary}")
    return PendingPull(
        pulled=pulled,
        diff=diff,
        base_snapshot=current.to_dict(),
        source=dict(source or {}),
    )


def resolve_pull(current: TableDocument, pending: PendingPull, resolution: Resolution) -> TableDocument:
    """
    Return the document the caller should own after deciding.

    Raises ValidationError when the local document changed after the pull was
    reviewed, since the diff shown to the user no longer describes it.
    """
    if current.to_dict() != pending.base_snapshot:
        raise ValidationError("Local table changed since this pull was reviewed; pull again")

    if resolution == Resolution.ACCEPT_PULLED:
        logger.info(f"Accepted pulled table '{pending.pulled.rule_table.name}'")
        return pending.pulled
    logger.info("Kept local table, pulled version discarded")
    return current
