"""Upload session - the set of files that one aggregation pass will see."""

import logging
import uuid
from dataclasses import dataclass, field

from ..models.report import ClassifiedReport

logger = logging.getLogger(__name__)


@dataclass
class UploadSession:
    """Collects classified files until every expected file has arrived.

    A session is cancelled when the user starts a new upload; files that
    finish decoding afterwards are dropped instead of leaking into the new
    session's batch.
    """

    expected_files: int | None = None
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    cancelled: bool = False
    _reports: list[ClassifiedReport] = field(default_factory=list, repr=False)

    def add(self, report: ClassifiedReport) -> bool:
        """Attach a classified file. Returns False if the session is cancelled."""
        if self.cancelled:
            logger.warning(
                "Ignoring %s: upload session %s was cancelled",
                report.source_name,
                self.session_id,
            )
            return False
        self._reports.append(report)
        logger.debug(
            "Session %s received %s (%s, %d rows)",
            self.session_id,
            report.source_name,
            report.type.value,
            report.row_count,
        )
        return True

    def cancel(self) -> None:
        if not self.cancelled:
            logger.info("Cancelling upload session %s", self.session_id)
        self.cancelled = True

    @property
    def received(self) -> int:
        return len(self._reports)

    @property
    def is_complete(self) -> bool:
        """True once every expected file is in (always True when unbounded)."""
        if self.expected_files is None:
            return True
        return self.received >= self.expected_files

    @property
    def reports(self) -> tuple[ClassifiedReport, ...]:
        return tuple(self._reports)
