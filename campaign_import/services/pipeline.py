from __future__ import annotations

import logging
import time
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from ..db.writers import BulkWriter
from ..excel.reader import FileFormatError, open_upload, parse_upload
from ..models.column_mapping import ColumnMapping
from ..models.raw_row import RawRow
from ..models.submit_outcome import SubmitOutcome
from ..models.target_field import ImportKind, TargetField, default_table_for, fields_for
from ..models.uploaded_file import UploadedFile
from ..models.validation_error import ValidationError
from .mapper import auto_map
from .progress import SubmitProgress
from .submitter import ImportSubmitter, SubmissionError
from .validator import validate_rows

"""Upload session state machine.

    IDLE -> FILE_SELECTED -> PREVIEW_READY <-> REMAPPED -> VALIDATING
        -> (VALIDATION_FAILED -> PREVIEW_READY)
         | (VALIDATION_PASSED -> SUBMITTING
              -> (SUBMIT_SUCCEEDED -> IDLE) | (SUBMIT_FAILED -> PREVIEW_READY))

The UI (here: the CLI) is a thin adapter calling the transition methods.
User-facing problems (bad file, validation errors, backend failure) are reported
through the alert callback and never raised; calling a method from a state that
does not allow it raises PipelineStateError.
"""

logger = logging.getLogger(__name__)

AlertCallback = Callable[[str], None]


class PipelineState(Enum):
    IDLE = "idle"
    FILE_SELECTED = "file_selected"
    PREVIEW_READY = "preview_ready"
    REMAPPED = "remapped"
    VALIDATING = "validating"
    VALIDATION_FAILED = "validation_failed"
    VALIDATION_PASSED = "validation_passed"
    SUBMITTING = "submitting"
    SUBMIT_SUCCEEDED = "submit_succeeded"
    SUBMIT_FAILED = "submit_failed"


# states in which the parsed preview is on screen
_PREVIEW_STATES = (
    PipelineState.PREVIEW_READY,
    PipelineState.REMAPPED,
    PipelineState.VALIDATION_PASSED,
)


class PipelineStateError(Exception):
    """Raised when a transition is requested from a state that does not allow it."""


def _log_alert(message: str) -> None:
    logger.error(message)


class ImportPipeline:
    """Upload sessions for a single import kind.

    `history` and `alerts` cover the current (or last) session only; they are
    restarted by select_file.
    """

    def __init__(
        self,
        kind: ImportKind,
        writer: BulkWriter,
        table: str | None = None,
        *,
        on_alert: AlertCallback | None = None,
        reset_delay: float = 3.0,
        sleep: Callable[[float], None] = time.sleep,
        preview_limit: int = 10,
        max_file_bytes: int | None = None,
        keep_na_strings: list[str] | None = None,
        enforce_required_mapping: bool = True,
        progress_listener: Callable[[int], None] | None = None,
    ) -> None:
        self.kind = kind
        self.fields: tuple[TargetField, ...] = fields_for(kind)
        self.table = table or default_table_for(kind)
        self.submitter = ImportSubmitter(
            writer, kind, self.table, enforce_required_mapping=enforce_required_mapping
        )
        self.on_alert = on_alert or _log_alert
        self.reset_delay = reset_delay
        self.sleep = sleep
        self.preview_limit = preview_limit
        self.max_file_bytes = max_file_bytes
        self.keep_na_strings = keep_na_strings
        self.progress_listener = progress_listener

        self.state = PipelineState.IDLE
        self.history: list[PipelineState] = [PipelineState.IDLE]
        self.alerts: list[str] = []
        self.last_outcome: SubmitOutcome | None = None
        self._clear()

    # ------------------------------------------------------------------
    # internal helpers
    # ------------------------------------------------------------------
    def _clear(self) -> None:
        self.upload: UploadedFile | None = None
        self.headers: list[str] = []
        self.rows: list[RawRow] = []
        self.mapping: ColumnMapping | None = None
        self.errors: list[ValidationError] = []
        self.progress = 0

    def _transition(self, new_state: PipelineState) -> None:
        logger.debug(f"pipeline: {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)

    def _require(self, action: str, *allowed: PipelineState) -> None:
        if self.state not in allowed:
            raise PipelineStateError(f"cannot {action} in state {self.state.value}")

    def _alert(self, message: str) -> None:
        self.alerts.append(message)
        self.on_alert(message)

    def _on_progress(self, percent: int) -> None:
        self.progress = percent
        if self.progress_listener is not None:
            self.progress_listener(percent)

    def _warn_shared_sources(self) -> None:
        if self.mapping is None:
            return
        for header, keys in self.mapping.shared_sources().items():
            logger.warning(f"column {header!r} is mapped to several fields: {', '.join(keys)}")

    # ------------------------------------------------------------------
    # transitions
    # ------------------------------------------------------------------
    def select_file(self, path: Path) -> bool:
        """Parse a user-selected file and auto-map its columns.

        Returns True when the preview is ready; False when the file was rejected
        (an alert has been raised and the pipeline is back in IDLE).
        """
        self._require("select a file", PipelineState.IDLE)
        # history / alerts は 1 セッション分だけ保持する
        self.history = [PipelineState.IDLE]
        self.alerts = []
        try:
            upload = open_upload(Path(path), max_bytes=self.max_file_bytes)
        except FileFormatError as e:
            self._alert(str(e))
            return False

        self.upload = upload
        self._transition(PipelineState.FILE_SELECTED)
        try:
            sheet = parse_upload(upload, keep_na_strings=self.keep_na_strings)
        except FileFormatError as e:
            self._clear()
            self._transition(PipelineState.IDLE)
            self._alert(str(e))
            return False

        self.headers = sheet.headers
        self.rows = sheet.rows
        self.mapping = auto_map(sheet.headers, self.fields)
        self.errors = []
        logger.info(f"{upload.name}: {len(self.rows)} rows found")
        self._warn_shared_sources()
        self._transition(PipelineState.PREVIEW_READY)
        return True

    def remap(self, key: str, header: str | None) -> None:
        """Point a target field at another column (None clears the entry)."""
        self._require("remap", *_PREVIEW_STATES)
        self.current_mapping().remap(key, header)
        self._warn_shared_sources()
        self._transition(PipelineState.REMAPPED)

    def validate(self) -> list[ValidationError]:
        """Run the full validation again (never incremental)."""
        self._require("validate", *_PREVIEW_STATES)
        mapping = self.current_mapping()
        self._transition(PipelineState.VALIDATING)
        self.errors = validate_rows(self.rows, mapping, self.fields)
        if self.errors:
            self._transition(PipelineState.VALIDATION_FAILED)
            self._transition(PipelineState.PREVIEW_READY)
        else:
            self._transition(PipelineState.VALIDATION_PASSED)
        return self.errors

    def submit(self) -> SubmitOutcome | None:
        """Validate, then submit the whole batch once.

        Returns None when validation blocks the submit, otherwise the outcome.
        A submit cannot be aborted once started.
        """
        self._require("submit", *_PREVIEW_STATES)
        errors = self.validate()
        if errors:
            self._alert(f"Found {len(errors)} validation errors. Please fix them before uploading.")
            return None

        mapping = self.current_mapping()
        self._transition(PipelineState.SUBMITTING)
        progress = SubmitProgress(listener=self._on_progress)
        try:
            outcome = self.submitter.submit(self.rows, mapping, self.fields, progress=progress)
        except SubmissionError as e:
            outcome = SubmitOutcome(
                success=False, attempted_rows=len(self.rows), inserted_rows=0, message=str(e)
            )
        except Exception as e:
            # 想定外の例外でも SUBMITTING に留まらず再試行できる状態へ戻す
            logger.exception(f"unexpected error during submit: {e}")
            outcome = SubmitOutcome(
                success=False, attempted_rows=len(self.rows), inserted_rows=0, message=str(e)
            )
        self.last_outcome = outcome

        if not outcome.success:
            progress.reset()
            self._transition(PipelineState.SUBMIT_FAILED)
            self._transition(PipelineState.PREVIEW_READY)
            self._alert(f"Upload failed. Please try again. ({outcome.message})")
            return outcome

        self._transition(PipelineState.SUBMIT_SUCCEEDED)
        logger.info(outcome.message)
        # 確認表示のため一定時間待ってからリセット
        if self.reset_delay > 0:
            self.sleep(self.reset_delay)
        self._clear()
        self._transition(PipelineState.IDLE)
        return outcome

    def cancel(self) -> None:
        """Discard the preview and go back to IDLE."""
        self._require("cancel", *_PREVIEW_STATES)
        self._clear()
        self._transition(PipelineState.IDLE)

    def preview(self) -> list[RawRow]:
        return self.rows[: self.preview_limit]

    def current_mapping(self) -> ColumnMapping:
        """The active ColumnMapping; only exists while a preview is loaded."""
        if self.mapping is None:
            raise PipelineStateError(f"no column mapping in state {self.state.value}")
        return self.mapping
