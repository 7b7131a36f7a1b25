"""
Editable image with a replayable operation history.

Implements the non-destructive editing model: the loaded pixels are kept
as ``original`` and never modified, every edit is appended to an operation
log, and ``current`` is always the result of replaying that log against
``original``. Undo moves the newest operation onto the redo log and
replays; redo commits it again.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from .buffer import buffer_size, copy_buffer, validate_buffer
from .oplog import read_operations, write_operations
from .operations import ImageOperation, Resize
from ..config import get_config_value, get_default_config
from ..exceptions import (
    EmptyRedoStackError,
    EmptyUndoStackError,
    InvalidArgumentError,
    InvalidOperationsFileError,
    MissingFileError,
    NullFileError,
    PixelSightError,
)
from ..io import codec

logger = logging.getLogger(__name__)


@dataclass
class RecordingSession:
    """Operations captured while macro recording is on."""
    operations: List[ImageOperation] = field(default_factory=list)
    started_at: str = field(default_factory=lambda: datetime.now().isoformat())


def replay(original: np.ndarray, operations: Sequence[ImageOperation]) -> np.ndarray:
    """
    Apply operations in order to a copy of ``original``.

    Args:
        original: Baseline buffer, left untouched
        operations: Operations, oldest first

    Returns:
        The resulting buffer
    """
    result = copy_buffer(original)
    for op in operations:
        result = op.apply(result)
    return result


class EditableImage:
    """
    An image plus the operations applied to it.

    Lifecycle: created empty, populated by ``open``/``open_buffer``, then
    edited with ``apply``/``undo``/``redo``. A failing call raises a
    :class:`~pixelsight.exceptions.PixelSightError` and leaves the buffers
    and logs as they were.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize an empty editable image.

        Args:
            config: Configuration dictionary (defaults to get_default_config())
        """
        self.config = config or get_default_config()
        self.ops_extension: str = get_config_value(self.config, 'editor.ops_extension', 'ops')
        self.allowed_extensions: List[str] = [
            ext.lower() for ext in get_config_value(self.config, 'editor.allowed_extensions', [])
        ]
        self.default_extension: str = get_config_value(self.config, 'editor.default_extension', 'png')
        self.export_background = tuple(
            get_config_value(self.config, 'editor.export_background', (255, 255, 255))
        )

        self.original: Optional[np.ndarray] = None
        self.current: Optional[np.ndarray] = None
        self.preview: Optional[np.ndarray] = None

        self.log: List[ImageOperation] = []
        self.redo_log: List[ImageOperation] = []
        self.recording: Optional[RecordingSession] = None

        self.image_path: Optional[Path] = None
        self.extension: Optional[str] = None
        self._saved_log: List[ImageOperation] = []

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------

    def has_image(self) -> bool:
        return self.current is not None

    def has_local_image(self) -> bool:
        """True for an image that only exists in memory (no file identity)."""
        return self.image_path is None and self.current is not None

    def has_unsaved_changes(self) -> bool:
        """True when the log differs from the one last opened or saved."""
        if not self.has_image():
            return False
        return self.log != self._saved_log

    def can_undo(self) -> bool:
        return bool(self.log)

    def can_redo(self) -> bool:
        return bool(self.redo_log)

    @property
    def ops_path(self) -> Optional[Path]:
        """Sidecar path of the operation log, ``<image path>.<ops extension>``."""
        if self.image_path is None:
            return None
        return sidecar_path(self.image_path, self.ops_extension)

    @property
    def dimensions(self) -> Tuple[int, int]:
        self._require_image()
        return buffer_size(self.current)

    @property
    def original_dimensions(self) -> Tuple[int, int]:
        self._require_image()
        return buffer_size(self.original)

    @property
    def resize_scale(self) -> float:
        """Product of every resize in the log (1.0 when never resized)."""
        scale = 1.0
        for op in self.log:
            if isinstance(op, Resize):
                scale *= op.scale
        return scale

    @property
    def display_buffer(self) -> Optional[np.ndarray]:
        """What a viewer should show: the live preview if any, else current."""
        return self.preview if self.preview is not None else self.current

    def _require_image(self) -> None:
        if not self.has_image():
            raise NullFileError("No image is loaded")

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _set_image(self, baseline: np.ndarray, image_path: Optional[Path],
                   operations: List[ImageOperation], current: np.ndarray) -> None:
        self.original = baseline
        self.current = current
        self.preview = None
        self.log = list(operations)
        self.redo_log = []
        self.image_path = image_path
        self.extension = codec.file_extension(image_path) if image_path else self.default_extension
        self._saved_log = list(operations)

    def open(self, path: Union[str, Path]) -> None:
        """
        Load an image and replay its saved operations, if any.

        Args:
            path: Image file path

        Raises:
            MissingFileError: If the image does not exist
            NonImageFileError: If the file is not an image
            InvalidOperationsFileError: If the sidecar log is damaged; the
                image is still loaded, with an empty log
        """
        path = Path(path)
        baseline = codec.decode(path)
        ops_file = sidecar_path(path, self.ops_extension)

        discarded: Optional[InvalidOperationsFileError] = None
        try:
            operations = read_operations(ops_file)
            current = replay(baseline, operations)
        except FileNotFoundError:
            operations, current = [], copy_buffer(baseline)
        except InvalidOperationsFileError as exc:
            logger.warning(f"Discarding damaged operations file {ops_file}: {exc}")
            operations, current, discarded = [], copy_buffer(baseline), exc
        except (PixelSightError, OSError) as exc:
            logger.warning(f"Discarding operations file {ops_file} that cannot be replayed: {exc}")
            operations, current = [], copy_buffer(baseline)
            discarded = InvalidOperationsFileError(f"Cannot replay {ops_file}: {exc}")
            discarded.__cause__ = exc

        self._set_image(baseline, path, operations, current)
        logger.info(f"Opened {path} ({baseline.shape[1]}x{baseline.shape[0]}, "
                    f"{len(operations)} saved operations)")

        if discarded is not None:
            raise discarded

    def open_buffer(self, buffer: np.ndarray) -> None:
        """Load an in-memory image with no file identity and an empty log."""
        baseline = copy_buffer(validate_buffer(buffer))
        self._set_image(baseline, None, [], copy_buffer(baseline))
        logger.info(f"Loaded in-memory image ({baseline.shape[1]}x{baseline.shape[0]})")

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def _commit(self, op: ImageOperation) -> None:
        if not isinstance(op, ImageOperation):
            raise InvalidArgumentError(f"Expected an ImageOperation, got {type(op).__name__}")
        result = op.apply(self.current)
        self.current = result
        self.log.append(op)
        if self.recording is not None:
            self.recording.operations.append(op)
        self.preview = None
        logger.debug(f"Applied {op.describe()} (log size {len(self.log)})")

    def apply(self, op: ImageOperation) -> None:
        """
        Apply an operation and record it in the log.

        A new edit makes the undone operations unreachable, so the redo log
        is cleared.

        Raises:
            NullFileError: If no image is loaded
            PixelSightError: The operation's own failure
        """
        self._require_image()
        self._commit(op)
        self.redo_log.clear()

    def preview_apply(self, op: ImageOperation) -> np.ndarray:
        """
        Render an operation without committing it.

        The result replaces any earlier preview and is exposed through
        ``preview``/``display_buffer``; ``current`` and both logs are not
        touched.

        Returns:
            The preview buffer
        """
        self._require_image()
        self.preview = op.apply(self.current)
        logger.debug(f"Previewed {op.describe()}")
        return self.preview

    def clear_preview(self) -> None:
        self.preview = None

    def _drop_recorded(self, op: ImageOperation) -> None:
        if self.recording is not None and self.recording.operations \
                and self.recording.operations[-1] is op:
            self.recording.operations.pop()

    def undo(self) -> ImageOperation:
        """
        Undo the newest operation.

        Returns:
            The undone operation

        Raises:
            NullFileError: If no image is loaded
            EmptyUndoStackError: If the log is empty
        """
        self._require_image()
        if not self.log:
            raise EmptyUndoStackError("Nothing to undo")

        op = self.log.pop()
        try:
            self.current = replay(self.original, self.log)
        except PixelSightError:
            self.log.append(op)
            raise

        self.redo_log.append(op)
        self._drop_recorded(op)
        self.preview = None
        logger.debug(f"Undid {op.describe()} (log size {len(self.log)})")
        return op

    def redo(self) -> ImageOperation:
        """
        Re-apply the most recently undone operation.

        Returns:
            The redone operation

        Raises:
            NullFileError: If no image is loaded
            EmptyRedoStackError: If there is nothing to redo
        """
        self._require_image()
        if not self.redo_log:
            raise EmptyRedoStackError("Nothing to redo")

        op = self.redo_log.pop()
        try:
            self._commit(op)
        except PixelSightError:
            self.redo_log.append(op)
            raise
        return op

    def undo_all(self) -> int:
        """Undo every operation; returns how many were undone."""
        self._require_image()
        count = len(self.log)
        while self.log:
            op = self.log.pop()
            self.redo_log.append(op)
            self._drop_recorded(op)
        if count:
            self.current = copy_buffer(self.original)
            self.preview = None
            logger.debug(f"Undid all {count} operations")
        return count

    def redo_all(self) -> int:
        """Redo every undone operation; returns how many were redone."""
        self._require_image()
        count = 0
        while self.redo_log:
            self.redo()
            count += 1
        return count

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def sensible_image_name(self, path: Union[str, Path]) -> Path:
        """
        Make sure a path ends in an allowed image extension.

        "photo" -> "photo.<ext>", "photo." -> "photo.<ext>", where <ext> is
        the current image's extension.
        """
        name = str(path)
        extension = self.extension or self.default_extension
        if codec.file_extension(name) in self.allowed_extensions:
            return Path(name)
        if name.endswith("."):
            return Path(name + extension)
        return Path(f"{name}.{extension}")

    def save(self) -> Path:
        """
        Write the baseline image and its operation log sidecar.

        The baseline (not the edited pixels) is written so that reopening
        and replaying the log reproduces ``current``.

        Returns:
            The image path

        Raises:
            NullFileError: If no image is loaded or it has no file path yet
        """
        self._require_image()
        if self.image_path is None:
            raise NullFileError("Image has no file path; use save_as")

        codec.encode(self.original, self.image_path,
                     codec.format_for(self.image_path, self.allowed_extensions),
                     background=self.export_background)
        self.save_history()
        logger.info(f"Saved {self.image_path} with {len(self.log)} operations")
        return self.image_path

    def save_history(self) -> Path:
        """
        Write only the operation log sidecar; the image file is not touched.

        Returns:
            The sidecar path

        Raises:
            NullFileError: If no image is loaded or it has no file path
        """
        self._require_image()
        if self.image_path is None:
            raise NullFileError("Image has no file path; use save_as")
        path = write_operations(self.ops_path, self.log)
        self._saved_log = list(self.log)
        return path

    def save_as(self, path: Union[str, Path]) -> Path:
        """Save under a new path, which becomes the image's file identity."""
        self._require_image()
        path = self.sensible_image_name(path)
        codec.format_for(path, self.allowed_extensions)

        previous = (self.image_path, self.extension)
        self.image_path = path
        self.extension = codec.file_extension(path)
        try:
            return self.save()
        except Exception:
            self.image_path, self.extension = previous
            raise

    def export(self, path: Union[str, Path]) -> Path:
        """
        Write the edited pixels only; the file identity does not change.

        Returns:
            The path actually written (with an extension added if needed)
        """
        self._require_image()
        path = self.sensible_image_name(path)
        codec.encode(self.current, path, codec.format_for(path, self.allowed_extensions),
                     background=self.export_background)
        logger.info(f"Exported {path}")
        return path

    # ------------------------------------------------------------------
    # Macros
    # ------------------------------------------------------------------

    def is_recording(self) -> bool:
        return self.recording is not None

    def set_recording(self, recording: bool) -> None:
        """Start (with an empty macro) or stop macro recording."""
        if recording:
            self.recording = RecordingSession()
            logger.info("Macro recording started")
        else:
            if self.recording is not None:
                logger.info(f"Macro recording stopped ({len(self.recording.operations)} operations)")
            self.recording = None

    def save_to_ops_file(self, path: Union[str, Path]) -> Path:
        """
        Write the recorded macro to an operations file.

        Raises:
            InvalidArgumentError: If recording is not on
        """
        if self.recording is None:
            raise InvalidArgumentError("No macro is being recorded")
        path = write_operations(path, self.recording.operations)
        logger.info(f"Saved macro with {len(self.recording.operations)} operations to {path}")
        return path

    def apply_ops_file(self, path: Union[str, Path]) -> int:
        """
        Apply every operation stored in an operations file.

        Each one is committed like a normal edit (and recorded while
        recording). Either all operations are applied or none are.

        Returns:
            Number of operations applied

        Raises:
            NullFileError: If no image is loaded
            MissingFileError: If the file does not exist
            InvalidOperationsFileError: If the file is damaged
        """
        self._require_image()
        try:
            operations = read_operations(path)
        except FileNotFoundError as exc:
            raise MissingFileError(f"Operations file not found: {path}") from exc

        snapshot = (self.current, len(self.log), list(self.redo_log), self.preview,
                    len(self.recording.operations) if self.recording else 0)
        try:
            for op in operations:
                self.apply(op)
        except PixelSightError:
            self.current, log_size, self.redo_log, self.preview, recorded = snapshot
            del self.log[log_size:]
            if self.recording is not None:
                del self.recording.operations[recorded:]
            raise

        logger.info(f"Applied {len(operations)} operations from {path}")
        return len(operations)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def get_history_summary(self) -> Dict[str, Any]:
        """Summary of the current history state."""
        return {
            'image_path': str(self.image_path) if self.image_path else None,
            'dimensions': self.dimensions if self.has_image() else None,
            'operations': [op.describe() for op in self.log],
            'redo': [op.describe() for op in reversed(self.redo_log)],
            'can_undo': self.can_undo(),
            'can_redo': self.can_redo(),
            'unsaved_changes': self.has_unsaved_changes(),
            'recording': self.is_recording(),
        }


def sidecar_path(image_path: Union[str, Path], ops_extension: str = "ops") -> Path:
    """Operation log path for an image: the image path plus ``.<ops_extension>``."""
    image_path = Path(image_path)
    return image_path.with_name(f"{image_path.name}.{ops_extension}")
