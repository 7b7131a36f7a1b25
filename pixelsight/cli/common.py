"""
Helpers shared by the PixelSight CLI commands
"""

import functools
import logging
from pathlib import Path

import click

from ..exceptions import InvalidOperationsFileError, PixelSightError
from ..processing.history import EditableImage, sidecar_path
from ..processing.oplog import read_operations, write_operations

logger = logging.getLogger(__name__)


def handle_errors(func):
    """Report editor errors as click errors instead of tracebacks."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PixelSightError as e:
            raise click.ClickException(str(e)) from e
    return wrapper


def echo(ctx, message: str):
    """Print unless --quiet was given."""
    if not ctx.obj.get('quiet'):
        click.echo(message)


def redo_path(image: EditableImage) -> Path:
    """Where undone operations are kept between runs: IMAGE.redo.<ops>."""
    return sidecar_path(image.image_path, f"redo.{image.ops_extension}")


def open_image(ctx, image_path: str) -> EditableImage:
    """
    Open an image with its history and the operations undone in earlier runs.

    A damaged history is reported and dropped; the image still opens. Undone
    operations only belong to the history they were undone from, so they are
    ignored when that history is damaged or missing.
    """
    image = EditableImage(ctx.obj['config'])
    try:
        image.open(image_path)
    except InvalidOperationsFileError as e:
        click.echo(f"Warning: ignoring saved history: {e}", err=True)
        history_intact = False
    else:
        history_intact = image.ops_path.is_file()

    undone = redo_path(image)
    if undone.is_file() and not history_intact:
        logger.warning(f"Ignoring {undone}: the history it was undone from is gone")
    elif undone.is_file():
        try:
            image.redo_log = read_operations(undone)
        except InvalidOperationsFileError as e:
            logger.warning(f"Ignoring damaged redo file {undone}: {e}")
    return image


def save_image_history(image: EditableImage) -> None:
    """Write the history sidecar, plus the redo file while anything is undone."""
    image.save_history()
    undone = redo_path(image)
    if image.redo_log:
        write_operations(undone, image.redo_log)
    elif undone.exists():
        undone.unlink()
