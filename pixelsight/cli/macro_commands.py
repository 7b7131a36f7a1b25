"""
Macro CLI commands for PixelSight

Macros are operation files in the configured macro directory that can be
replayed on any image.
"""

import click
import logging

from ..exceptions import InvalidArgumentError
from ..io.macros import MacroLibrary
from ..processing.oplog import read_operations
from .common import echo, handle_errors, open_image, save_image_history

logger = logging.getLogger(__name__)


@click.group()
@click.option('--directory', type=click.Path(file_okay=False),
              help='Macro directory (default from config)')
@click.pass_context
def macro(ctx, directory):
    """Record and replay macros"""
    ctx.obj['macros'] = MacroLibrary(directory, config=ctx.obj.get('config'))


@macro.command('list')
@click.option('--verbose', '-v', is_flag=True, help='Show the operations of each macro')
@click.pass_context
@handle_errors
def list_macros(ctx, verbose):
    """List available macros"""
    library = ctx.obj['macros']
    paths = library.list_macros()
    if not paths:
        echo(ctx, f"No macros in {library.directory}")
        return

    for path in paths:
        operations = read_operations(path)
        click.echo(f"{path.stem} ({len(operations)} operations)")
        if verbose:
            for op in operations:
                click.echo(f"    {op.describe()}")


@macro.command()
@click.argument('name')
@click.argument('image_path', metavar='IMAGE', type=click.Path(exists=True, dir_okay=False))
@click.option('--last', '-n', type=int, help='Record only the newest N operations')
@click.option('--force', '-f', is_flag=True, help='Overwrite an existing macro')
@click.pass_context
@handle_errors
def record(ctx, name, image_path, last, force):
    """
    Save operations from IMAGE's history as macro NAME.

    The operations are undone and redone with recording switched on, so
    the image's history is left as it was.
    """
    library = ctx.obj['macros']
    target = library.path_for(name)
    if target.exists() and not force:
        raise click.ClickException(f"Macro '{target.stem}' already exists (use --force)")

    image = open_image(ctx, image_path)
    count = len(image.log) if last is None else last
    if count < 1 or count > len(image.log):
        raise InvalidArgumentError(
            f"Cannot record {count} operations; {image_path} has {len(image.log)}")

    redo_log = list(image.redo_log)
    image.redo_log = []
    for _ in range(count):
        image.undo()
    image.set_recording(True)
    for _ in range(count):
        image.redo()
    image.redo_log = redo_log

    library.ensure_directory()
    image.save_to_ops_file(target)
    image.set_recording(False)
    echo(ctx, f"Recorded macro '{target.stem}' with {count} operations")


@macro.command()
@click.argument('name')
@click.argument('image_path', metavar='IMAGE', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
@handle_errors
def play(ctx, name, image_path):
    """Apply macro NAME to IMAGE"""
    library = ctx.obj['macros']
    image = open_image(ctx, image_path)
    count = image.apply_ops_file(library.path_for(name))
    save_image_history(image)
    echo(ctx, f"Applied {count} operations from macro '{name}'")
