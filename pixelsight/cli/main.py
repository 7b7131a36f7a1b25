"""
PixelSight Command Line Interface

Every command opens an image together with its operation log, acts on it,
and writes the log back, so edits, undo and redo persist between runs
without the image file itself being rewritten.
"""

import json
import logging
from pathlib import Path
from typing import Optional

import click

from ..config import get_config_value, load_config
from ..processing.draw.annotations import FillMode, ShapeKind
from ..processing.filters.edges import EmbossDirection, SobelDirection
from ..processing.geometry.transforms import FlipAxis
from ..processing.operations import (
    BrightnessContrast,
    Crop,
    DrawShape,
    EmbossFilter,
    Flip,
    GaussianBlur,
    Grayscale,
    MeanFilter,
    MedianFilter,
    Resize,
    Rotate,
    Sharpen,
    SobelFilter,
)
from ..selection.region import Region
from ..utils.logging import StructuredLogger, setup_console_logging
from .common import echo, handle_errors, open_image, save_image_history
from .macro_commands import macro

logger = logging.getLogger(__name__)


def parse_region(ctx, param, value) -> Optional[Region]:
    """Click callback turning "x1,y1,x2,y2" into a Region."""
    if value is None:
        return None
    try:
        x1, y1, x2, y2 = (int(v) for v in value.split(','))
    except ValueError:
        raise click.BadParameter("expected four integers: x1,y1,x2,y2")
    return Region(x1, y1, x2, y2)


def parse_color(ctx, param, value):
    """Click callback turning "r,g,b[,a]" into an RGBA tuple."""
    if value is None:
        return None
    try:
        channels = tuple(int(v) for v in value.split(','))
    except ValueError:
        raise click.BadParameter("expected 3 or 4 integers: r,g,b[,a]")
    if len(channels) == 3:
        channels += (255,)
    if len(channels) != 4:
        raise click.BadParameter("expected 3 or 4 integers: r,g,b[,a]")
    return channels


OPERATION_NAMES = [
    'grayscale', 'brightness-contrast', 'mean', 'gaussian', 'median', 'sharpen',
    'sobel', 'emboss', 'flip', 'rotate', 'resize', 'crop', 'shape',
]


def build_operation(name: str, options: dict, config: dict):
    """Create the operation named on the command line from its options."""
    region = options['region']

    def radius(key):
        if options['radius'] is not None:
            return options['radius']
        return int(get_config_value(config, f'filters.{key}_radius', 1))

    if name == 'grayscale':
        return Grayscale(region)
    if name == 'brightness-contrast':
        return BrightnessContrast(options['brightness'], options['contrast'], region)
    if name == 'mean':
        return MeanFilter(radius('mean'), region)
    if name == 'gaussian':
        return GaussianBlur(radius('gaussian'), region)
    if name == 'median':
        return MedianFilter(radius('median'), region)
    if name == 'sharpen':
        return Sharpen(region)
    if name == 'sobel':
        return SobelFilter(options['direction'] or SobelDirection.HORIZONTAL.value, region)
    if name == 'emboss':
        return EmbossFilter(options['direction'] or EmbossDirection.EAST.value, region)
    if name == 'flip':
        return Flip(options['axis'])
    if name == 'rotate':
        return Rotate(options['angle'])
    if name == 'resize':
        return Resize(options['percent'])

    if region is None:
        raise click.UsageError(f"'{name}' needs --region x1,y1,x2,y2")
    if name == 'crop':
        return Crop.from_region(region)
    return DrawShape(
        shape=options['shape'],
        start=(region.x1, region.y1),
        end=(region.x2, region.y2),
        primary=options['color'] or (0, 0, 0, 255),
        secondary=options['secondary'] or (255, 255, 255, 255),
        fill=options['fill'],
        stroke_width=options['stroke'],
    )


@click.group()
@click.option('--config', '-c', type=click.Path(exists=True),
              help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.pass_context
def main(ctx, config: Optional[str] = None, verbose: bool = False, quiet: bool = False):
    """
    PixelSight - non-destructive image editing

    Edits are stored as an operation log next to each image
    (IMAGE.ops) and replayed when the image is opened again.
    """
    if ctx.obj is None:
        ctx.obj = {}

    ctx.obj['config'] = load_config(config)

    level = get_config_value(ctx.obj['config'], 'logging.level', 'INFO')
    if verbose:
        level = 'DEBUG'
    elif quiet:
        level = 'ERROR'
    setup_console_logging(level, fmt=get_config_value(
        ctx.obj['config'], 'logging.format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s'))

    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet


@main.command()
@click.argument('image_path', metavar='IMAGE', type=click.Path(exists=True, dir_okay=False))
@click.argument('operation', type=click.Choice(OPERATION_NAMES))
@click.option('--region', callback=parse_region, help='Limit to x1,y1,x2,y2')
@click.option('--radius', '-r', type=int, help='Filter radius (default from config)')
@click.option('--brightness', '-b', type=int, default=0, help='Brightness change in percent')
@click.option('--contrast', type=int, default=0, help='Contrast change in percent')
@click.option('--direction', '-d',
              type=click.Choice(sorted({d.value for d in SobelDirection} | {d.value for d in EmbossDirection})),
              help='Sobel or emboss direction')
@click.option('--axis', type=click.Choice([a.value for a in FlipAxis]), default='horizontal')
@click.option('--angle', type=int, default=90, help='Rotation in degrees, multiple of 90')
@click.option('--percent', type=float, default=100.0, help='Resize scale in percent')
@click.option('--shape', type=click.Choice([s.value for s in ShapeKind]), default='rectangle')
@click.option('--fill', type=click.Choice([f.value for f in FillMode]), default='border')
@click.option('--color', callback=parse_color, help='Primary colour r,g,b[,a]')
@click.option('--secondary', callback=parse_color, help='Secondary colour r,g,b[,a]')
@click.option('--stroke', type=int, default=2, help='Stroke width')
@click.pass_context
@handle_errors
def apply(ctx, image_path, operation, **options):
    """
    Apply OPERATION to IMAGE and record it in the image's history.

    IMAGE: Image file to edit
    """
    image = open_image(ctx, image_path)
    op = build_operation(operation, options, ctx.obj['config'])
    image.apply(op)
    save_image_history(image)

    StructuredLogger(__name__).debug("Applied operation", image=image_path, operation=op.to_dict())
    width, height = image.dimensions
    echo(ctx, f"Applied {op.describe()} -> {width}x{height}")


@main.command()
@click.argument('image_path', metavar='IMAGE', type=click.Path(exists=True, dir_okay=False))
@click.option('--all', 'undo_everything', is_flag=True, help='Undo every operation')
@click.pass_context
@handle_errors
def undo(ctx, image_path, undo_everything):
    """Undo the newest operation of IMAGE"""
    image = open_image(ctx, image_path)
    if undo_everything:
        echo(ctx, f"Undid {image.undo_all()} operations")
    else:
        echo(ctx, f"Undid {image.undo().describe()}")
    save_image_history(image)


@main.command()
@click.argument('image_path', metavar='IMAGE', type=click.Path(exists=True, dir_okay=False))
@click.option('--all', 'redo_everything', is_flag=True, help='Redo every undone operation')
@click.pass_context
@handle_errors
def redo(ctx, image_path, redo_everything):
    """Redo the most recently undone operation of IMAGE"""
    image = open_image(ctx, image_path)
    if redo_everything:
        echo(ctx, f"Redid {image.redo_all()} operations")
    else:
        echo(ctx, f"Redid {image.redo().describe()}")
    save_image_history(image)


@main.command()
@click.argument('image_path', metavar='IMAGE', type=click.Path(exists=True, dir_okay=False))
@click.option('--json', 'as_json', is_flag=True, help='Print the summary as JSON')
@click.pass_context
@handle_errors
def history(ctx, image_path, as_json):
    """Show the operations recorded for IMAGE"""
    image = open_image(ctx, image_path)
    summary = image.get_history_summary()

    if as_json:
        click.echo(json.dumps(summary, indent=2))
        return

    width, height = summary['dimensions']
    click.echo(f"{Path(image_path).name}: {width}x{height}, "
               f"{len(summary['operations'])} operations")
    for number, description in enumerate(summary['operations'], 1):
        click.echo(f"  {number:3d}. {description}")


@main.command()
@click.argument('image_path', metavar='IMAGE', type=click.Path(exists=True, dir_okay=False))
@click.argument('output', type=click.Path(dir_okay=False))
@click.pass_context
@handle_errors
def export(ctx, image_path, output):
    """
    Write the edited pixels of IMAGE to OUTPUT.

    An extension matching IMAGE is added when OUTPUT has none.
    """
    image = open_image(ctx, image_path)
    written = image.export(output)
    echo(ctx, f"Exported {written}")


main.add_command(macro)
