"""
Command-line interface for IFS point cloud generation.

This module provides commands to list the built-in fractal systems, export
generated point clouds, render images, and open an interactive explorer.
"""

import click
import sys
from pathlib import Path
import logging
import time

from .. import __version__
from ..api import FractalExplorer, RenderConfig, generate_points
from ..core.chaos_game import DEFAULT_BURN_IN
from ..core.fractal_systems import BUILTIN_CATALOG
from ..core.state import GenerationConfig
from ..rendering.image_output import ImageExporter

logger = logging.getLogger(__name__)

SYSTEM_NAMES = BUILTIN_CATALOG.names()
MAX_INTERACTIVE_POINTS = 200000


def _fail(ctx, error: Exception):
    click.echo(f"Error: {error}", err=True)
    if ctx.obj.get('verbose'):
        import traceback
        traceback.print_exc()
    sys.exit(1)


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress most output')
@click.pass_context
def main(ctx, version, verbose, quiet):
    """
    IFS Explorer - chaos-game rendering of iterated function systems.

    Generate point clouds for weighted affine function systems, render them
    to images, or explore them interactively.
    """
    if quiet:
        logging.basicConfig(level=logging.ERROR)
    elif verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    else:
        logging.basicConfig(level=logging.INFO,
                            format='%(levelname)s: %(message)s')

    if version:
        click.echo(f"IFS Explorer v{__version__}")
        click.echo(f"Python: {sys.version}")
        if ctx.invoked_subcommand is None:
            sys.exit(0)

    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose


@main.command('list-systems')
@click.pass_context
def list_systems(ctx):
    """List available fractal systems."""
    try:
        click.echo("Available fractal systems:")
        for system in BUILTIN_CATALOG:
            click.echo(f"  {system.name} ({len(system)} maps)")
            if ctx.obj.get('verbose'):
                click.echo(f"    {system.description}")
                for transform in system.transforms:
                    coefficients = ', '.join(f"{v:g}" for v in transform.coefficients)
                    click.echo(f"    [{coefficients}] weight={transform.weight:g} "
                               f"hue={transform.hue:.3f}")
    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.argument('system', type=click.Choice(SYSTEM_NAMES))
@click.argument('output', type=click.Path())
@click.option('--points', '-n', type=int, default=10000, show_default=True,
              help='Number of points to generate')
@click.option('--burn-in', type=int, default=DEFAULT_BURN_IN, show_default=True,
              help='Iterations discarded before recording')
@click.option('--seed', type=int, help='Random seed for reproducible output')
@click.pass_context
def generate(ctx, system, output, points, burn_in, seed):
    """
    Generate a point cloud and save it as .npy or .csv.

    SYSTEM: Name of the fractal system
    OUTPUT: Output file path (.npy or .csv)
    """
    try:
        start_time = time.time()
        cloud = generate_points(system, points, seed=seed, burn_in=burn_in)
        ImageExporter().save_points(cloud, Path(output))
        click.echo(f"Generated {len(cloud)} points in {time.time() - start_time:.2f}s")
        click.echo(f"Saved: {output}")
    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.argument('system', type=click.Choice(SYSTEM_NAMES))
@click.argument('output', type=click.Path())
@click.option('--points', '-n', type=int, default=100000, show_default=True,
              help='Number of points to plot')
@click.option('--burn-in', type=int, default=DEFAULT_BURN_IN, show_default=True,
              help='Iterations discarded before recording')
@click.option('--seed', type=int, help='Random seed for reproducible output')
@click.option('--width', '-w', type=int, default=800, show_default=True, help='Image width')
@click.option('--height', '-h', type=int, default=800, show_default=True, help='Image height')
@click.option('--background', default='black', show_default=True, help='Background color')
@click.option('--scale', type=float, help='Viewport scale (defaults to fitting the system)')
@click.option('--center', type=str, help='Viewport center "x,y"')
@click.option('--no-metadata', is_flag=True, help='Do not embed render metadata')
@click.pass_context
def render(ctx, system, output, points, burn_in, seed, width, height,
           background, scale, center, no_metadata):
    """
    Render a fractal system to an image file.

    SYSTEM: Name of the fractal system
    OUTPUT: Output image path (.png, .tif, .jpg)
    """
    try:
        config = GenerationConfig(system=system, num_points=points, burn_in=burn_in, seed=seed)
        render_config = RenderConfig(width=width, height=height, background=background,
                                     save_metadata=not no_metadata)
        explorer = FractalExplorer(config, render_config)

        if center:
            try:
                x, y = [float(v.strip()) for v in center.split(',')]
            except ValueError:
                click.echo("Error: Invalid center format. Use 'x,y'", err=True)
                sys.exit(1)
            explorer.viewport.x, explorer.viewport.y = x, y
        if scale is not None:
            if scale <= 0:
                raise ValueError("scale must be positive")
            explorer.viewport.scale = scale

        click.echo(f"Rendering {system} with {points} points...")
        start_time = time.time()
        explorer.render_to_file(Path(output))
        click.echo(f"Render complete: {time.time() - start_time:.2f}s")
        click.echo(f"Saved: {output}")
    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.option('--system', type=click.Choice(SYSTEM_NAMES), default=SYSTEM_NAMES[0],
              show_default=True, help='Initially selected system')
@click.option('--points', '-n', type=int, default=20000, show_default=True,
              help='Initial number of points')
@click.option('--width', '-w', type=int, default=800, show_default=True, help='Window width')
@click.option('--height', '-h', type=int, default=800, show_default=True, help='Window height')
@click.option('--interval', type=int, default=33, show_default=True,
              help='Milliseconds between frames')
@click.pass_context
def explore(ctx, system, points, width, height, interval):
    """
    Interactive exploration (requires tkinter).

    Arrow keys pan, Q zooms in, Z zooms out, R resets the view.
    """
    try:
        try:
            import tkinter as tk
            from tkinter import ttk
            from PIL import Image, ImageTk
        except ImportError as e:
            click.echo(f"Error: GUI dependencies not available: {e}", err=True)
            sys.exit(1)

        points = max(0, min(points, MAX_INTERACTIVE_POINTS))
        explorer = FractalExplorer(
            GenerationConfig(system=system, num_points=points),
            RenderConfig(width=width, height=height),
        )

        root = tk.Tk()
        root.title("IFS Explorer")

        canvas = tk.Canvas(root, width=width, height=height, bg='black', highlightthickness=0)
        canvas.pack(side=tk.LEFT, padx=5, pady=5)

        control_frame = ttk.Frame(root)
        control_frame.pack(side=tk.RIGHT, fill=tk.Y, padx=5, pady=5)

        current_photo = None

        def draw_frame():
            nonlocal current_photo
            try:
                rgb_image = explorer.render_image(width, height)
                pil_image = Image.fromarray((rgb_image * 255).astype('uint8'))
                current_photo = ImageTk.PhotoImage(pil_image)
                canvas.delete("all")
                canvas.create_image(width // 2, height // 2, image=current_photo)

                info = explorer.get_exploration_info()
                status_var.set(f"{info['system']} | {info['last_frame_points']} points | "
                               f"scale {info['scale']:.3g}")
            except Exception as e:
                logger.error(f"Frame error: {e}")
            root.after(interval, draw_frame)

        def on_select(event=None):
            explorer.select(system_var.get())

        def on_count(value):
            explorer.set_count(int(float(value)))

        def on_key(event):
            if event.keysym.lower() == 'r':
                explorer.reset_view()
            else:
                explorer.handle_key(event.keysym)

        ttk.Label(control_frame, text="System").pack(anchor=tk.W)
        system_var = tk.StringVar(value=system)
        selector = ttk.Combobox(control_frame, textvariable=system_var,
                                values=explorer.catalog.names(), state='readonly')
        selector.bind('<<ComboboxSelected>>', on_select)
        selector.pack(fill=tk.X, pady=2)

        ttk.Label(control_frame, text="Points").pack(anchor=tk.W, pady=(10, 0))
        count_scale = tk.Scale(control_frame, from_=0, to=MAX_INTERACTIVE_POINTS,
                               orient=tk.HORIZONTAL, resolution=1000, length=200,
                               command=on_count)
        count_scale.set(points)
        count_scale.pack(fill=tk.X, pady=2)

        ttk.Button(control_frame, text="Reset View", command=explorer.reset_view).pack(pady=10)

        status_var = tk.StringVar()
        ttk.Label(control_frame, textvariable=status_var, wraplength=200).pack(pady=10)
        ttk.Label(control_frame,
                  text="Arrows: pan\nQ / Z: zoom in / out\nR: reset view",
                  wraplength=200).pack(pady=5)

        root.bind('<Key>', on_key)

        click.echo("Starting interactive explorer...")
        draw_frame()
        root.mainloop()

    except Exception as e:
        _fail(ctx, e)


if __name__ == '__main__':
    main()
