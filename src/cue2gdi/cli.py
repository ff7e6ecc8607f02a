"""Command-line interface for cue2gdi."""

import sys
from pathlib import Path

import click

from cue2gdi import __version__
from cue2gdi.config import load_config
from cue2gdi.core.batch import BatchConverter
from cue2gdi.core.builder import GdiLayoutBuilder
from cue2gdi.core.parser import CueSheetParser
from cue2gdi.errors import ConversionError
from cue2gdi.models.result import ConversionResult
from cue2gdi.utils.logger import setup_logging


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (defaults to built-in defaults)",
)
@click.pass_context
def cli(ctx, config):
    """cue2gdi - Convert GD-ROM CUE sheets to GDI layouts."""
    try:
        cfg = load_config(config)
        ctx.ensure_object(dict)
        ctx.obj["config"] = cfg

        setup_logging(cfg.logging)

    except Exception as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)


def _echo_result(result: ConversionResult, indent: str = "") -> None:
    if result.status == "success":
        click.secho(f"{indent}{result}", fg="green")
    elif result.status == "dry_run":
        click.secho(f"{indent}{result}", fg="cyan")
    else:
        click.secho(f"{indent}{result}", fg="red")


@cli.command()
@click.argument(
    "cue_files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option("--dry-run", is_flag=True, help="Compute layouts without writing files")
@click.option("--overwrite", is_flag=True, help="Replace existing track files and table")
@click.option("--workers", "-w", type=click.IntRange(min=1), default=None, help="Discs converted in parallel")
@click.pass_context
def convert(ctx, cue_files, dry_run, overwrite, workers):
    """Convert one or more CUE sheets to GDI layouts.

    Track files and the GDI table are written next to each CUE file.
    """
    config = ctx.obj["config"]
    if dry_run:
        config.execution.dry_run = True
    if overwrite:
        config.conversion.overwrite = True
    if workers is not None:
        config.processing.worker_count = workers

    click.echo(f"Converting {len(cue_files)} disc(s)")
    click.echo("")

    def on_result(finished: int, total: int, result: ConversionResult) -> None:
        percent = finished / total * 100.0
        click.echo(f"[{finished}/{total}] {percent:.2f}% {result.cue_path}")
        _echo_result(result, indent="  ")

    results = BatchConverter(config).run(list(cue_files), on_result=on_result)

    counts = {"success": 0, "dry_run": 0, "failed": 0, "error": 0}
    for result in results:
        counts[result.status] += 1

    click.echo("")
    click.echo("=" * 60)
    click.echo("Summary:")
    click.secho(f"  ✓ Success:  {counts['success']}", fg="green")
    click.secho(f"  ⊙ Dry run:  {counts['dry_run']}", fg="cyan")
    click.secho(f"  ✗ Failed:   {counts['failed']}", fg="red")
    click.secho(f"  ✗ Errors:   {counts['error']}", fg="red")
    click.echo(f"  Total:      {len(results)}")

    if counts["failed"] > 0 or counts["error"] > 0:
        sys.exit(1)


@cli.command()
@click.argument("cue_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def inspect(ctx, cue_file):
    """Show the parsed tracks and the planned GDI table of a CUE sheet.

    Nothing is written.
    """
    config = ctx.obj["config"]

    try:
        cue_sheet = CueSheetParser().parse(cue_file)
    except ConversionError as e:
        click.secho(f"✗ {e}", fg="red", err=True)
        sys.exit(1)

    click.echo(f"Cue sheet: {cue_sheet}")
    for comment in cue_sheet.comments:
        click.echo(f"  REM {comment}")
    for track in cue_sheet.tracks:
        click.echo(f"  {track}")
        for index in track.indices:
            click.echo(f"    {index}")

    try:
        layout = GdiLayoutBuilder(config.conversion).plan(cue_file.parent, cue_sheet)
    except ConversionError as e:
        click.secho(f"✗ Cannot plan layout: {e}", fg="red", err=True)
        sys.exit(1)

    click.echo("")
    click.echo(f"Planned {config.conversion.gdi_filename}:")
    click.echo(layout.render(), nl=False)


@cli.command()
def version():
    """Show version information."""
    click.echo(f"cue2gdi v{__version__}")


def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
