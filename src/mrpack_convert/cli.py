"""
CLI entry point for mrpack-convert.

Commands:
  - ``mrpack-convert convert <mrpack>``
  - ``mrpack-convert fetch <url>``
  - ``mrpack-convert info <mrpack>``
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from tqdm import tqdm

# Load .env file so MODRINTH_API_BASE (and others) can be set via .env
load_dotenv()

from mrpack_convert.api import ModrinthAPI
from mrpack_convert.archive import open_archive, save_archive
from mrpack_convert.converter import MrpackConverter
from mrpack_convert.errors import ConversionError, InvalidUrlFormatError
from mrpack_convert.models import ConversionResult
from mrpack_convert.notifier import BrowserNotifier, LoggingNotifier
from mrpack_convert.resolver import CatalogResolver
from mrpack_convert.url import parse_catalog_url


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _run_with_progress(make_coro) -> ConversionResult:
    """Run a conversion coroutine factory with a tqdm percentage bar."""
    pbar = tqdm(total=100, desc="Downloading files", unit="%")

    def on_progress(percent: int) -> None:
        pbar.n = percent
        pbar.refresh()

    try:
        return asyncio.run(make_coro(on_progress))
    finally:
        pbar.close()


def _report(result: ConversionResult, output_dir: str) -> None:
    target = save_archive(result.content, result.filename, output_dir)
    click.echo(f"\n✓ Converted to '{result.filename}'")
    click.echo(f"  Overrides:  {result.overrides}")
    click.echo(f"  Downloaded: {len(result.placed)}")
    if result.deferred:
        click.echo(f"  Manual:     {len(result.deferred)} (see messages above)")
        for path in result.deferred:
            click.echo(f"    - {path}")
    if result.failed:
        click.echo(f"  Failed:     {len(result.failed)}")
        for path in result.failed:
            click.echo(f"    - {path}")
    click.echo(f"  Saved:      {target}")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.option("--api-base", envvar="MODRINTH_API_BASE", default=None, help="Modrinth API base URL.")
@click.option("--token", envvar="MODRINTH_TOKEN", default="", help="Modrinth API token (optional).")
@click.pass_context
def main(ctx: click.Context, verbose: bool, api_base: str, token: str) -> None:
    """mrpack-convert: Convert Modrinth modpacks (.mrpack) into plain zips."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["api_base"] = api_base
    ctx.obj["token"] = token
    ctx.obj["verbose"] = verbose


@main.command()
@click.argument("mrpack", type=click.Path(exists=True, dir_okay=False))
@click.option("--output-dir", "-o", default=".", type=click.Path(), help="Output directory (default: current dir).")
@click.option("--concurrency", "-c", default=16, help="Max parallel downloads.")
@click.option("--open-browser", is_flag=True, help="Open manual downloads in the browser.")
def convert(mrpack: str, output_dir: str, concurrency: int, open_browser: bool) -> None:
    """Convert a local .mrpack file into a zip."""
    path = Path(mrpack)
    notifier = BrowserNotifier() if open_browser else LoggingNotifier()

    async def run(on_progress):
        async with MrpackConverter(notifier=notifier, concurrency=concurrency) as converter:
            return await converter.convert(
                path.read_bytes(), on_progress, source_name=path.name
            )

    try:
        result = _run_with_progress(run)
    except ConversionError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    _report(result, output_dir)


@main.command()
@click.argument("url")
@click.option("--output-dir", "-o", default=".", type=click.Path(), help="Output directory (default: current dir).")
@click.option("--concurrency", "-c", default=16, help="Max parallel downloads.")
@click.option("--open-browser", is_flag=True, help="Open manual downloads in the browser.")
@click.pass_context
def fetch(ctx: click.Context, url: str, output_dir: str, concurrency: int, open_browser: bool) -> None:
    """Convert a modpack from a Modrinth page URL or a direct .mrpack URL."""
    notifier = BrowserNotifier() if open_browser else LoggingNotifier()
    try:
        parse_catalog_url(url)
        is_catalog = True
    except InvalidUrlFormatError:
        is_catalog = False

    async def run(on_progress):
        async with MrpackConverter(notifier=notifier, concurrency=concurrency) as converter:
            if not is_catalog:
                return await converter.convert_url(url, on_progress)
            async with ModrinthAPI(token=ctx.obj["token"], api_base=ctx.obj["api_base"]) as api:
                return await CatalogResolver(api, converter).resolve(url, on_progress)

    try:
        result = _run_with_progress(run)
    except ConversionError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    _report(result, output_dir)


@main.command()
@click.argument("mrpack", type=click.Path(exists=True, dir_okay=False))
@click.option("--show-files", "-f", is_flag=True, help="Show the full file list with download URLs.")
def info(mrpack: str, show_files: bool) -> None:
    """Parse and display modpack information from a .mrpack (no download needed)."""
    try:
        with open_archive(Path(mrpack).read_bytes()) as archive:
            manifest = MrpackConverter.parse_manifest(archive)
    except ConversionError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo("=" * 50)
    click.echo(f"  Modpack:    {manifest.name}")
    click.echo(f"  Version:    {manifest.version_id}")
    click.echo(f"  Game:       {manifest.game}")
    click.echo(f"  Format:     {manifest.format_version}")
    click.echo("=" * 50)
    for name, version in (manifest.dependencies or {}).items():
        click.echo(f"  {name + ':':<11} {version}")
    click.echo(f"  Files:      {len(manifest.files)}")
    click.echo("=" * 50)

    if show_files or len(manifest.files) <= 20:
        click.echo("\n  File list:")
        for i, f in enumerate(manifest.files, 1):
            size = f"{f.file_size:,} B" if f.file_size else "unknown size"
            click.echo(f"    {i:>4}. {f.path or '<no path>'}  ({size})  {f.url}")
    else:
        click.echo(f"\n  (Use --show-files / -f to list all {len(manifest.files)} files)")


if __name__ == "__main__":
    main()
