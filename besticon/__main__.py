# SPDX-License-Identifier: AGPL-3.0-or-later
"""Command line implementation

::

  $ python -m besticon fetch github.com
  $ python -m besticon fetch --all github.com
  $ python -m besticon ico favicon.ico
  $ python -m besticon cache state
"""

import pathlib
import sys

import typer

from besticon import cache
from besticon import config
from besticon import ico
from besticon import init_logging
from besticon.colorfinder import to_hex
from besticon.exceptions import BesticonException, MalformedIconException
from besticon.finder import Besticon

app = typer.Typer()
app.add_typer(cache.app, name="cache", help="commands related to the cache")


@app.callback()
def main(debug: bool = False):
    """Find the best icon of a web site."""
    init_logging(debug)


@app.command()
def fetch(
    url: str,
    all_icons: bool = typer.Option(False, "--all", help="Display all icons, not just the best."),
    size: str = typer.Option("", help="Best icon in a size range like 32..64..128"),
    color: bool = typer.Option(False, help="Display the main color of the icons."),
):
    """print the URL of the best icon of a site"""
    finder = Besticon.from_config(config.load_config()).new_icon_finder()
    try:
        icons = finder.fetch_icons(url)
        if size:
            best = finder.icon_in_size_range_str(size)
            icons = [best] if best else []
    except BesticonException as exc:
        print(f"{url}:  failed to fetch icons: {exc}", file=sys.stderr)
        raise typer.Exit(1) from exc

    if all_icons:
        for icon in icons:
            print(f"{url}:  {icon.url}")
    elif icons:
        print(f"{url}:  {icons[0].url}")

    if color:
        rgb = finder.main_color_for_icons()
        print(f"{url}:  main color " + (f"#{to_hex(rgb)}" if rgb else "unknown"))

    if not icons and not all_icons:
        print(f"{url}:  no icons found", file=sys.stderr)
        raise typer.Exit(2)


@app.command("ico")
def ico_info(filenames: list[pathlib.Path]):
    """describe ICO files"""
    for filename in filenames:
        try:
            with filename.open("rb") as f:
                icon_dir = ico.parse_ico(f)
        except OSError:
            print(f"{filename}: failed to open {filename}")
            continue
        except MalformedIconException:
            print(f"{filename}: failed to parse {filename} as icon file")
            continue

        best = icon_dir.find_best_icon()
        if best is None or icon_dir.count == 1:
            print(f"{filename}: MS Windows icon resource - {icon_dir.count} icon")
        else:
            print(
                f"{filename}: MS Windows icon resource - {icon_dir.count} icons,"
                f" {best.real_width}x{best.real_height}, {best.color_count}-colors"
            )


if __name__ == "__main__":
    app()
