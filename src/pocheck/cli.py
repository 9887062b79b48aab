import contextlib
import logging
import os
import sys
from typing import Any, TextIO

import yaml

import click
from pocheck import parser
from pocheck.classes import CheckError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "logging": {
        "level": "WARNING",
        "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        "datefmt": "%Y-%m-%d %H:%M:%S",
    },
}


def load_config(config_folder: str) -> dict[str, Any]:
    config_file_path = os.path.abspath(os.path.join(config_folder, "config.yml"))

    config: dict[str, Any] = {}
    try:
        with open(config_file_path, "r") as file:
            config = yaml.safe_load(file) or {}
    except FileNotFoundError:
        logger.warning(f"{config_file_path} not found, using defaults.")
    except yaml.YAMLError as exc:
        logger.error(sys._getframe().f_code.co_name + " " + str(exc))
        sys.exit(1)

    if not isinstance(config, dict):
        logger.error(f"{config_file_path} must contain a mapping")
        sys.exit(1)

    if "pattern" in config and not isinstance(config["pattern"], str):
        logger.error(f"{config_file_path}: pattern must be a string")
        sys.exit(1)

    return {
        **config,
        "logging": {**DEFAULT_CONFIG["logging"], **(config.get("logging") or {})},
    }


def is_terminal(stream: TextIO) -> bool:
    return stream.isatty()


def clear_progress(stream: TextIO) -> None:
    """Erase the finished progress bar line from a terminal."""
    if not is_terminal(stream):
        return
    stream.write("\x1b[1A\r\x1b[K")
    stream.flush()


@click.group()
@click.version_option(package_name="po-check")
def cli() -> None:
    pass


@cli.command("check")
@click.argument(
    "path", type=click.Path(exists=True, file_okay=False, dir_okay=True)
)
@click.option(
    "-p",
    "--pattern",
    default=None,
    help=f"Regex matching translation interpolations. [default: {parser.DEFAULT_PATTERN}]",
)
@click.option("--config-folder", default="config", help="Configuration folder path.")
def check(path: str, pattern: str | None, config_folder: str) -> None:
    """Search for interpolation errors in the .po files of PATH."""
    config = load_config(config_folder)

    logging.basicConfig(
        level=logging.getLevelName(config["logging"]["level"]),
        format=config["logging"]["format"],
        datefmt=config["logging"]["datefmt"],
    )

    if pattern is None:
        pattern = config.get("pattern") or parser.DEFAULT_PATTERN

    with contextlib.ExitStack() as stack:
        bars: list = []

        def on_start(total: int) -> None:
            click.secho(f"[INFO]  Processing .po files in {path}", fg="cyan")
            stream = sys.stderr
            # Runs after the bar has finished rendering
            stack.callback(clear_progress, stream)
            bars.append(
                stack.enter_context(
                    click.progressbar(
                        length=total,
                        label="Scanning",
                        show_pos=True,
                        show_eta=True,
                        file=stream,
                    )
                )
            )

        def on_file_done() -> None:
            bars[0].update(1)

        try:
            result = parser.run(
                directory=path,
                pattern=pattern,
                on_start=on_start,
                on_file_done=on_file_done,
            )
        except CheckError as exc:
            logger.error(str(exc))
            sys.exit(1)

    if not result.files_found:
        click.secho(f"[ERROR] No .po files found in {path}", fg="red")
        sys.exit(1)

    for report in result.reports:
        click.echo(report.message)

    if not result.ok:
        sys.exit(1)

    click.secho("[INFO]  Done", fg="cyan")
