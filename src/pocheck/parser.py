#!/usr/bin/python3
# Copyright (c) 2026 po-check contributors
import concurrent.futures as cf
import logging
import pathlib
import re
import threading
from typing import Callable

from pocheck.classes import (
    CatalogReadError,
    ConfigurationError,
    DiscoveryError,
    ErrorReport,
    ScanResult,
)

logger = logging.getLogger(__name__)

DEFAULT_PATTERN = r"\{\{.*\}\}|\{.*\}"
CATALOG_SUFFIX = ".po"

# Translations left blank on purpose are never reported
EMPTY_TRANSLATIONS = ('msgstr ""', '""')


class ProgressCounter:
    """Count of finished catalogs, shared by every scan of a run."""

    def __init__(self, total: int) -> None:
        self.total = total
        self._done = 0
        self._lock = threading.Lock()

    def advance(self) -> None:
        with self._lock:
            self._done += 1

    @property
    def label(self) -> str:
        with self._lock:
            return f"[{self._done}/{self.total}] "


def compile_pattern(pattern: str) -> re.Pattern:
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ConfigurationError(f"Invalid pattern {pattern!r}: {exc}") from exc


def find_missing_interpolation(
    pattern: re.Pattern, msgid: str, line: str
) -> str | None:
    """Return the first placeholder of ``msgid`` absent from ``line``.

    Only counts are compared first: when both sides hold the same number of
    placeholders the pair is accepted, whatever the placeholders are.
    """
    expected = [m.group(0) for m in pattern.finditer(msgid)]
    if len(expected) == sum(1 for _ in pattern.finditer(line)):
        return None
    if line in EMPTY_TRANSLATIONS:
        return None
    for placeholder in expected:
        if placeholder not in line:
            return placeholder
    return None


def scan_file(
    path: pathlib.Path, pattern: re.Pattern, progress: ProgressCounter
) -> list[ErrorReport]:
    logger.debug(f"Scanning {path}")
    reports = []
    last_msgid = ""
    try:
        with open(path, "r", encoding="utf-8", newline="\n") as file:
            for line_index, line in enumerate(file, start=1):
                line = line.removesuffix("\n").removesuffix("\r")
                if line.startswith("msgid"):
                    last_msgid = line
                elif line.startswith("msgstr") or line.startswith('"'):
                    placeholder = find_missing_interpolation(pattern, last_msgid, line)
                    if placeholder is not None:
                        reports.append(
                            ErrorReport(
                                progress.label,
                                str(path),
                                line_index,
                                last_msgid,
                                line,
                                placeholder,
                            )
                        )
    except (OSError, UnicodeDecodeError) as exc:
        raise CatalogReadError(str(path), str(exc)) from exc

    progress.advance()
    logger.debug(f"{path}: {len(reports)} missing interpolation(s)")
    return reports


def find_catalogs(directory: str) -> list[pathlib.Path]:
    try:
        entries = list(pathlib.Path(directory).iterdir())
    except OSError as exc:
        raise DiscoveryError(f"Unable to list {directory}: {exc}") from exc
    return sorted(
        entry
        for entry in entries
        if entry.is_file() and entry.suffix == CATALOG_SUFFIX
    )


def run(
    *,
    directory: str,
    pattern: str,
    on_start: Callable[[int], None] | None = None,
    on_file_done: Callable[[], None] | None = None,
) -> ScanResult:
    # The pattern is compiled before touching the filesystem
    compiled = compile_pattern(pattern)

    catalogs = find_catalogs(directory)
    if not catalogs:
        return ScanResult(files_found=False)

    logger.info(f"Found {len(catalogs)} catalog(s) in {directory}")
    if on_start is not None:
        on_start(len(catalogs))

    progress = ProgressCounter(len(catalogs))
    result = ScanResult()
    executor = cf.ThreadPoolExecutor(max_workers=len(catalogs))
    try:
        futures = [
            executor.submit(scan_file, catalog, compiled, progress)
            for catalog in catalogs
        ]
        for future in cf.as_completed(futures):
            result.reports.extend(future.result())
            if on_file_done is not None:
                on_file_done()
    except CatalogReadError:
        executor.shutdown(wait=False, cancel_futures=True)
        raise
    executor.shutdown()
    return result
