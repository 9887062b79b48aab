from dataclasses import dataclass, field

import click


class CheckError(Exception):
    pass


class ConfigurationError(CheckError):
    pass


class DiscoveryError(CheckError):
    pass


class CatalogReadError(CheckError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Unable to read {path}: {reason}")
        self.path = path


@dataclass(frozen=True)
class ErrorReport:
    label: str
    path: str
    line_index: int
    msgid: str
    line: str
    placeholder: str

    @property
    def message(self) -> str:
        return self.label + click.style(
            f"[ERROR] Missing interpolation {self.placeholder} in {self.path}:{self.line_index}\n"
            f"\t{self.msgid}\n"
            f"\t{self.line}",
            fg="red",
        )


@dataclass
class ScanResult:
    reports: list[ErrorReport] = field(default_factory=list)
    files_found: bool = True

    @property
    def ok(self) -> bool:
        return self.files_found and not self.reports
