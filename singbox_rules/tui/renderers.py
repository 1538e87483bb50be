from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape

from singbox_rules.models import (
    BuildReport,
    BuildResult,
    SourceValidationResult,
    TemplateValidationResult,
    ValidationReport,
)
from singbox_rules.tui.enums import BUILD_STATUS_STYLE, UIStyle, valid_style
from singbox_rules.tui.sections import UISection
from singbox_rules.tui.tables import BuildTable, MetadataTable, ValidationTable


class RulesConsoleUI:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_build_report(self, report: BuildReport, report_path: Path) -> None:
        self.console.print(
            UISection.wrap(
                "build report",
                UISection.counts(report.summary()),
                style=BuildTable.border_style(report),
                subtitle=str(report_path),
            )
        )
        if report.results:
            self.console.print(
                UISection.wrap(
                    "rule sets",
                    BuildTable.results_table(report.results),
                    style=UIStyle.CYAN.value,
                )
            )
        if report.failed:
            self.console.print(
                UISection.bullets(
                    "failed",
                    [f"{item.config.source}: {item.reason}" for item in report.failed],
                    style=UIStyle.RED.value,
                )
            )

    def render_build_result(self, result: BuildResult) -> None:
        style = BUILD_STATUS_STYLE.get(result.status, UIStyle.WHITE.value)
        lines = [
            f"{result.config.type} from {result.config.source}",
            f"status: [{style}]{result.status.value}[/{style}]",
        ]
        if result.artifact:
            lines.append(f"artifact: {result.artifact} ({len(result.rules)} rules)")
        if result.reason:
            lines.append(f"reason: {escape(result.reason)}")
        self.console.print(UISection.note("single build", "\n".join(lines), style=style))

    def render_clean(self, dist_dir: Path, removed: list[Path]) -> None:
        self.console.print(
            UISection.note(
                "clean",
                f"Removed {len(removed)} file(s) from {dist_dir}",
                style=UIStyle.GREEN.value,
            )
        )

    def render_validation_report(self, report: ValidationReport, report_path: Path) -> None:
        self.console.print(
            UISection.wrap(
                "validation report",
                UISection.counts(report.summary()),
                style=valid_style(report.is_valid()),
                subtitle=str(report_path),
            )
        )
        if report.sources:
            self.console.print(
                UISection.wrap(
                    "sources",
                    ValidationTable.sources_table(report.sources),
                    style=UIStyle.CYAN.value,
                )
            )
        if report.templates:
            self.console.print(
                UISection.wrap(
                    "templates",
                    ValidationTable.templates_table(report.templates),
                    style=UIStyle.MAGENTA.value,
                )
            )
        self._render_messages(report.errors(), report.warnings())

    def render_source_result(self, result: SourceValidationResult) -> None:
        self.console.print(
            UISection.wrap(
                f"source {result.file}",
                ValidationTable.sources_table([result]),
                style=valid_style(result.valid),
            )
        )
        self._render_messages(result.errors, result.warnings)

    def render_template_result(self, result: TemplateValidationResult) -> None:
        self.console.print(
            UISection.wrap(
                f"template {result.file}",
                ValidationTable.templates_table([result]),
                style=valid_style(result.valid),
            )
        )
        self._render_messages(result.errors, result.warnings)

    def render_metadata(self, metadata: dict[str, Any], written: list[Path]) -> None:
        repository = metadata["repository"]
        self.console.print(
            UISection.wrap(
                "metadata",
                UISection.counts(
                    {
                        **metadata["rules"]["summary"],
                        "branch": repository["branch"] or "-",
                        "commit": (repository["commit"] or "-")[:12],
                        "dirty": repository["isDirty"],
                    }
                ),
                style=UIStyle.BLUE.value,
            )
        )
        self.console.print(
            UISection.wrap(
                "built files",
                MetadataTable.built_table(metadata["rules"]["built"]),
                style=UIStyle.CYAN.value,
            )
        )
        if written:
            self.console.print(
                UISection.bullets(
                    "written", [str(path) for path in written], style=UIStyle.DIM.value
                )
            )

    def _render_messages(self, errors: list[str], warnings: list[str]) -> None:
        if errors:
            self.console.print(UISection.bullets("errors", errors, style=UIStyle.RED.value))
        if warnings:
            self.console.print(
                UISection.bullets("warnings", warnings, style=UIStyle.YELLOW.value)
            )
