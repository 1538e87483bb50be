from typing import Any

from rich.markup import escape
from rich.table import Column, Table

from singbox_rules.models import (
    BuildReport,
    BuildResult,
    SourceValidationResult,
    TemplateValidationResult,
)
from singbox_rules.tui.enums import BUILD_STATUS_STYLE, UIStyle, valid_style


class BuildTable:
    @staticmethod
    def results_table(results: list[BuildResult]) -> Table:
        table = Table(
            Column(header="Type", width=14),
            Column(header="Source", overflow="ellipsis", max_width=32),
            Column(header="Status", width=14),
            Column(header="Artifact", overflow="ellipsis", max_width=32),
            Column(header="Rules", width=7, justify="right"),
            Column(header="Reason", overflow="ellipsis"),
            expand=True,
            header_style="bold",
        )
        for item in results:
            style = BUILD_STATUS_STYLE.get(item.status, UIStyle.WHITE.value)
            table.add_row(
                item.config.type,
                item.config.source,
                f"[{style}]{item.status.value}[/{style}]",
                item.artifact or "",
                str(len(item.rules)) if item.succeeded else "",
                escape(item.reason or ""),
            )
        return table

    @staticmethod
    def border_style(report: BuildReport) -> str:
        if report.failed:
            return UIStyle.RED.value
        if not report.is_strict_success():
            return UIStyle.YELLOW.value
        return UIStyle.GREEN.value


class ValidationTable:
    @staticmethod
    def sources_table(items: list[SourceValidationResult]) -> Table:
        table = Table(
            Column(header="Source", overflow="ellipsis", max_width=32),
            Column(header="Type", width=14),
            Column(header="Valid", width=7),
            Column(header="Total", width=7, justify="right"),
            Column(header="Invalid", width=8, justify="right"),
            Column(header="Dup", width=6, justify="right"),
            expand=True,
            header_style="bold",
        )
        for item in items:
            style = valid_style(item.valid)
            table.add_row(
                item.file,
                item.type,
                f"[{style}]{'yes' if item.valid else 'no'}[/{style}]",
                str(item.total),
                str(item.invalid_rules),
                str(item.duplicate),
            )
        return table

    @staticmethod
    def templates_table(items: list[TemplateValidationResult]) -> Table:
        table = Table(
            Column(header="Template", overflow="ellipsis", max_width=32),
            Column(header="Valid", width=7),
            Column(header="Errors", width=8, justify="right"),
            Column(header="Warnings", width=9, justify="right"),
            expand=True,
            header_style="bold",
        )
        for item in items:
            style = valid_style(item.valid)
            table.add_row(
                item.file,
                f"[{style}]{'yes' if item.valid else 'no'}[/{style}]",
                str(len(item.errors)),
                str(len(item.warnings)),
            )
        return table


class MetadataTable:
    @staticmethod
    def built_table(built: list[dict[str, Any]]) -> Table:
        table = Table(
            Column(header="Output", overflow="ellipsis", max_width=32),
            Column(header="Artifact", width=9),
            Column(header="Size", width=10, justify="right"),
            Column(header="Checksum", width=10),
            expand=True,
            header_style="bold",
        )
        for item in built:
            artifact = item.get("artifact") or "missing"
            style = (
                UIStyle.GREEN.value
                if artifact == "binary"
                else UIStyle.YELLOW.value
                if artifact == "json"
                else UIStyle.RED.value
            )
            table.add_row(
                item["file"],
                f"[{style}]{artifact}[/{style}]",
                str(item.get("size", 0)),
                item.get("checksum") or "",
            )
        return table
