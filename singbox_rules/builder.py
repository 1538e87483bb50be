"""Build binary rule sets from text sources."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from singbox_rules.compiler import (
    IRuleCompiler,
    SingBoxCompiler,
    build_rule_set_document,
    fallback_path,
    write_fallback,
)
from singbox_rules.config import PipelineConfig
from singbox_rules.constants import BUILD_REPORT_FILENAME
from singbox_rules.errors import RulesAppError
from singbox_rules.models import (
    ArtifactKind,
    BuildReport,
    BuildResult,
    BuildStatus,
    RuleSourceConfig,
)
from singbox_rules.rules import filter_valid_rules, get_rule_stats, parse_text_file
from singbox_rules.templates import TemplateRepository
from singbox_rules.utils import ensure_dir, now_iso, write_json

logger = logging.getLogger(__name__)


class RuleSetBuilder:
    def __init__(
        self,
        config: PipelineConfig,
        compiler: Optional[IRuleCompiler] = None,
        templates: Optional[TemplateRepository] = None,
    ) -> None:
        self.config = config
        self.compiler = compiler or SingBoxCompiler(
            scratch_dir=config.temp_dir,
            binary=config.compiler_bin,
            timeout=config.compile_timeout,
        )
        self.templates = templates or TemplateRepository(config.templates_dir)

    @property
    def report_path(self) -> Path:
        return self.config.dist_path(BUILD_REPORT_FILENAME)

    def build_rule(self, rule_type: str, source: str, output: str) -> BuildResult:
        return self.build_config(
            RuleSourceConfig(type=rule_type, source=source, output=output)
        )

    def build_config(self, config: RuleSourceConfig) -> BuildResult:
        logger.info("Building rule: %s from %s", config.type, config.source)
        try:
            return self._build(config)
        except (RulesAppError, OSError, UnicodeDecodeError) as exc:
            logger.error("Failed to build %s from %s: %s", config.type, config.source, exc)
            return BuildResult(config=config, status=BuildStatus.FAILED, reason=str(exc))

    def _build(self, config: RuleSourceConfig) -> BuildResult:
        rules = parse_text_file(self.config.source_path(config.source))
        logger.info("Found %d rules in %s", len(rules), config.source)
        if not rules:
            logger.warning("No rules found in %s, skipping", config.source)
            return BuildResult(
                config=config, status=BuildStatus.SKIPPED, reason="no rules found"
            )

        valid_rules = filter_valid_rules(rules, config.type)
        logger.info(
            "Valid rules: %d, invalid: %d", len(valid_rules), len(rules) - len(valid_rules)
        )
        if not valid_rules:
            logger.warning("No valid rules found in %s, skipping", config.source)
            return BuildResult(
                config=config, status=BuildStatus.SKIPPED, reason="no valid rules"
            )

        stats = get_rule_stats(rules)
        logger.debug(
            "Rule stats: total=%d, empty=%d, duplicate=%d, valid=%d",
            stats.total,
            stats.empty,
            stats.duplicate,
            stats.valid,
        )

        template = self.templates.load_for(config.output, config.type)
        document = build_rule_set_document(template.type, valid_rules)
        metadata = {
            "count": len(valid_rules),
            "built_at": now_iso(),
            "source": config.source,
            "stats": stats.as_dict(),
        }

        output_path = self.config.dist_path(config.output)
        ensure_dir(output_path.parent)
        compiled = self.compiler.compile(document, output_path)
        if compiled.ok:
            stale = fallback_path(output_path)
            if stale != output_path:
                stale.unlink(missing_ok=True)
            logger.info("SRS file built successfully: %s", output_path)
            return BuildResult(
                config=config,
                status=BuildStatus.COMPILED,
                artifact=output_path.name,
                rules=valid_rules,
                metadata={**metadata, "artifact": ArtifactKind.BINARY.value},
            )

        logger.warning("Compile failed for %s: %s", output_path.name, compiled.reason)
        written = write_fallback(document, output_path)
        return BuildResult(
            config=config,
            status=BuildStatus.FALLBACK_JSON,
            reason=compiled.reason,
            artifact=written.name,
            rules=valid_rules,
            metadata={**metadata, "artifact": ArtifactKind.JSON.value},
        )

    def build_all(self) -> BuildReport:
        logger.info("Starting rule building process")
        ensure_dir(self.config.dist_dir)
        results = [self.build_config(item) for item in self.config.rule_sources]
        report = BuildReport(results=results, timestamp=now_iso())
        write_json(self.report_path, report.as_dict())
        logger.info("Report saved to: %s", self.report_path)
        return report

    def clean(self) -> list[Path]:
        """Remove top-level files in the dist directory; subdirectories are kept."""
        dist_dir = self.config.dist_dir
        removed: list[Path] = []
        if not dist_dir.exists():
            return removed
        for child in sorted(dist_dir.iterdir()):
            if child.is_dir() and not child.is_symlink():
                continue
            child.unlink()
            removed.append(child)
        return removed
