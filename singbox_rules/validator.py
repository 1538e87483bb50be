"""CI validation of rule sources and templates."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from singbox_rules.config import PipelineConfig
from singbox_rules.constants import INVALID_SAMPLE_LIMIT, VALIDATION_REPORT_FILENAME
from singbox_rules.errors import MissingSourceFileError, RulesAppError
from singbox_rules.models import (
    SourceValidationResult,
    TemplateValidationResult,
    ValidationReport,
)
from singbox_rules.rules import count_duplicates, invalid_rules, parse_text_file
from singbox_rules.templates import TemplateRepository, check_template
from singbox_rules.utils import now_iso, write_json

logger = logging.getLogger(__name__)


class RuleValidator:
    def __init__(
        self,
        config: PipelineConfig,
        templates: Optional[TemplateRepository] = None,
    ) -> None:
        self.config = config
        self.templates = templates or TemplateRepository(config.templates_dir)

    @property
    def report_path(self) -> Path:
        return self.config.dist_path(VALIDATION_REPORT_FILENAME)

    def template_files(self) -> list[str]:
        return [f"{rule_type}.json" for rule_type in self.config.rule_types()]

    def validate_source(self, source: str, rule_type: str) -> SourceValidationResult:
        logger.info("Validating: %s (%s)", source, rule_type)
        result = SourceValidationResult(file=source, type=rule_type)

        path = self.config.source_path(source)
        if not path.exists():
            result.errors.append(str(MissingSourceFileError(path)))
            result.valid = False
            return result

        try:
            rules = parse_text_file(path)
        except (OSError, UnicodeDecodeError) as exc:
            result.errors.append(f"Validation failed: {exc}")
            result.valid = False
            return result

        result.total = len(rules)
        if not rules:
            result.warnings.append("No rules found in file")
            return result

        rejected = invalid_rules(rules, rule_type)
        result.invalid_rules = len(rejected)
        result.valid_rules = result.total - result.invalid_rules
        result.duplicate = count_duplicates(rules)

        if rejected:
            result.errors.append(f"Found {len(rejected)} invalid rules")
            result.valid = False
            for rule in rejected[:INVALID_SAMPLE_LIMIT]:
                result.warnings.append(f"Invalid rule: {rule}")
            if len(rejected) > INVALID_SAMPLE_LIMIT:
                result.warnings.append(
                    f"... and {len(rejected) - INVALID_SAMPLE_LIMIT} more invalid rules"
                )

        if result.duplicate:
            result.warnings.append(f"Found {result.duplicate} duplicate rules")

        logger.info(
            "Valid: %d, Invalid: %d, Duplicate: %d",
            result.valid_rules,
            result.invalid_rules,
            result.duplicate,
        )
        return result

    def validate_template(self, template_file: str) -> TemplateValidationResult:
        logger.info("Validating template: %s", template_file)
        result = TemplateValidationResult(file=template_file)

        try:
            payload = self.templates.load_payload(self.templates.path_for(template_file))
        except RulesAppError as exc:
            result.errors.append(str(exc))
            result.valid = False
            return result

        errors, warnings = check_template(payload)
        result.errors.extend(errors)
        result.warnings.extend(warnings)
        if errors:
            result.valid = False
        return result

    def validate_all(self) -> ValidationReport:
        logger.info("Starting validation process")
        sources = [
            self.validate_source(item.source, item.type)
            for item in self.config.rule_sources
        ]
        templates = [self.validate_template(name) for name in self.template_files()]
        report = ValidationReport(sources=sources, templates=templates, timestamp=now_iso())
        write_json(self.report_path, report.as_dict())
        logger.info("Detailed report saved to: %s", self.report_path)
        return report
