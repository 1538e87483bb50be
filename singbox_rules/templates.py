"""Repository for rule-set JSON templates."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

from singbox_rules.config import format_schema_error
from singbox_rules.constants import EXPECTED_TEMPLATE_VERSION
from singbox_rules.errors import (
    InvalidJsonFormatError,
    InvalidTemplateSchemaError,
    TemplateNotFoundError,
)
from singbox_rules.models import RuleTemplate
from singbox_rules.utils import read_json_safe

logger = logging.getLogger(__name__)

TEMPLATE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["version", "rules", "description", "type"],
    "properties": {
        "type": {"type": "string", "minLength": 1},
        "rules": {"type": "object"},
    },
}


def check_template(payload: Any) -> tuple[list[str], list[str]]:
    """Return (errors, warnings) for a decoded template payload."""
    validator = Draft202012Validator(TEMPLATE_SCHEMA)
    errors = [format_schema_error(error) for error in validator.iter_errors(payload)]
    warnings: list[str] = []
    if isinstance(payload, dict):
        version = payload.get("version")
        if version != EXPECTED_TEMPLATE_VERSION or isinstance(version, bool):
            warnings.append(
                f"Unexpected version: {version} (expected: {EXPECTED_TEMPLATE_VERSION})"
            )
    return errors, warnings


class TemplateRepository:
    def __init__(self, root: Path) -> None:
        self._root = root

    def path_for(self, name: str) -> Path:
        return self._root / name

    def candidates(self, output: str, rule_type: str) -> list[Path]:
        return [
            self._root / f"{Path(output).stem}.json",
            self._root / f"{rule_type}.json",
        ]

    def resolve(self, output: str, rule_type: str) -> Path:
        candidates = self.candidates(output, rule_type)
        for candidate in candidates:
            if candidate.exists():
                return candidate
        raise TemplateNotFoundError(candidates[-1])

    def load_payload(self, path: Path) -> Any:
        if not path.exists():
            raise TemplateNotFoundError(path)
        payload, error = read_json_safe(path)
        if error is not None:
            raise InvalidJsonFormatError(path, error)
        return payload

    def load(self, path: Path) -> RuleTemplate:
        payload = self.load_payload(path)
        errors, _ = check_template(payload)
        if errors:
            raise InvalidTemplateSchemaError(path, errors[0])
        return RuleTemplate(
            path=path,
            version=payload["version"],
            type=payload["type"],
            description=str(payload["description"]),
            rules=payload["rules"],
        )

    def load_for(self, output: str, rule_type: str) -> RuleTemplate:
        template = self.load(self.resolve(output, rule_type))
        logger.info("Using template: %s", template.path)
        return template
