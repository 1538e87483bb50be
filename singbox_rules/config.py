"""Rule-set registry and pipeline configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator

from singbox_rules.constants import (
    COMPILE_TIMEOUT_SECONDS,
    COMPILER_BIN,
    DIST_DIRNAME,
    REGISTRY_FILENAME,
    SOURCES_DIRNAME,
    TEMP_DIRNAME,
    TEMPLATES_DIRNAME,
)
from singbox_rules.errors import InvalidRegistryError
from singbox_rules.models import RuleSourceConfig, RuleType


DEFAULT_RULE_SOURCES: tuple[RuleSourceConfig, ...] = (
    RuleSourceConfig(
        type=RuleType.DOMAIN_SUFFIX.value,
        source="direct-domains.txt",
        output="direct-domains.srs",
        description="Direct connection domain rules",
    ),
    RuleSourceConfig(
        type=RuleType.IP_CIDR.value,
        source="direct-ips.txt",
        output="direct-ips.srs",
        description="Direct connection IP CIDR rules",
    ),
    RuleSourceConfig(
        type=RuleType.PROCESS_NAME.value,
        source="direct-process.txt",
        output="direct-process.srs",
        description="Direct connection process name rules",
    ),
    RuleSourceConfig(
        type=RuleType.DOMAIN_SUFFIX.value,
        source="proxy-domains.txt",
        output="proxy-domains.srs",
        description="Proxy connection domain rules",
    ),
    RuleSourceConfig(
        type=RuleType.DOMAIN_SUFFIX.value,
        source="proxy-domains-private.txt",
        output="proxy-domains-private.srs",
        description="Private proxy domain rules",
    ),
    RuleSourceConfig(
        type=RuleType.IP_CIDR.value,
        source="proxy-ips.txt",
        output="proxy-ips.srs",
        description="Proxy connection IP CIDR rules",
    ),
    RuleSourceConfig(
        type=RuleType.PROCESS_NAME.value,
        source="proxy-process.txt",
        output="proxy-process.srs",
        description="Proxy connection process name rules",
    ),
)

REGISTRY_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["rulesets"],
    "properties": {
        "rulesets": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "required": ["type", "source", "output"],
                "properties": {
                    "type": {"enum": [item.value for item in RuleType]},
                    "source": {"type": "string", "minLength": 1},
                    "output": {"type": "string", "minLength": 1},
                    "description": {"type": "string"},
                },
                "additionalProperties": False,
            },
        }
    },
}


def format_schema_error(error: Any) -> str:
    path = ".".join([str(part) for part in error.path])
    return f"{error.message} at {path}" if path else str(error.message)


def load_registry(path: Path) -> tuple[RuleSourceConfig, ...]:
    """Load rule-set configs from a YAML registry, or the built-in list if absent."""
    if not path.exists():
        return DEFAULT_RULE_SOURCES

    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise InvalidRegistryError(path, str(exc)) from exc

    error = next(iter(Draft202012Validator(REGISTRY_SCHEMA).iter_errors(payload)), None)
    if error is not None:
        raise InvalidRegistryError(path, format_schema_error(error))

    return tuple(
        RuleSourceConfig(
            type=item["type"],
            source=item["source"],
            output=item["output"],
            description=item.get("description", ""),
        )
        for item in payload["rulesets"]
    )


@dataclass(frozen=True)
class PipelineConfig:
    root: Path
    sources_dir: Path
    templates_dir: Path
    dist_dir: Path
    temp_dir: Path
    compiler_bin: str = COMPILER_BIN
    compile_timeout: float = COMPILE_TIMEOUT_SECONDS
    rule_sources: tuple[RuleSourceConfig, ...] = field(default=DEFAULT_RULE_SOURCES)

    @classmethod
    def from_root(
        cls,
        root: Path,
        *,
        compiler_bin: str = COMPILER_BIN,
        compile_timeout: float = COMPILE_TIMEOUT_SECONDS,
        rule_sources: tuple[RuleSourceConfig, ...] | None = None,
    ) -> "PipelineConfig":
        resolved = root.expanduser().resolve()
        if rule_sources is None:
            rule_sources = load_registry(resolved / REGISTRY_FILENAME)
        return cls(
            root=resolved,
            sources_dir=resolved / SOURCES_DIRNAME,
            templates_dir=resolved / TEMPLATES_DIRNAME,
            dist_dir=resolved / DIST_DIRNAME,
            temp_dir=resolved / TEMP_DIRNAME,
            compiler_bin=compiler_bin,
            compile_timeout=compile_timeout,
            rule_sources=tuple(rule_sources),
        )

    def source_path(self, source: str) -> Path:
        return self.sources_dir / source

    def dist_path(self, name: str) -> Path:
        return self.dist_dir / name

    def rule_types(self) -> list[str]:
        seen: list[str] = []
        for item in self.rule_sources:
            if item.type not in seen:
                seen.append(item.type)
        return seen
