from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional


class RuleType(str, Enum):
    DOMAIN_SUFFIX = "domain-suffix"
    IP_CIDR = "ip-cidr"
    PROCESS_NAME = "process-name"


class BuildStatus(str, Enum):
    COMPILED = "compiled"
    FALLBACK_JSON = "fallback_json"
    SKIPPED = "skipped"
    FAILED = "failed"


class ArtifactKind(str, Enum):
    BINARY = "binary"
    JSON = "json"


@dataclass(frozen=True)
class RuleSourceConfig:
    type: str
    source: str
    output: str
    description: str = ""

    def describe(self) -> str:
        return self.description or f"Rules from {self.source}"

    def as_dict(self) -> dict[str, str]:
        return {"type": self.type, "source": self.source, "output": self.output}


@dataclass(frozen=True)
class RuleStats:
    total: int = 0
    empty: int = 0
    duplicate: int = 0
    valid: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "empty": self.empty,
            "duplicate": self.duplicate,
            "valid": self.valid,
        }


@dataclass(frozen=True)
class ValidatedRuleSet:
    type: str
    valid_rules: list[str]
    invalid_count: int
    duplicate_count: int

    @property
    def total(self) -> int:
        return len(self.valid_rules) + self.invalid_count


@dataclass(frozen=True)
class RuleTemplate:
    path: Path
    version: int
    type: str
    description: str
    rules: dict[str, Any]


@dataclass(frozen=True)
class CompileResult:
    ok: bool
    reason: Optional[str] = None


@dataclass
class BuildResult:
    config: RuleSourceConfig
    status: BuildStatus
    reason: Optional[str] = None
    artifact: Optional[str] = None
    rules: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status in (BuildStatus.COMPILED, BuildStatus.FALLBACK_JSON)

    def as_success_entry(self) -> dict[str, Any]:
        return {
            "type": self.config.type,
            "source": self.config.source,
            "output": self.config.output,
            "artifact": self.artifact,
            "status": self.status.value,
            "reason": self.reason,
            "rules": list(self.rules),
            "metadata": self.metadata,
        }

    def as_skipped_entry(self) -> dict[str, Any]:
        return {**self.config.as_dict(), "reason": self.reason}

    def as_failed_entry(self) -> dict[str, Any]:
        return {"config": self.config.as_dict(), "error": self.reason}


@dataclass
class BuildReport:
    results: list[BuildResult]
    timestamp: str

    def by_status(self, *statuses: BuildStatus) -> list[BuildResult]:
        return [item for item in self.results if item.status in statuses]

    @property
    def success(self) -> list[BuildResult]:
        return self.by_status(BuildStatus.COMPILED, BuildStatus.FALLBACK_JSON)

    @property
    def failed(self) -> list[BuildResult]:
        return self.by_status(BuildStatus.FAILED)

    @property
    def skipped(self) -> list[BuildResult]:
        return self.by_status(BuildStatus.SKIPPED)

    def summary(self) -> dict[str, int]:
        return {
            "total_configs": len(self.results),
            "success": len(self.success),
            "compiled": len(self.by_status(BuildStatus.COMPILED)),
            "fallback": len(self.by_status(BuildStatus.FALLBACK_JSON)),
            "failed": len(self.failed),
            "skipped": len(self.skipped),
            "total_rules": sum(len(item.rules) for item in self.success),
        }

    def is_strict_success(self) -> bool:
        return not self.failed and not self.by_status(BuildStatus.FALLBACK_JSON)

    def as_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "summary": self.summary(),
            "files": {
                "success": [item.as_success_entry() for item in self.success],
                "failed": [item.as_failed_entry() for item in self.failed],
                "skipped": [item.as_skipped_entry() for item in self.skipped],
            },
        }


@dataclass
class SourceValidationResult:
    file: str
    type: str
    valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    total: int = 0
    valid_rules: int = 0
    invalid_rules: int = 0
    duplicate: int = 0

    def as_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "type": self.type,
            "valid": self.valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "stats": {
                "total": self.total,
                "valid": self.valid_rules,
                "invalid": self.invalid_rules,
                "duplicate": self.duplicate,
            },
        }


@dataclass
class TemplateValidationResult:
    file: str
    valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "valid": self.valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


@dataclass
class ValidationReport:
    sources: list[SourceValidationResult]
    templates: list[TemplateValidationResult]
    timestamp: str

    @property
    def invalid_files(self) -> int:
        return sum(1 for item in [*self.sources, *self.templates] if not item.valid)

    def is_valid(self) -> bool:
        return self.invalid_files == 0

    def summary(self) -> dict[str, int]:
        valid_sources = [item for item in self.sources if item.valid]
        total_files = len(self.sources) + len(self.templates)
        return {
            "total_files": total_files,
            "valid_files": total_files - self.invalid_files,
            "invalid_files": self.invalid_files,
            "total_rules": sum(item.total for item in valid_sources),
            "valid_rules": sum(item.valid_rules for item in valid_sources),
            "invalid_rules": sum(item.invalid_rules for item in valid_sources),
        }

    def errors(self) -> list[str]:
        return [
            f"{item.file}: {error}"
            for item in [*self.sources, *self.templates]
            for error in item.errors
        ]

    def warnings(self) -> list[str]:
        return [
            f"{item.file}: {warning}"
            for item in [*self.sources, *self.templates]
            for warning in item.warnings
        ]

    def as_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "sources": [item.as_dict() for item in self.sources],
            "templates": [item.as_dict() for item in self.templates],
            "summary": self.summary(),
        }


@dataclass(frozen=True)
class GitInfo:
    branch: Optional[str] = None
    commit: Optional[str] = None
    commit_time: Optional[str] = None
    remote_url: Optional[str] = None
    is_dirty: bool = False

    def as_dict(self) -> dict[str, Any]:
        return {
            "url": self.remote_url,
            "branch": self.branch,
            "commit": self.commit,
            "commitTime": self.commit_time,
            "isDirty": self.is_dirty,
        }
