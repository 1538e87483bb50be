"""Metadata, version and manifest documents for built rule sets."""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Any, Optional

from singbox_rules.compiler import fallback_path
from singbox_rules.config import PipelineConfig
from singbox_rules.constants import (
    EXPECTED_TEMPLATE_VERSION,
    MANIFEST_FILENAME,
    MANIFEST_FORMAT,
    MANIFEST_VERSION,
    METADATA_FILENAME,
    METADATA_VERSION,
    SPECIFICATION_NAME,
    VERSION_FILENAME,
)
from singbox_rules.git_info import GitRepositoryInspector, IRepositoryInspector
from singbox_rules.models import ArtifactKind, RuleSourceConfig
from singbox_rules.rules import parse_text_file, validate_rule_set
from singbox_rules.utils import mtime_iso, now_iso, write_json

logger = logging.getLogger(__name__)


def simple_hash(text: str) -> str:
    """Legacy 32-bit rolling hash (h * 31 + c over UTF-16 code units).

    Only good for change detection; `sha256_hex` is the integrity digest.
    """
    value = 0
    data = text.encode("utf-16-le", "surrogatepass")
    for index in range(0, len(data), 2):
        code = data[index] | (data[index + 1] << 8)
        value = ((value << 5) - value + code) & 0xFFFFFFFF
    if value & 0x80000000:
        value -= 0x100000000
    return format(abs(value), "x")


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _file_digests(path: Path) -> tuple[str, str]:
    data = path.read_bytes()
    return simple_hash(data.decode("utf-8", errors="replace")), sha256_hex(data)


class MetadataGenerator:
    def __init__(
        self,
        config: PipelineConfig,
        inspector: Optional[IRepositoryInspector] = None,
    ) -> None:
        self.config = config
        self.inspector = inspector or GitRepositoryInspector(config.root)

    def source_file_stats(self, item: RuleSourceConfig) -> dict[str, Any]:
        path = self.config.source_path(item.source)
        stats: dict[str, Any] = {
            "file": item.source,
            "type": item.type,
            "output": item.output,
            "exists": False,
            "size": 0,
            "lastModified": None,
            "rules": {"total": 0, "valid": 0, "invalid": 0, "duplicate": 0},
            "checksum": None,
            "sha256": None,
        }
        if not path.exists():
            return stats

        try:
            stats["exists"] = True
            stats["size"] = path.stat().st_size
            stats["lastModified"] = mtime_iso(path)
            rules = parse_text_file(path)
            validated = validate_rule_set(rules, item.type)
            stats["rules"] = {
                "total": len(rules),
                "valid": len(validated.valid_rules),
                "invalid": validated.invalid_count,
                "duplicate": validated.duplicate_count,
            }
            stats["checksum"], stats["sha256"] = _file_digests(path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Failed to get stats for %s: %s", item.source, exc)
        return stats

    def built_file_stats(self, item: RuleSourceConfig) -> dict[str, Any]:
        binary_path = self.config.dist_path(item.output)
        json_path = fallback_path(binary_path)
        stats: dict[str, Any] = {
            "file": item.output,
            "source": item.source,
            "exists": False,
            "artifact": None,
            "size": 0,
            "lastModified": None,
            "checksum": None,
            "sha256": None,
        }

        if binary_path.exists():
            path, kind = binary_path, ArtifactKind.BINARY
        elif json_path.exists():
            path, kind = json_path, ArtifactKind.JSON
        else:
            return stats

        try:
            stats["exists"] = kind == ArtifactKind.BINARY
            stats["artifact"] = kind.value
            stats["size"] = path.stat().st_size
            stats["lastModified"] = mtime_iso(path)
            stats["checksum"], stats["sha256"] = _file_digests(path)
        except OSError as exc:
            logger.warning("Failed to get stats for %s: %s", path.name, exc)
        return stats

    def generate_metadata(self) -> dict[str, Any]:
        logger.info("Generating metadata")
        git = self.inspector.inspect()

        sources: list[dict[str, Any]] = []
        built: list[dict[str, Any]] = []
        summary = {
            "totalSourceFiles": 0,
            "validSourceFiles": 0,
            "totalRules": 0,
            "validRules": 0,
            "builtFiles": 0,
        }

        for item in self.config.rule_sources:
            source_stats = self.source_file_stats(item)
            sources.append(source_stats)
            if source_stats["exists"]:
                summary["totalSourceFiles"] += 1
                summary["totalRules"] += source_stats["rules"]["total"]
                summary["validRules"] += source_stats["rules"]["valid"]

            built_stats = self.built_file_stats(item)
            built.append(built_stats)
            if built_stats["exists"]:
                summary["builtFiles"] += 1

        summary["validSourceFiles"] = sum(1 for item in sources if item["exists"])

        logger.info(
            "Generated metadata for %d source files (rules: %d, valid: %d, built: %d)",
            summary["totalSourceFiles"],
            summary["totalRules"],
            summary["validRules"],
            summary["builtFiles"],
        )
        return {
            "version": METADATA_VERSION,
            "generated": now_iso(),
            "repository": git.as_dict(),
            "rules": {"source": sources, "built": built, "summary": summary},
            "format": {
                "version": EXPECTED_TEMPLATE_VERSION,
                "specification": SPECIFICATION_NAME,
            },
        }

    @staticmethod
    def version_document(metadata: dict[str, Any]) -> dict[str, Any]:
        return {
            "version": metadata["version"],
            "buildTime": metadata["generated"],
            "gitCommit": metadata["repository"]["commit"],
            "gitBranch": metadata["repository"]["branch"],
            "rulesSummary": metadata["rules"]["summary"],
        }

    def manifest_document(self, metadata: dict[str, Any]) -> dict[str, Any]:
        descriptions = {item.source: item.describe() for item in self.config.rule_sources}
        return {
            "format": MANIFEST_FORMAT,
            "version": MANIFEST_VERSION,
            "generated": metadata["generated"],
            "rules": [
                {
                    "name": Path(source["file"]).stem,
                    "type": source["type"],
                    "file": source["output"],
                    "size": source["size"],
                    "rules": source["rules"],
                    "checksum": source["checksum"],
                    "lastModified": source["lastModified"],
                    "description": descriptions.get(
                        source["file"], f"Rules from {source['file']}"
                    ),
                }
                for source in metadata["rules"]["source"]
            ],
        }

    def _write(self, filename: str, payload: dict[str, Any]) -> Path:
        path = self.config.dist_path(filename)
        write_json(path, payload)
        logger.info("Saved %s", path)
        return path

    def save_metadata(self, metadata: dict[str, Any]) -> Path:
        return self._write(METADATA_FILENAME, metadata)

    def write_version_file(self, metadata: dict[str, Any]) -> Path:
        return self._write(VERSION_FILENAME, self.version_document(metadata))

    def write_manifest(self, metadata: dict[str, Any]) -> Path:
        return self._write(MANIFEST_FILENAME, self.manifest_document(metadata))

    def generate_all(self) -> dict[str, Any]:
        metadata = self.generate_metadata()
        self.save_metadata(metadata)
        self.write_version_file(metadata)
        self.write_manifest(metadata)
        return metadata
