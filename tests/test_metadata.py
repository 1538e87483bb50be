import json
from pathlib import Path

import pytest

from singbox_rules.config import PipelineConfig
from singbox_rules.metadata import MetadataGenerator, sha256_hex, simple_hash


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("", "0"),
        ("a", "61"),
        ("ab", "c21"),
        ("hello", "5e918d2"),
        ("polygenelubricants", "80000000"),
    ],
)
def test_simple_hash_known_values(text: str, expected: str) -> None:
    assert simple_hash(text) == expected


def test_simple_hash_is_never_negative() -> None:
    assert not simple_hash("example.com\n" * 50).startswith("-")


def test_sha256_hex() -> None:
    assert sha256_hex(b"") == (
        "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    )


@pytest.fixture
def generator(project_root: Path, write_source, fake_inspector) -> MetadataGenerator:
    write_source("direct-domains.txt", "example.com\nexample.com\nbad_domain!\n")
    write_source("direct-ips.txt", "10.0.0.0/8\n")
    dist = project_root / "dist"
    dist.mkdir()
    (dist / "direct-domains.srs").write_bytes(b"SRS\x01payload")
    (dist / "direct-ips.json").write_text('{"version": 2}', encoding="utf-8")
    return MetadataGenerator(PipelineConfig.from_root(project_root), inspector=fake_inspector)


def test_source_file_stats(generator: MetadataGenerator) -> None:
    item = generator.config.rule_sources[0]

    stats = generator.source_file_stats(item)

    content = "example.com\nexample.com\nbad_domain!\n"
    assert stats["file"] == "direct-domains.txt"
    assert stats["type"] == "domain-suffix"
    assert stats["output"] == "direct-domains.srs"
    assert stats["exists"] is True
    assert stats["size"] == len(content)
    assert stats["rules"] == {"total": 3, "valid": 2, "invalid": 1, "duplicate": 1}
    assert stats["checksum"] == simple_hash(content)
    assert stats["sha256"] == sha256_hex(content.encode("utf-8"))
    assert stats["lastModified"].endswith("Z")


def test_source_file_stats_missing(generator: MetadataGenerator) -> None:
    stats = generator.source_file_stats(generator.config.rule_sources[2])

    assert stats["exists"] is False
    assert stats["size"] == 0
    assert stats["checksum"] is None
    assert stats["rules"]["total"] == 0


def test_built_file_stats_artifact_kinds(generator: MetadataGenerator) -> None:
    binary, fallback, missing = (
        generator.built_file_stats(item) for item in generator.config.rule_sources[:3]
    )

    assert binary["exists"] is True
    assert binary["artifact"] == "binary"
    assert binary["size"] == len(b"SRS\x01payload")
    assert binary["sha256"] == sha256_hex(b"SRS\x01payload")

    assert fallback["exists"] is False
    assert fallback["artifact"] == "json"
    assert fallback["checksum"] == simple_hash('{"version": 2}')

    assert missing["exists"] is False
    assert missing["artifact"] is None
    assert missing["lastModified"] is None


def test_generate_metadata_document(generator: MetadataGenerator) -> None:
    metadata = generator.generate_metadata()

    assert metadata["version"] == "1.0.0"
    assert metadata["format"] == {"version": 1, "specification": "sing-box-rule-set"}
    assert metadata["repository"] == {
        "url": "https://example.com/rules.git",
        "branch": "main",
        "commit": "0123456789abcdef0123456789abcdef01234567",
        "commitTime": "2026-10-01T12:00:00+00:00",
        "isDirty": False,
    }
    assert len(metadata["rules"]["source"]) == 7
    assert len(metadata["rules"]["built"]) == 7
    assert metadata["rules"]["summary"] == {
        "totalSourceFiles": 2,
        "validSourceFiles": 2,
        "totalRules": 4,
        "validRules": 3,
        "builtFiles": 1,
    }


def test_version_and_manifest_documents(generator: MetadataGenerator) -> None:
    metadata = generator.generate_metadata()

    version = generator.version_document(metadata)
    manifest = generator.manifest_document(metadata)

    assert version == {
        "version": "1.0.0",
        "buildTime": metadata["generated"],
        "gitCommit": "0123456789abcdef0123456789abcdef01234567",
        "gitBranch": "main",
        "rulesSummary": metadata["rules"]["summary"],
    }
    assert manifest["format"] == "sing-box-rule-set-manifest"
    assert manifest["version"] == "1.0"
    first = manifest["rules"][0]
    assert first["name"] == "direct-domains"
    assert first["file"] == "direct-domains.srs"
    assert first["description"] == "Direct connection domain rules"
    assert first["rules"]["valid"] == 2


def test_generate_all_writes_three_documents(generator: MetadataGenerator) -> None:
    metadata = generator.generate_all()

    dist = generator.config.dist_dir
    saved = json.loads((dist / "metadata.json").read_text(encoding="utf-8"))
    assert saved == metadata
    assert json.loads((dist / "version.json").read_text(encoding="utf-8"))["gitBranch"] == "main"
    assert len(json.loads((dist / "manifest.json").read_text(encoding="utf-8"))["rules"]) == 7


def test_generate_without_git_still_writes(project_root: Path, bare_inspector) -> None:
    generator = MetadataGenerator(
        PipelineConfig.from_root(project_root), inspector=bare_inspector
    )

    metadata = generator.generate_all()

    assert metadata["repository"]["commit"] is None
    assert metadata["rules"]["summary"]["builtFiles"] == 0
    assert (project_root / "dist" / "version.json").exists()
