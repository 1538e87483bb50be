from typing import Final


SOURCES_DIRNAME: Final[str] = "sources"
TEMPLATES_DIRNAME: Final[str] = "templates"
DIST_DIRNAME: Final[str] = "dist"
TEMP_DIRNAME: Final[str] = "temp"
REGISTRY_FILENAME: Final[str] = "rulesets.yaml"

BUILD_REPORT_FILENAME: Final[str] = "build-report.json"
VALIDATION_REPORT_FILENAME: Final[str] = "validation-report.json"
METADATA_FILENAME: Final[str] = "metadata.json"
VERSION_FILENAME: Final[str] = "version.json"
MANIFEST_FILENAME: Final[str] = "manifest.json"

BINARY_SUFFIX: Final[str] = ".srs"
FALLBACK_SUFFIX: Final[str] = ".json"

COMPILER_BIN: Final[str] = "sing-box"
COMPILE_TIMEOUT_SECONDS: Final[int] = 30

# sing-box source format version fed to `rule-set compile`
RULE_SET_FORMAT_VERSION: Final[int] = 2
EXPECTED_TEMPLATE_VERSION: Final[int] = 1

METADATA_VERSION: Final[str] = "1.0.0"
MANIFEST_FORMAT: Final[str] = "sing-box-rule-set-manifest"
MANIFEST_VERSION: Final[str] = "1.0"
SPECIFICATION_NAME: Final[str] = "sing-box-rule-set"

INVALID_SAMPLE_LIMIT: Final[int] = 10
COMMENT_PREFIXES: Final[tuple[str, ...]] = ("#", "//")
