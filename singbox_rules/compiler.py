"""Binary rule-set compilers."""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from singbox_rules.constants import (
    COMPILE_TIMEOUT_SECONDS,
    COMPILER_BIN,
    FALLBACK_SUFFIX,
    RULE_SET_FORMAT_VERSION,
)
from singbox_rules.models import CompileResult
from singbox_rules.utils import ensure_dir, write_json

logger = logging.getLogger(__name__)


def build_rule_set_document(rule_key: str, rules: list[str]) -> dict[str, Any]:
    """Source-format rule set with every rule nested under one headless rule."""
    return {
        "version": RULE_SET_FORMAT_VERSION,
        "rules": [{rule_key: list(rules)}],
    }


def fallback_path(output_path: Path) -> Path:
    return output_path.with_suffix(FALLBACK_SUFFIX)


def write_fallback(document: dict[str, Any], output_path: Path) -> Path:
    target = fallback_path(output_path)
    write_json(target, document)
    logger.warning("Built fallback file: %s", target)
    return target


class IRuleCompiler(ABC):
    @abstractmethod
    def compile(self, document: dict[str, Any], output_path: Path) -> CompileResult:
        """Compile a source-format document into a binary rule set at output_path."""


class SingBoxCompiler(IRuleCompiler):
    """Run `sing-box rule-set compile` on a scratch JSON file."""

    def __init__(
        self,
        scratch_dir: Path,
        binary: str = COMPILER_BIN,
        timeout: float = COMPILE_TIMEOUT_SECONDS,
    ) -> None:
        self.scratch_dir = scratch_dir
        self.binary = binary
        self.timeout = timeout

    def command(self, input_path: Path, output_path: Path) -> list[str]:
        return [
            self.binary,
            "rule-set",
            "compile",
            "--output",
            str(output_path),
            str(input_path),
        ]

    def compile(self, document: dict[str, Any], output_path: Path) -> CompileResult:
        ensure_dir(output_path.parent)
        ensure_dir(self.scratch_dir)
        input_path = self.scratch_dir / f"temp_{time.time_ns()}.json"
        output_path.unlink(missing_ok=True)
        try:
            write_json(input_path, document)
            logger.info("Building SRS file: %s", output_path)
            try:
                completed = subprocess.run(
                    self.command(input_path, output_path),
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                )
            except subprocess.TimeoutExpired:
                return CompileResult(ok=False, reason=f"timeout>{self.timeout}s")
            except OSError as exc:
                return CompileResult(ok=False, reason=f"cannot run {self.binary}: {exc}")

            if completed.returncode != 0:
                detail = (completed.stderr or completed.stdout or "").strip()[:200]
                return CompileResult(
                    ok=False,
                    reason=f"exit code {completed.returncode}: {detail}".rstrip(": "),
                )
            if not output_path.exists() or output_path.stat().st_size == 0:
                return CompileResult(ok=False, reason="compiler produced no output")
            return CompileResult(ok=True)
        finally:
            self.clean_scratch()

    def clean_scratch(self) -> None:
        if self.scratch_dir.exists():
            shutil.rmtree(self.scratch_dir)
