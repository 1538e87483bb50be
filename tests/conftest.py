import sys
import json
from pathlib import Path
from typing import Any

from click.testing import CliRunner
import pytest


def _ensure_repo_on_path() -> None:
    repo_root = Path(__file__).resolve().parent.parent
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_ensure_repo_on_path()

from singbox_rules.compiler import IRuleCompiler  # noqa: E402
from singbox_rules.config import PipelineConfig  # noqa: E402
from singbox_rules.git_info import IRepositoryInspector  # noqa: E402
from singbox_rules.models import CompileResult, GitInfo  # noqa: E402


TEMPLATE_KEYS = {
    "domain-suffix": "domain_suffix",
    "ip-cidr": "ip_cidr",
    "process-name": "process_name",
}


class FakeCompiler(IRuleCompiler):
    def __init__(self, ok: bool = True, reason: str = "sing-box exited with 1") -> None:
        self.ok = ok
        self.reason = reason
        self.calls: list[tuple[dict[str, Any], Path]] = []

    def compile(self, document: dict[str, Any], output_path: Path) -> CompileResult:
        self.calls.append((document, output_path))
        if not self.ok:
            return CompileResult(ok=False, reason=self.reason)
        output_path.write_bytes(b"SRS\x01" + json.dumps(document).encode("utf-8"))
        return CompileResult(ok=True)


class FakeInspector(IRepositoryInspector):
    def __init__(self, info: GitInfo | None = None) -> None:
        self.info = info or GitInfo()

    def inspect(self) -> GitInfo:
        return self.info


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch) -> None:
    for name in ("SINGBOX_RULES_ROOT", "SINGBOX_BIN", "SINGBOX_COMPILE_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def write_json():
    def _write(path: Path, payload: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload), encoding="utf-8")

    return _write


@pytest.fixture
def project_root(tmp_path: Path, write_json) -> Path:
    root = tmp_path / "rules-repo"
    (root / "sources").mkdir(parents=True)
    for rule_type, key in TEMPLATE_KEYS.items():
        write_json(
            root / "templates" / f"{rule_type}.json",
            {
                "version": 1,
                "type": key,
                "rules": {key: []},
                "description": f"{rule_type} rule set",
            },
        )
    return root


@pytest.fixture
def write_source(project_root: Path):
    def _write(name: str, content: str) -> Path:
        path = project_root / "sources" / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def pipeline_config(project_root: Path) -> PipelineConfig:
    return PipelineConfig.from_root(project_root)


@pytest.fixture
def fake_compiler() -> FakeCompiler:
    return FakeCompiler()


@pytest.fixture
def failing_compiler() -> FakeCompiler:
    return FakeCompiler(ok=False)


@pytest.fixture
def fake_inspector() -> FakeInspector:
    return FakeInspector(
        GitInfo(
            branch="main",
            commit="0123456789abcdef0123456789abcdef01234567",
            commit_time="2026-10-01T12:00:00+00:00",
            remote_url="https://example.com/rules.git",
            is_dirty=False,
        )
    )


@pytest.fixture
def bare_inspector() -> FakeInspector:
    return FakeInspector()


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()
