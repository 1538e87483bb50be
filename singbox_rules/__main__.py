import logging
from pathlib import Path
from typing import Any, Dict

import click
from rich.console import Console
from rich.logging import RichHandler

from singbox_rules.builder import RuleSetBuilder
from singbox_rules.config import PipelineConfig
from singbox_rules.constants import COMPILE_TIMEOUT_SECONDS, COMPILER_BIN
from singbox_rules.errors import RulesAppError
from singbox_rules.metadata import MetadataGenerator
from singbox_rules.models import BuildStatus, RuleType
from singbox_rules.tui import RulesConsoleUI
from singbox_rules.validator import RuleValidator


RULE_TYPE_VALUES = [item.value for item in RuleType]


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=Console(stderr=True), show_time=False, show_path=False
            )
        ],
        force=True,
    )


def _config_from_obj(obj: Dict[str, Any]) -> PipelineConfig:
    try:
        return PipelineConfig.from_root(
            obj["root"],
            compiler_bin=obj["compiler"],
            compile_timeout=obj["timeout"],
        )
    except RulesAppError as exc:
        raise click.ClickException(str(exc))


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--root",
    type=click.Path(path_type=Path, file_okay=False),
    envvar="SINGBOX_RULES_ROOT",
    default=".",
    show_default=True,
    help="Project root holding sources/, templates/ and dist/.",
)
@click.option(
    "--compiler",
    envvar="SINGBOX_BIN",
    default=COMPILER_BIN,
    show_default=True,
    help="Rule-set compiler executable.",
)
@click.option(
    "--timeout",
    type=float,
    envvar="SINGBOX_COMPILE_TIMEOUT",
    default=COMPILE_TIMEOUT_SECONDS,
    show_default=True,
    help="Compiler timeout in seconds.",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, root: Path, compiler: str, timeout: float, verbose: bool) -> None:
    """Build sing-box rule sets from plain-text rule lists."""
    configure_logging(verbose)
    ctx.obj = {"root": root, "compiler": compiler, "timeout": timeout}


@cli.group("build", invoke_without_command=True, help="Build rule-set artifacts.")
@click.pass_context
def build(ctx: click.Context) -> None:
    if ctx.invoked_subcommand is None:
        ctx.invoke(build_all)


@build.command("all", help="Build every configured rule set (default).")
@click.option(
    "--strict",
    is_flag=True,
    help="Exit non-zero when any rule set failed or fell back to JSON.",
)
@click.pass_obj
def build_all(obj: Dict[str, Any], strict: bool = False) -> None:
    ui = RulesConsoleUI(Console())
    builder = RuleSetBuilder(_config_from_obj(obj))
    report = builder.build_all()
    ui.render_build_report(report, builder.report_path)
    if strict and not report.is_strict_success():
        raise click.exceptions.Exit(1)


@build.command("clean", help="Delete generated files in the dist directory.")
@click.pass_obj
def build_clean(obj: Dict[str, Any]) -> None:
    ui = RulesConsoleUI(Console())
    builder = RuleSetBuilder(_config_from_obj(obj))
    removed = builder.clean()
    ui.render_clean(builder.config.dist_dir, removed)


@build.command("single", help="Build one rule set from a source file.")
@click.argument("rule_type", metavar="TYPE", type=click.Choice(RULE_TYPE_VALUES))
@click.argument("source")
@click.argument("output")
@click.pass_obj
def build_single(obj: Dict[str, Any], rule_type: str, source: str, output: str) -> None:
    ui = RulesConsoleUI(Console())
    builder = RuleSetBuilder(_config_from_obj(obj))
    result = builder.build_rule(rule_type, source, output)
    ui.render_build_result(result)
    if result.status in (BuildStatus.SKIPPED, BuildStatus.FAILED):
        raise click.exceptions.Exit(1)


@cli.group("validate", invoke_without_command=True, help="Validate sources and templates.")
@click.pass_context
def validate(ctx: click.Context) -> None:
    if ctx.invoked_subcommand is None:
        ctx.invoke(validate_all)


@validate.command("all", help="Validate every source and template (default).")
@click.pass_obj
def validate_all(obj: Dict[str, Any]) -> None:
    ui = RulesConsoleUI(Console())
    validator = RuleValidator(_config_from_obj(obj))
    report = validator.validate_all()
    ui.render_validation_report(report, validator.report_path)
    if not report.is_valid():
        raise click.exceptions.Exit(1)


@validate.command("source", help="Validate one source file as the given rule type.")
@click.argument("source")
@click.argument("rule_type", metavar="TYPE")
@click.pass_obj
def validate_source(obj: Dict[str, Any], source: str, rule_type: str) -> None:
    ui = RulesConsoleUI(Console())
    result = RuleValidator(_config_from_obj(obj)).validate_source(source, rule_type)
    ui.render_source_result(result)
    if not result.valid:
        raise click.exceptions.Exit(1)


@validate.command("template", help="Validate one template file.")
@click.argument("template")
@click.pass_obj
def validate_template(obj: Dict[str, Any], template: str) -> None:
    ui = RulesConsoleUI(Console())
    result = RuleValidator(_config_from_obj(obj)).validate_template(template)
    ui.render_template_result(result)
    if not result.valid:
        raise click.exceptions.Exit(1)


@cli.group("metadata", invoke_without_command=True, help="Generate metadata documents.")
@click.pass_context
def metadata(ctx: click.Context) -> None:
    if ctx.invoked_subcommand is None:
        ctx.invoke(metadata_all)


def _generate(obj: Dict[str, Any], *targets: str) -> None:
    ui = RulesConsoleUI(Console())
    generator = MetadataGenerator(_config_from_obj(obj))
    document = generator.generate_metadata()
    writers = {
        "metadata": generator.save_metadata,
        "version": generator.write_version_file,
        "manifest": generator.write_manifest,
    }
    written = [writers[target](document) for target in targets]
    ui.render_metadata(document, written)


@metadata.command("all", help="Write metadata.json, version.json and manifest.json (default).")
@click.pass_obj
def metadata_all(obj: Dict[str, Any]) -> None:
    _generate(obj, "metadata", "version", "manifest")


@metadata.command("metadata", help="Write metadata.json.")
@click.pass_obj
def metadata_only(obj: Dict[str, Any]) -> None:
    _generate(obj, "metadata")


@metadata.command("version", help="Write version.json.")
@click.pass_obj
def metadata_version(obj: Dict[str, Any]) -> None:
    _generate(obj, "version")


@metadata.command("manifest", help="Write manifest.json.")
@click.pass_obj
def metadata_manifest(obj: Dict[str, Any]) -> None:
    _generate(obj, "manifest")


def main() -> int:
    try:
        result = cli(standalone_mode=False)
    except click.exceptions.Exit as exc:
        code = exc.exit_code
        return code if isinstance(code, int) else 1
    except click.ClickException as exc:
        exc.show()
        return 2
    return result if isinstance(result, int) else 0


if __name__ == "__main__":
    raise SystemExit(main())
