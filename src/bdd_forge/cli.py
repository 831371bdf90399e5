import json
import logging
from pathlib import Path

import click
import yaml

from .codegen import TemplateEngine
from .core import BDDForgeError, ConfigManager, MalformedDocument
from .executor import BuildConfig, EventType, ExecutionStatus
from .gherkin import FeatureValidator, GherkinFormatter, GherkinParser, validate_syntax
from . import get_available_modules, load_module, __version__


def _read_feature(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


def _write_or_echo(text: str, output) -> None:
    if output:
        Path(output).write_text(text, encoding="utf-8")
        click.echo(f"✅ Saved to: {output}")
    else:
        click.echo(text, nl=not text.endswith("\n"))


def _echo_issues(result) -> None:
    for issue in result.errors:
        where = f" (line {issue.line})" if issue.line else ""
        click.echo(f"❌ {issue.code}: {issue.message}{where}", err=True)
    for issue in result.warnings:
        where = f" (line {issue.line})" if issue.line else ""
        click.echo(f"⚠️  {issue.code}: {issue.message}{where}", err=True)


def _parse_env(ctx, param, values):
    env = {}
    for value in values:
        key, separator, content = value.partition("=")
        if not separator or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got '{value}'")
        env[key] = content
    return env


@click.group()
@click.option('--config', '-c', type=click.Path(), help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_context
def cli(ctx, config, verbose):
    """BDD Forge - Feature files to JUnit tests"""
    config_path = Path(config) if config else None
    try:
        manager = ConfigManager(config_path)
    except BDDForgeError as e:
        click.echo(f"❌ Error: {e}", err=True)
        ctx.exit(1)

    # Setup logging
    log_level = str(manager.get("general.log_level", "INFO")).upper()
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    ctx.obj = manager


@cli.command()
def version():
    """Show version information"""
    click.echo(f"BDD Forge v{__version__}")
    click.echo(f"Available modules: {', '.join(get_available_modules())}")
    click.echo(f"Annotation templates: {', '.join(TemplateEngine.available_templates())}")


@cli.command()
@click.argument('feature_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--format', '-f', 'output_format', type=click.Choice(['json', 'yaml']),
              default='json', help='Output format')
@click.pass_context
def parse(ctx, feature_file, output_format):
    """Parse a feature file and print its structure"""
    try:
        document = GherkinParser().parse(_read_feature(feature_file))
    except MalformedDocument as e:
        click.echo(f"❌ Error: {e}", err=True)
        ctx.exit(1)

    data = document.to_dict()
    if output_format == 'json':
        click.echo(json.dumps(data, indent=2))
    else:
        click.echo(yaml.safe_dump(data, default_flow_style=False, sort_keys=False), nl=False)


@cli.command()
@click.argument('feature_file', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def validate(ctx, feature_file):
    """Validate a feature file"""
    click.echo(f"🔍 Validating: {feature_file}")
    text = _read_feature(feature_file)

    result = validate_syntax(text)
    try:
        document = GherkinParser().parse(text)
        result = result.merge(FeatureValidator().validate(document.feature))
    except MalformedDocument as e:
        if result.valid:
            result.add_error("MALFORMED_DOCUMENT", str(e))

    _echo_issues(result)
    if not result.valid:
        click.echo(f"❌ {len(result.errors)} error(s), {len(result.warnings)} warning(s)")
        ctx.exit(1)

    click.echo(f"✅ Feature file is valid ({len(result.warnings)} warning(s))")


@cli.command(name='format')
@click.argument('feature_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', type=click.Path(), help='Output file path')
@click.pass_context
def format_feature(ctx, feature_file, output):
    """Rewrite a feature file in canonical layout"""
    try:
        document = GherkinParser().parse(_read_feature(feature_file))
    except MalformedDocument as e:
        click.echo(f"❌ Error: {e}", err=True)
        ctx.exit(1)

    _write_or_echo(GherkinFormatter().format(document), output)


@cli.command()
@click.argument('feature_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--package', '-p', 'package_name', help='Java package of the generated class')
@click.option('--class-name', help='Generated class name')
@click.option('--annotation', '-a', 'annotations', multiple=True, help='Class annotation (repeatable)')
@click.option('--import', '-i', 'imports', multiple=True, help='Extra import line (repeatable)')
@click.option('--template', '-t', help='Annotation preset (integration, web, data)')
@click.option('--mode', '-m', type=click.Choice(['inline', 'steps']), default='inline',
              help='JUnit test class or Cucumber step definitions')
@click.option('--output', '-o', type=click.Path(), help='Output file path')
@click.pass_context
def generate(ctx, feature_file, package_name, class_name, annotations, imports, template, mode, output):
    """Generate Java test source from a feature file"""
    generation_config = {}
    if package_name:
        generation_config["package_name"] = package_name
    if class_name:
        generation_config["class_name"] = class_name
    if annotations:
        generation_config["spring_boot_annotations"] = list(annotations)
    if imports:
        generation_config["custom_imports"] = [
            line if line.startswith("import ") else f"import {line.rstrip(';')};" for line in imports
        ]
    if template:
        generation_config["template"] = template

    try:
        generator = load_module('generator', ctx.obj.get_module_config('generator'))
    except BDDForgeError as e:
        click.echo(f"❌ Error: {e}", err=True)
        ctx.exit(1)

    result = generator.execute({
        "feature": _read_feature(feature_file),
        "config": generation_config,
        "mode": mode,
    })
    if not result.success:
        click.echo(f"❌ Error: {result.error}", err=True)
        ctx.exit(1)

    for warning in result.metadata["validation"]["warnings"]:
        click.echo(f"⚠️  {warning['code']}: {warning['message']}", err=True)
    _write_or_echo(result.data, output)


@cli.command()
@click.option('--build-tool', '-b', type=click.Choice(['maven', 'gradle']), required=True,
              help='Build tool used to run the tests')
@click.option('--build-file', '-f', type=click.Path(), required=True, help='pom.xml or build.gradle')
@click.option('--spec', 'specification_path', default='', help='Feature file the tests came from')
@click.option('--profile', 'profiles', multiple=True, help='Spring profile (repeatable)')
@click.option('--jvm-arg', 'jvm_args', multiple=True, help='JVM argument (repeatable)')
@click.option('--env', 'environment', multiple=True, callback=_parse_env,
              help='Environment variable as KEY=VALUE (repeatable)')
@click.option('--classpath', multiple=True, help='Classpath entry (repeatable)')
@click.option('--timeout', type=float, help='Cancel the run after this many seconds')
@click.option('--show-output', is_flag=True, help='Echo build tool output')
@click.pass_context
def run(ctx, build_tool, build_file, specification_path, profiles, jvm_args, environment,
        classpath, timeout, show_output):
    """
    Run tests through Maven or Gradle

    Examples:
        bdd-forge run -b maven -f pom.xml
        bdd-forge run -b gradle -f build.gradle --profile test --timeout 600
    """
    orchestrator = load_module('executor', ctx.obj.get_module_config('executor'))

    def on_progress(event):
        current = event.data.get("current_test") or ""
        click.echo(f"⏳ {event.data['progress']:.0f}% {current}".rstrip())

    def on_output(event):
        click.echo(event.data["output"], nl=False, err=event.data["stream"] == "stderr")

    orchestrator.subscribe(on_progress, EventType.PROGRESS)
    if show_output:
        orchestrator.subscribe(on_output, EventType.OUTPUT)

    build_config = BuildConfig(
        build_tool=build_tool,
        build_file_path=build_file,
        specification_path=specification_path,
        classpath=list(classpath),
        spring_profiles=list(profiles),
        jvm_args=list(jvm_args),
        environment_vars=environment,
    )

    try:
        execution_id = orchestrator.execute(build_config)
    except BDDForgeError as e:
        click.echo(f"❌ Error: {e}", err=True)
        ctx.exit(1)

    click.echo(f"🚀 Started execution {execution_id}")
    record = orchestrator.wait(execution_id, timeout)
    if not record.status.is_terminal:
        click.echo(f"⏱️  Timed out after {timeout}s, cancelling", err=True)
        orchestrator.cancel(execution_id)
        record = orchestrator.wait(execution_id)

    summary = record.summary
    if summary:
        click.echo("\n📊 Summary:")
        click.echo(f"  - Total:   {summary.total_tests}")
        click.echo(f"  - Passed:  {summary.passed_tests}")
        click.echo(f"  - Failed:  {summary.failed_tests}")
        click.echo(f"  - Skipped: {summary.skipped_tests}")
        click.echo(f"  - Time:    {summary.execution_time:.2f}s")
        for case in summary.test_cases:
            if case.status == "failed":
                click.echo(f"  ❌ {case.class_name}.{case.name}: {case.error_message or ''}")

    click.echo(f"{record.status.value.upper()}: {record.message or record.status_message}")

    if record.status is not ExecutionStatus.COMPLETED or (summary and summary.failed_tests):
        ctx.exit(1)


def main():
    cli()


if __name__ == '__main__':
    main()
