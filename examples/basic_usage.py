"""
Basic usage examples for BDD Forge
"""

import sys
from pathlib import Path

from bdd_forge.codegen import CodeGenerator
from bdd_forge.executor import EventType, TestOrchestrator
from bdd_forge.gherkin import FeatureValidator, GherkinFormatter, GherkinParser, validate_syntax

FEATURE_FILE = Path(__file__).parent / "features" / "login.feature"


def example_parse_and_validate():
    """Parse a feature file and report validation findings"""
    text = FEATURE_FILE.read_text()

    print("Parse and validate")
    print("=" * 50)

    result = validate_syntax(text)
    document = GherkinParser().parse(text)
    result = result.merge(FeatureValidator().validate(document.feature))

    print(f"Feature: {document.feature.name}")
    print(f"Scenarios: {len(document.feature.scenarios)}")
    print(f"Valid: {result.valid}, warnings: {result.warning_codes()}")


def example_format():
    """Print the feature file in canonical layout"""
    document = GherkinParser().parse(FEATURE_FILE.read_text())

    print("\nCanonical layout")
    print("=" * 50)
    print(GherkinFormatter().format(document))


def example_generate():
    """Generate a JUnit test class and Cucumber step definitions"""
    generator = CodeGenerator({"default_package": "com.example.login"})
    text = FEATURE_FILE.read_text()

    print("\nJUnit test class")
    print("=" * 50)
    result = generator.execute({"feature": text, "config": {"template": "web"}})
    print(result.data if result.success else f"Error: {result.error}")

    print("\nStep definitions")
    print("=" * 50)
    result = generator.execute({"feature": text, "mode": "steps"})
    print(result.data if result.success else f"Error: {result.error}")


def example_execute(build_file: str):
    """Run a Maven project's tests and print progress"""
    orchestrator = TestOrchestrator()
    orchestrator.subscribe(
        lambda event: print(f"{event.data['progress']:.0f}% {event.data['current_test']}"),
        EventType.PROGRESS,
    )

    execution_id = orchestrator.execute({
        "buildTool": "maven",
        "buildFilePath": build_file,
        "specificationPath": str(FEATURE_FILE),
        "springProfiles": ["test"],
    })
    record = orchestrator.wait(execution_id, timeout=600)
    if not record.status.is_terminal:
        orchestrator.cancel(execution_id)
        record = orchestrator.wait(execution_id)

    print(f"{record.status.value}: {record.message}")
    if record.summary:
        print(f"{record.summary.passed_tests}/{record.summary.total_tests} passed")


if __name__ == "__main__":
    example_parse_and_validate()
    example_format()
    example_generate()

    # Pass a pom.xml path to run a real Maven build
    if len(sys.argv) > 1:
        example_execute(sys.argv[1])
