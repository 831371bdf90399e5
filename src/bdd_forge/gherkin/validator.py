import logging

from .models import STEP_KEYWORDS, Background, Feature, Scenario, Step, ValidationResult
from .parser import BACKGROUND, EXAMPLES, FEATURE, SCENARIO, SCENARIO_OUTLINE, is_step_line

logger = logging.getLogger(__name__)


def validate_syntax(text: str) -> ValidationResult:
    """
    Check raw feature text for structural defects.

    Runs independently of the parser, so it also reports problems the
    tolerant parser silently steps over. Never raises.

    Args:
        text: Raw feature-file content

    Returns:
        ValidationResult with line-numbered findings
    """
    result = ValidationResult()
    if not isinstance(text, str):
        result.add_error("NO_FEATURE", "No feature found in file")
        return result

    has_feature = False
    in_scenario = False
    in_background = False

    for index, raw in enumerate(text.split("\n")):
        line = raw.strip()
        line_number = index + 1

        if line.startswith(FEATURE):
            if has_feature:
                result.add_error("MULTIPLE_FEATURES", "Multiple features in a single file", line_number)
            has_feature = True
            if line == FEATURE:
                result.add_error("MISSING_FEATURE_NAME", "Feature must have a name", line_number)

        if line.startswith(SCENARIO) or line.startswith(SCENARIO_OUTLINE):
            in_scenario = True
            in_background = False
            if line in (SCENARIO, SCENARIO_OUTLINE):
                result.add_error("MISSING_SCENARIO_NAME", "Scenario must have a name", line_number)

        if line.startswith(BACKGROUND):
            if in_scenario:
                result.add_error("BACKGROUND_POSITION", "Background must come before scenarios", line_number)
            in_background = True

        if line.startswith(EXAMPLES):
            if not in_scenario:
                result.add_error(
                    "EXAMPLES_WITHOUT_SCENARIO",
                    "Examples must be within a Scenario Outline",
                    line_number,
                )

        if is_step_line(line) and not in_scenario and not in_background:
            result.add_error("ORPHAN_STEP", "Step found outside of scenario or background", line_number)

    if not has_feature:
        result.add_error("NO_FEATURE", "No feature found in file")

    logger.debug(f"Syntax validation found {len(result.errors)} errors")
    return result


class FeatureValidator:
    """Checks semantic invariants on an already-parsed Feature"""

    def validate(self, feature: Feature) -> ValidationResult:
        result = ValidationResult()

        if not feature.name or not feature.name.strip():
            result.add_error("MISSING_FEATURE_NAME", "Feature must have a name")

        if not feature.scenarios:
            result.add_warning("NO_SCENARIOS", "Feature has no scenarios")
        else:
            for index, scenario in enumerate(feature.scenarios):
                self._validate_scenario(result, scenario, index)

        if feature.background is not None:
            self._validate_background(result, feature.background)

        return result

    def _validate_scenario(self, result: ValidationResult, scenario: Scenario, index: int) -> None:
        position = index + 1

        if not scenario.name or not scenario.name.strip():
            result.add_error("MISSING_SCENARIO_NAME", f"Scenario {position} must have a name", position)

        if not scenario.steps:
            result.add_error("NO_STEPS", f'Scenario "{scenario.name}" has no steps', position)
        else:
            for step_index, step in enumerate(scenario.steps):
                self._validate_step(result, step, step_index, position)

        if scenario.examples is not None:
            self._validate_examples(result, scenario)

    def _validate_step(self, result: ValidationResult, step: Step, step_index: int, position: int) -> None:
        if step.keyword not in STEP_KEYWORDS:
            result.add_error("INVALID_KEYWORD", f'Invalid step keyword "{step.keyword}"', position)

        if not step.text or not step.text.strip():
            result.add_error(
                "MISSING_STEP_TEXT",
                f"Step {step_index + 1} in scenario {position} must have text",
                position,
            )

    def _validate_background(self, result: ValidationResult, background: Background) -> None:
        if not background.steps:
            result.add_warning("EMPTY_BACKGROUND", "Background has no steps")
            return

        if any(step.keyword in ("When", "Then") for step in background.steps):
            result.add_warning("BACKGROUND_INVALID_KEYWORDS", "Background should only contain Given steps")

    def _validate_examples(self, result: ValidationResult, scenario: Scenario) -> None:
        examples = scenario.examples

        if not examples.headers:
            result.add_error("MISSING_EXAMPLE_HEADERS", f'Examples of "{scenario.name}" must have headers')
            return

        if not examples.rows:
            result.add_warning("EMPTY_EXAMPLES", f'Examples of "{scenario.name}" have no data rows')
            return

        header_count = len(examples.headers)
        for index, row in enumerate(examples.rows):
            if len(row) != header_count:
                result.add_error(
                    "EXAMPLE_COLUMN_MISMATCH",
                    f"Example row {index + 1} has {len(row)} columns but expected {header_count}",
                )
