import re

from ..gherkin.models import ValidationResult
from .templates import SPRING_TEST_ANNOTATIONS

_PACKAGE_DECLARATION = re.compile(r"^\s*package\s+[\w.]+\s*;", re.MULTILINE)
_TEST_ANNOTATION = re.compile(r"@(?:Test|ParameterizedTest)\b")


def validate_generated(source: str) -> ValidationResult:
    """
    Shallow sanity checks on generated test source.

    This is not a Java parser: it looks for a package declaration, at least
    one test method and balanced brace characters.
    """
    result = ValidationResult()

    if not _PACKAGE_DECLARATION.search(source):
        result.add_error("MISSING_PACKAGE", "Generated code must have a package declaration")

    if not any(annotation in source for annotation in SPRING_TEST_ANNOTATIONS):
        result.add_warning("MISSING_SPRING_ANNOTATIONS", "Consider adding Spring Boot test annotations")

    if not _TEST_ANNOTATION.search(source):
        result.add_error("NO_TEST_METHODS", "Generated code must have test methods")

    opened, closed = source.count("{"), source.count("}")
    if opened != closed:
        result.add_error(
            "UNBALANCED_BRACES",
            f"Unbalanced braces in generated code: {opened} opening, {closed} closing",
        )

    return result
