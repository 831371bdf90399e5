from .models import (
    Step,
    Examples,
    Background,
    Scenario,
    Feature,
    ParsedDocument,
    ValidationIssue,
    ValidationResult,
)
from .parser import GherkinParser, parse_feature
from .validator import FeatureValidator, validate_syntax
from .formatter import GherkinFormatter

__all__ = [
    "Step",
    "Examples",
    "Background",
    "Scenario",
    "Feature",
    "ParsedDocument",
    "ValidationIssue",
    "ValidationResult",
    "GherkinParser",
    "parse_feature",
    "FeatureValidator",
    "validate_syntax",
    "GherkinFormatter",
]
