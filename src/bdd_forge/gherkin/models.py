"""
Document model for parsed feature files.

Everything here is plain data: the parser produces it, the validators and
the code generator consume it. Structures are frozen once built.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

STEP_KEYWORDS = ("Given", "When", "Then", "And", "But")

DataTable = Tuple[Tuple[str, ...], ...]


@dataclass(frozen=True)
class Step:
    """A single Given/When/Then/And/But line with its attached block"""
    keyword: str
    text: str
    data_table: Optional[DataTable] = None
    doc_string: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {"keyword": self.keyword, "text": self.text}
        if self.data_table is not None:
            result["data_table"] = [list(row) for row in self.data_table]
        if self.doc_string is not None:
            result["doc_string"] = self.doc_string
        return result


@dataclass(frozen=True)
class Examples:
    """Header row plus data rows of a Scenario Outline"""
    headers: Tuple[str, ...]
    rows: Tuple[Tuple[str, ...], ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "headers": list(self.headers),
            "rows": [list(row) for row in self.rows],
        }


@dataclass(frozen=True)
class Background:
    steps: Tuple[Step, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"steps": [step.to_dict() for step in self.steps]}


@dataclass(frozen=True)
class Scenario:
    name: str
    steps: Tuple[Step, ...] = ()
    tags: Tuple[str, ...] = ()
    examples: Optional[Examples] = None

    @property
    def is_outline(self) -> bool:
        return self.examples is not None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "name": self.name,
            "tags": list(self.tags),
            "steps": [step.to_dict() for step in self.steps],
        }
        if self.examples is not None:
            result["examples"] = self.examples.to_dict()
        return result


@dataclass(frozen=True)
class Feature:
    name: str
    description: str = ""
    tags: Tuple[str, ...] = ()
    background: Optional[Background] = None
    scenarios: Tuple[Scenario, ...] = ()

    def all_steps(self) -> List[Step]:
        """Background steps followed by every scenario's steps, in file order"""
        steps = list(self.background.steps) if self.background else []
        for scenario in self.scenarios:
            steps.extend(scenario.steps)
        return steps

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "tags": list(self.tags),
            "background": self.background.to_dict() if self.background else None,
            "scenarios": [scenario.to_dict() for scenario in self.scenarios],
        }


@dataclass(frozen=True)
class ParsedDocument:
    """A Feature plus the comment lines found anywhere in the text"""
    feature: Feature
    comments: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "feature": self.feature.to_dict(),
            "comments": list(self.comments),
        }


@dataclass
class ValidationIssue:
    code: str
    message: str
    line: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {"code": self.code, "message": self.message}
        if self.line is not None:
            result["line"] = self.line
        return result


@dataclass
class ValidationResult:
    """Errors and warnings reported by a validator, each with a stable code"""
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def add_error(self, code: str, message: str, line: Optional[int] = None) -> None:
        self.errors.append(ValidationIssue(code, message, line))

    def add_warning(self, code: str, message: str, line: Optional[int] = None) -> None:
        self.warnings.append(ValidationIssue(code, message, line))

    def error_codes(self) -> List[str]:
        return [issue.code for issue in self.errors]

    def warning_codes(self) -> List[str]:
        return [issue.code for issue in self.warnings]

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult(
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [issue.to_dict() for issue in self.errors],
            "warnings": [issue.to_dict() for issue in self.warnings],
        }
