import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..core.exceptions import InvalidConfig

PACKAGE_PATTERN = re.compile(r"^[a-z][a-z0-9_]*(\.[a-z][a-z0-9_]*)*$")
CLASS_NAME_PATTERN = re.compile(r"^[A-Z][A-Za-z0-9]*$")

DEFAULT_PACKAGE = "com.example.test"

LIST_FIELDS = ("spring_boot_annotations", "custom_imports")

# camelCase keys accepted from callers that speak the desktop shell's dialect
_KEY_ALIASES = {
    "packageName": "package_name",
    "className": "class_name",
    "springBootAnnotations": "spring_boot_annotations",
    "customImports": "custom_imports",
}


@dataclass
class GenerationConfig:
    """Settings for one code generation call"""
    package_name: str = DEFAULT_PACKAGE
    class_name: str = ""
    spring_boot_annotations: List[str] = field(default_factory=list)
    custom_imports: List[str] = field(default_factory=list)
    template: Optional[str] = None

    def __post_init__(self):
        for name in LIST_FIELDS:
            setattr(self, name, _string_list(name, getattr(self, name)))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GenerationConfig":
        values = {}
        for key, value in (data or {}).items():
            key = _KEY_ALIASES.get(key, key)
            if key in cls.__dataclass_fields__:
                values[key] = value
        return cls(**values)

    def validate(self, known_templates=()) -> None:
        """
        Check identifier formats before any text is emitted.

        Raises:
            InvalidConfig: On a malformed package or class name, or an unknown template
        """
        if not PACKAGE_PATTERN.match(self.package_name or ""):
            raise InvalidConfig(
                f"Invalid package name '{self.package_name}': "
                "expected dotted lowercase identifiers such as com.example.test"
            )

        if self.class_name and not CLASS_NAME_PATTERN.match(self.class_name):
            raise InvalidConfig(
                f"Invalid class name '{self.class_name}': expected a PascalCase identifier"
            )

        if self.template and known_templates and self.template not in known_templates:
            raise InvalidConfig(
                f"Unknown template '{self.template}'. Available: {', '.join(sorted(known_templates))}"
            )


def _string_list(name: str, value: Any) -> List[str]:
    """Accept null, a single string or a sequence of strings for a list setting"""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value):
        return list(value)
    raise InvalidConfig(f"Invalid {name}: expected a list of strings, got {value!r}")
