from .generator import CodeGenerator
from .config import GenerationConfig
from .templates import TemplateEngine
from .validator import validate_generated

__all__ = [
    "CodeGenerator",
    "GenerationConfig",
    "TemplateEngine",
    "validate_generated",
]
