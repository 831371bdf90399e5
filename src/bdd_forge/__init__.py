"""
BDD Forge - Turns Gherkin feature files into JUnit tests and runs them
"""

__version__ = "0.1.0"
__author__ = "BDD Forge Contributors"

# Import core components
from .core import ForgeModule, ModuleInfo, ModuleResult, ConfigManager, ModuleError
from .codegen import CodeGenerator
from .executor import TestOrchestrator

_modules = {
    "generator": CodeGenerator,
    "executor": TestOrchestrator,
}


def get_available_modules():
    """Get list of available modules"""
    return list(_modules.keys())


def load_module(module_name: str, config=None):
    """Instantiate a module by name"""
    if module_name not in _modules:
        raise ModuleError(f"Module '{module_name}' not available")
    return _modules[module_name](config)


__all__ = [
    "ForgeModule",
    "ModuleInfo",
    "ModuleResult",
    "ConfigManager",
    "CodeGenerator",
    "TestOrchestrator",
    "get_available_modules",
    "load_module",
]
