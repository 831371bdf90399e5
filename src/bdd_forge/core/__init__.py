from .base import (
    ForgeModule,
    ModuleStatus,
    ModuleInfo,
    ModuleResult,
    ConfigurableModule,
)
from .config import ConfigManager
from .exceptions import (
    BDDForgeError,
    ModuleError,
    ConfigurationError,
    MalformedDocument,
    EmptyFeatureName,
    GenerationError,
    InvalidConfig,
    ExecutionError,
    UnsupportedBuildTool,
    BuildFileNotFound,
    ProcessSpawnError,
    ExecutionNotFound,
)

__all__ = [
    # Base classes
    "ForgeModule",
    "ModuleStatus",
    "ModuleInfo",
    "ModuleResult",
    "ConfigurableModule",

    # Configuration
    "ConfigManager",

    # Exceptions
    "BDDForgeError",
    "ModuleError",
    "ConfigurationError",
    "MalformedDocument",
    "EmptyFeatureName",
    "GenerationError",
    "InvalidConfig",
    "ExecutionError",
    "UnsupportedBuildTool",
    "BuildFileNotFound",
    "ProcessSpawnError",
    "ExecutionNotFound",
]
