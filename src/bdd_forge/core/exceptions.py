class BDDForgeError(Exception):
    """Base exception for BDD Forge"""
    pass


class ModuleError(BDDForgeError):
    """Module-related errors"""
    pass


class ConfigurationError(BDDForgeError):
    """Configuration-related errors"""
    pass


class MalformedDocument(BDDForgeError):
    """Feature text that cannot be turned into a document"""

    def __init__(self, message: str, line: int = None):
        self.line = line
        if line is not None:
            message = f"{message} (line {line})"
        super().__init__(message)


class EmptyFeatureName(MalformedDocument):
    """Feature text without a named Feature"""
    pass


class GenerationError(BDDForgeError):
    """Error generating test source"""
    pass


class InvalidConfig(GenerationError):
    """Generation configuration failed its identifier checks"""
    pass


class ExecutionError(BDDForgeError):
    """Error during test execution"""
    pass


class UnsupportedBuildTool(ExecutionError):
    """Build tool is not one of the supported backends"""
    pass


class BuildFileNotFound(ExecutionError):
    """Build file does not exist"""
    pass


class ProcessSpawnError(ExecutionError):
    """Build tool subprocess could not be started"""
    pass


class ExecutionNotFound(ExecutionError):
    """No execution is registered under the given id"""
    pass
