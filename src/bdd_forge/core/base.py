import copy
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class ModuleStatus(Enum):
    """Lifecycle state of a module instance"""
    NOT_INITIALIZED = "not_initialized"
    READY = "ready"
    ERROR = "error"


@dataclass
class ModuleInfo:
    """Descriptive metadata reported by ``get_info``"""
    name: str
    version: str
    description: str
    author: str
    dependencies: List[str]
    optional_dependencies: List[str]


@dataclass
class ModuleResult:
    """Outcome of a module's ``execute`` call"""
    success: bool
    data: Any
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)


class ForgeModule(ABC):
    """
    Base class for the generator and executor modules.

    The configuration is checked once on construction; ``status`` is READY
    when ``validate`` passes and ERROR otherwise. Subclasses must set any
    attributes ``validate`` or ``get_info`` rely on before calling
    ``super().__init__``.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.logger = logging.getLogger(self.__class__.__name__)
        self._status = ModuleStatus.NOT_INITIALIZED
        self._revalidate()

    def _revalidate(self) -> None:
        self.status = ModuleStatus.READY if self.validate() else ModuleStatus.ERROR

    @abstractmethod
    def execute(self, input_data: Any) -> Any:
        pass

    @abstractmethod
    def validate(self) -> bool:
        pass

    @abstractmethod
    def get_info(self) -> ModuleInfo:
        pass

    @property
    def status(self) -> ModuleStatus:
        return self._status

    @status.setter
    def status(self, value: ModuleStatus) -> None:
        if value is not self._status:
            self.logger.debug(f"{self.get_info().name}: {self._status.value} -> {value.value}")
        self._status = value

    def is_ready(self) -> bool:
        return self._status is ModuleStatus.READY

    def cleanup(self) -> None:
        self.logger.debug(f"Cleaning up {self.get_info().name}")


class ConfigurableModule(ForgeModule):
    """Module whose config is its defaults overlaid with the caller's values"""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self._default_config = self._get_default_config()
        super().__init__({**copy.deepcopy(self._default_config), **(config or {})})

    @abstractmethod
    def _get_default_config(self) -> Dict[str, Any]:
        pass

    def update_config(self, updates: Dict[str, Any]) -> None:
        """Apply updates and re-check the result"""
        self.config.update(updates)
        self.logger.info(f"Configuration updated: {updates}")
        self._revalidate()

    def reset_config(self) -> None:
        self.config = copy.deepcopy(self._default_config)
        self.logger.info("Configuration reset to defaults")
        self._revalidate()
