import copy
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

SUPPORTED_BUILD_TOOLS = ("maven", "gradle")

_KEY_ALIASES = {
    "buildTool": "build_tool",
    "buildFilePath": "build_file_path",
    "specificationPath": "specification_path",
    "javaClasspath": "classpath",
    "springProfiles": "spring_profiles",
    "jvmArgs": "jvm_args",
    "environmentVars": "environment_vars",
}


class ExecutionStatus(Enum):
    """Lifecycle state of one execution"""
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not ExecutionStatus.RUNNING


@dataclass
class BuildConfig:
    """What to run and how to launch the build tool"""
    build_tool: str
    build_file_path: str
    specification_path: str = ""
    classpath: List[str] = field(default_factory=list)
    spring_profiles: List[str] = field(default_factory=list)
    jvm_args: List[str] = field(default_factory=list)
    environment_vars: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BuildConfig":
        values = {}
        for key, value in data.items():
            key = _KEY_ALIASES.get(key, key)
            if key in cls.__dataclass_fields__:
                values[key] = value
        return cls(**values)


@dataclass
class TestCaseResult:
    """Outcome of a single test case from a report file"""
    __test__ = False

    name: str
    class_name: str
    status: str
    execution_time: float = 0.0
    error_message: Optional[str] = None
    stack_trace: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TestResultSummary:
    """Aggregated results of one execution. Times are in seconds."""
    __test__ = False

    total_tests: int = 0
    passed_tests: int = 0
    failed_tests: int = 0
    skipped_tests: int = 0
    execution_time: float = 0.0
    test_cases: List[TestCaseResult] = field(default_factory=list)

    def add(self, other: "TestResultSummary") -> None:
        self.total_tests += other.total_tests
        self.passed_tests += other.passed_tests
        self.failed_tests += other.failed_tests
        self.skipped_tests += other.skipped_tests
        self.execution_time += other.execution_time
        self.test_cases.extend(other.test_cases)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


STATUS_MESSAGES = {
    ExecutionStatus.COMPLETED: "Test execution completed successfully",
    ExecutionStatus.FAILED: "Test execution failed",
    ExecutionStatus.CANCELLED: "Test execution was cancelled",
}


@dataclass
class ExecutionRecord:
    """
    In-memory state of one execution.

    Records are mutated only by the orchestrator while it holds the registry
    lock; callers receive snapshots from ``snapshot()``.
    """
    id: str
    specification_path: str
    start_time: datetime = field(default_factory=datetime.now)
    status: ExecutionStatus = ExecutionStatus.RUNNING
    progress: float = 0.0
    current_test: str = ""
    summary: Optional[TestResultSummary] = None
    message: Optional[str] = None
    end_time: Optional[datetime] = None
    exit_code: Optional[int] = None

    @property
    def status_message(self) -> str:
        if self.status is ExecutionStatus.RUNNING:
            return f"Running tests... {self.progress:.0f}% complete"
        return STATUS_MESSAGES[self.status]

    def snapshot(self) -> "ExecutionRecord":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "specification_path": self.specification_path,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "status": self.status.value,
            "progress": self.progress,
            "current_test": self.current_test,
            "message": self.message or self.status_message,
            "exit_code": self.exit_code,
            "summary": self.summary.to_dict() if self.summary else None,
        }
