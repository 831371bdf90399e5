from .orchestrator import TestOrchestrator
from .models import (
    BuildConfig,
    ExecutionStatus,
    ExecutionRecord,
    TestCaseResult,
    TestResultSummary,
)
from .events import EventBus, EventType, ExecutionEvent
from .registry import ExecutionRegistry
from .report_parser import ReportParser

__all__ = [
    'TestOrchestrator',
    'BuildConfig',
    'ExecutionStatus',
    'ExecutionRecord',
    'TestCaseResult',
    'TestResultSummary',
    'EventBus',
    'EventType',
    'ExecutionEvent',
    'ExecutionRegistry',
    'ReportParser',
]
