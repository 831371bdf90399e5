import os
import re
import shutil
import signal
import subprocess
import threading
import time
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..core import (
    ConfigurableModule,
    ModuleInfo,
    BuildFileNotFound,
    ExecutionError,
    ProcessSpawnError,
    UnsupportedBuildTool,
)
from .events import EventBus, EventType, ExecutionEvent
from .models import (
    SUPPORTED_BUILD_TOOLS,
    BuildConfig,
    ExecutionRecord,
    ExecutionStatus,
)
from .registry import ExecutionRegistry
from .report_parser import ReportParser

RUNNING_PATTERN = re.compile(r"Running\s+(\S+)")
TESTS_RUN_PATTERN = re.compile(
    r"Tests run:\s*(\d+),.*Failures:\s*(\d+),.*Errors:\s*(\d+),.*Skipped:\s*(\d+)"
)

# Ceiling for the tests-run estimate; only completion reports 100
TESTS_RUN_CAP = 99.0

# Output pipes may stay open in processes the build leaves behind
PUMP_JOIN_TIMEOUT = 5.0


class TestOrchestrator(ConfigurableModule):
    """
    Launches a Maven or Gradle test run and supervises it.

    ``execute`` returns as soon as the build tool is spawned. Reader threads
    drain stdout and stderr for the life of the process, feeding progress and
    output events, and a waiter thread reaps the process, collects the JUnit
    reports and moves the record to its terminal state. On POSIX the build runs
    in its own process group, so cancellation reaches forked JVMs and daemons
    too: SIGTERM first, escalating to SIGKILL after ``grace_period`` seconds.

    Example:
        orchestrator = TestOrchestrator()
        execution_id = orchestrator.execute(BuildConfig("maven", "/work/app/pom.xml"))
        record = orchestrator.wait(execution_id)
    """
    __test__ = False

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        registry: Optional[ExecutionRegistry] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.registry = registry or ExecutionRegistry()
        self.events = event_bus or EventBus()
        self.report_parser = ReportParser()
        self._timers: Dict[str, threading.Timer] = {}
        super().__init__(config)

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration"""
        return {
            "grace_period": 5.0,
            "estimated_duration": 60.0,
            "progress_cap": 90.0,
        }

    def validate(self) -> bool:
        """Validate module configuration"""
        if self.config.get("grace_period", 0) <= 0:
            self.logger.error("grace_period must be positive")
            return False

        if self.config.get("estimated_duration", 0) <= 0:
            self.logger.error("estimated_duration must be positive")
            return False

        if not 0 < self.config.get("progress_cap", 0) < 100:
            self.logger.error("progress_cap must be between 0 and 100")
            return False

        return True

    def get_info(self) -> ModuleInfo:
        """Get module information"""
        return ModuleInfo(
            name="Test Orchestrator",
            version="0.1.0",
            description="Runs generated tests through Maven or Gradle and collects results",
            author="BDD Forge Contributors",
            dependencies=[],
            optional_dependencies=[],
        )

    def subscribe(self, callback, event_type: Optional[EventType] = None) -> None:
        self.events.subscribe(callback, event_type)

    def execute(self, build_config: Union[BuildConfig, Dict[str, Any]]) -> str:
        """
        Start a test run.

        Args:
            build_config: BuildConfig or dict of its fields

        Returns:
            Execution id

        Raises:
            UnsupportedBuildTool: If the build tool is not maven or gradle
            BuildFileNotFound: If the build file does not exist
            ProcessSpawnError: If the build tool could not be launched
        """
        if isinstance(build_config, dict):
            build_config = BuildConfig.from_dict(build_config)

        if build_config.build_tool not in SUPPORTED_BUILD_TOOLS:
            raise UnsupportedBuildTool(f"Unsupported build tool: {build_config.build_tool}")

        build_file = Path(build_config.build_file_path)
        if not build_file.is_file():
            raise BuildFileNotFound(f"Build file not found: {build_file}")

        project_dir = build_file.resolve().parent
        command = self._build_command(build_config, project_dir)
        execution_id = str(uuid.uuid4())

        self.logger.info(f"Starting execution {execution_id}: {' '.join(command)}")
        try:
            process = subprocess.Popen(
                command,
                cwd=str(project_dir),
                env=self._build_environment(build_config),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
                start_new_session=os.name == "posix",
            )
        except (OSError, ValueError) as e:
            raise ProcessSpawnError(f"Failed to start test execution: {e}") from e

        record = ExecutionRecord(id=execution_id, specification_path=build_config.specification_path)
        self.registry.add(record, process)
        self._emit(EventType.STARTED, execution_id, command=command, build_tool=build_config.build_tool)

        stderr_lines: List[str] = []
        pumps = [
            self._start_thread(f"{execution_id[:8]}-stdout", self._pump_stdout,
                               execution_id, process.stdout),
            self._start_thread(f"{execution_id[:8]}-stderr", self._pump_stderr,
                               execution_id, process.stderr, stderr_lines),
        ]
        self._start_thread(f"{execution_id[:8]}-wait", self._wait_for_exit,
                           execution_id, process, pumps, stderr_lines, build_config, project_dir)

        return execution_id

    def get_status(self, execution_id: str) -> ExecutionRecord:
        """Snapshot of an execution record; raises ExecutionNotFound for unknown ids"""
        return self.registry.snapshot(execution_id)

    def cancel(self, execution_id: str) -> bool:
        """
        Cancel a running execution.

        Returns True if a live execution was found and signalled. The record
        becomes ``cancelled`` at once; the process gets SIGKILL if it is still
        alive after the grace period.
        """
        with self.registry.lock:
            try:
                record = self.registry.record(execution_id)
            except ExecutionError:
                return False

            process = self.registry.process(execution_id)
            if record.status.is_terminal or process is None or process.poll() is not None:
                return False

            self._signal(process)
            record.status = ExecutionStatus.CANCELLED
            record.message = record.status_message

            timer = threading.Timer(self.config["grace_period"], self._force_kill, args=(execution_id, process))
            timer.daemon = True
            self._timers[execution_id] = timer
            timer.start()

        self.logger.info(f"Cancelled execution {execution_id}")
        self._emit(EventType.CANCELLED, execution_id)
        return True

    def wait(self, execution_id: str, timeout: Optional[float] = None) -> ExecutionRecord:
        """
        Block until an execution is terminal and its process has been reaped.

        Returns the latest snapshot, which is still ``running`` if the timeout
        expired first.
        """
        with self.registry.changed:
            record = self.registry.record(execution_id)
            self.registry.changed.wait_for(
                lambda: record.status.is_terminal and self.registry.process(execution_id) is None,
                timeout,
            )
            return record.snapshot()

    def discard(self, execution_id: str) -> None:
        """Forget a finished execution"""
        with self.registry.lock:
            record = self.registry.record(execution_id)
            if not record.status.is_terminal or self.registry.process(execution_id) is not None:
                raise ExecutionError(f"Execution {execution_id} is still running")
            self.registry.remove(execution_id)

    def running_executions(self) -> List[str]:
        return self.registry.running_ids()

    def shutdown(self) -> None:
        """Cancel every running execution"""
        for execution_id in self.running_executions():
            self.cancel(execution_id)

    def cleanup(self) -> None:
        self.shutdown()
        super().cleanup()

    def _build_command(self, build_config: BuildConfig, project_dir: Path) -> List[str]:
        profiles = ",".join(build_config.spring_profiles)
        jvm_args = " ".join(build_config.jvm_args)

        if build_config.build_tool == "maven":
            command = [shutil.which("mvn") or "mvn", "test"]
            if profiles:
                command.append(f"-Dspring.profiles.active={profiles}")
            if jvm_args:
                command.append(f"-DargLine={jvm_args}")
            command.append("-Dmaven.test.failure.ignore=true")
            return command

        wrapper = project_dir / "gradlew"
        command = [str(wrapper) if wrapper.exists() else shutil.which("gradle") or "gradle", "test"]
        if profiles:
            command.append(f"-Dspring.profiles.active={profiles}")
        if jvm_args:
            command.append(f"-Dorg.gradle.jvmargs={jvm_args}")
        command += ["--continue", "--info"]
        return command

    @staticmethod
    def _build_environment(build_config: BuildConfig) -> Dict[str, str]:
        env = dict(os.environ)
        env.update({key: str(value) for key, value in build_config.environment_vars.items()})
        if build_config.classpath:
            env["CLASSPATH"] = os.pathsep.join(build_config.classpath)
        return env

    @staticmethod
    def _start_thread(name: str, target, *args) -> threading.Thread:
        thread = threading.Thread(target=target, args=args, name=name, daemon=True)
        thread.start()
        return thread

    def _pump_stdout(self, execution_id: str, stream) -> None:
        with stream:
            for line in stream:
                self._update_progress(execution_id, line)
                self._emit(EventType.OUTPUT, execution_id, output=line, stream="stdout")

    def _pump_stderr(self, execution_id: str, stream, sink: List[str]) -> None:
        with stream:
            for line in stream:
                sink.append(line)
                self._emit(EventType.OUTPUT, execution_id, output=line, stream="stderr")

    def _update_progress(self, execution_id: str, line: str) -> None:
        with self.registry.lock:
            record = self.registry.record(execution_id)
            if record.status.is_terminal:
                return

            running = RUNNING_PATTERN.search(line)
            tests_run = TESTS_RUN_PATTERN.search(line)
            if running:
                record.current_test = running.group(1)
                elapsed = (datetime.now() - record.start_time).total_seconds()
                progress = min(
                    self.config["progress_cap"],
                    elapsed / self.config["estimated_duration"] * 100,
                )
            elif tests_run:
                total = int(tests_run.group(1))
                progress = min(TESTS_RUN_CAP, total / (total + 5) * 100)
            else:
                return

            if progress <= record.progress:
                return
            record.progress = progress
            current_test = record.current_test

        self._emit(EventType.PROGRESS, execution_id, progress=progress, current_test=current_test)

    def _wait_for_exit(
        self,
        execution_id: str,
        process: subprocess.Popen,
        pumps: List[threading.Thread],
        stderr_lines: List[str],
        build_config: BuildConfig,
        project_dir: Path,
    ) -> None:
        exit_code = process.wait()
        with self.registry.lock:
            cancelled = self.registry.record(execution_id).status is ExecutionStatus.CANCELLED
        if cancelled:
            self._signal(process, force=True)

        deadline = time.monotonic() + PUMP_JOIN_TIMEOUT
        for pump in pumps:
            pump.join(max(0.0, deadline - time.monotonic()))
            if pump.is_alive():
                self.logger.warning(
                    f"Execution {execution_id} exited but {pump.name} is still open, "
                    "a child process may still hold it"
                )

        summary = self.report_parser.collect(
            build_config.build_tool,
            project_dir,
            specification_path=build_config.specification_path,
            exit_code=exit_code,
            stderr="".join(list(stderr_lines)),
        )

        event = None
        with self.registry.lock:
            timer = self._timers.pop(execution_id, None)
            if timer:
                timer.cancel()

            self.registry.release_process(execution_id)
            record = self.registry.record(execution_id)
            record.exit_code = exit_code
            record.end_time = datetime.now()
            record.summary = summary

            if record.status is ExecutionStatus.RUNNING:
                if 0 <= exit_code < 2:
                    record.status = ExecutionStatus.COMPLETED
                    record.progress = 100.0
                    record.message = record.status_message
                    event = (EventType.COMPLETED, {"summary": summary})
                else:
                    record.status = ExecutionStatus.FAILED
                    record.message = f"Process exited with code {exit_code}"
                    event = (EventType.FAILED, {"reason": record.message, "summary": summary})

            self.registry.notify()

        self.logger.info(f"Execution {execution_id} finished with exit code {exit_code}")
        if event:
            self._emit(event[0], execution_id, **event[1])

    def _force_kill(self, execution_id: str, process: subprocess.Popen) -> None:
        if process.poll() is None:
            self.logger.warning(f"Execution {execution_id} ignored SIGTERM, killing")
            self._signal(process, force=True)

    @staticmethod
    def _signal(process: subprocess.Popen, force: bool = False) -> None:
        """Signal the build's whole process group, or just the process off POSIX"""
        if os.name != "posix":
            if force:
                process.kill()
            else:
                process.terminate()
            return

        try:
            os.killpg(process.pid, signal.SIGKILL if force else signal.SIGTERM)
        except ProcessLookupError:
            pass

    def _emit(self, event_type: EventType, execution_id: str, **data) -> None:
        self.events.emit(ExecutionEvent(type=event_type, execution_id=execution_id, data=data))
