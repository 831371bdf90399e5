import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional

from .models import TestCaseResult, TestResultSummary

logger = logging.getLogger(__name__)

REPORT_DIRECTORIES = {
    "maven": Path("target") / "surefire-reports",
    "gradle": Path("build") / "test-results" / "test",
}

REPORT_GLOB = "TEST-*.xml"

FALLBACK_CLASS_NAME = "UnknownTestClass"


def _int(value: Optional[str]) -> int:
    try:
        return int(float(value)) if value else 0
    except ValueError:
        return 0


def _float(value: Optional[str]) -> float:
    try:
        return float(value.replace(",", "")) if value else 0.0
    except ValueError:
        return 0.0


class ReportParser:
    """
    Reads JUnit XML reports written by the build tool.

    Each report file is parsed on its own; a file that cannot be read or
    parsed is logged and skipped. When no file yields a result, ``collect``
    builds a single synthetic test case from the exit code and stderr, so it
    always returns a summary.
    """

    def report_directory(self, build_tool: str, project_dir: Path) -> Path:
        return Path(project_dir) / REPORT_DIRECTORIES.get(build_tool, REPORT_DIRECTORIES["maven"])

    def collect(
        self,
        build_tool: str,
        project_dir: Path,
        specification_path: str = "",
        exit_code: Optional[int] = None,
        stderr: str = "",
    ) -> TestResultSummary:
        try:
            summary = self.parse_directory(self.report_directory(build_tool, project_dir))
        except Exception:
            logger.exception(f"Failed to read reports under {project_dir}")
            summary = None

        if summary is None:
            logger.info("No parseable report files found, using fallback summary")
            return self.fallback(specification_path, exit_code, stderr)
        return summary

    def parse_directory(self, directory: Path) -> Optional[TestResultSummary]:
        """Merge every parseable report file in a directory, or None if there are none"""
        if not directory.is_dir():
            logger.debug(f"Report directory does not exist: {directory}")
            return None

        summary = None
        for path in sorted(directory.glob(REPORT_GLOB)):
            try:
                parsed = self.parse_file(path)
            except (OSError, ET.ParseError, ValueError) as e:
                logger.warning(f"Skipping unreadable report {path.name}: {e}")
                continue

            if summary is None:
                summary = TestResultSummary()
            summary.add(parsed)

        return summary

    def parse_file(self, path: Path) -> TestResultSummary:
        """Parse one report file, honouring the encoding its XML declaration names"""
        return self._parse_root(ET.parse(str(path)).getroot())

    def parse_string(self, content: str) -> TestResultSummary:
        """
        Parse one report document.

        Raises:
            ET.ParseError: If the content is not well-formed XML
        """
        root = ET.fromstring(content)
        return self._parse_root(root)

    def _parse_root(self, root: ET.Element) -> TestResultSummary:
        if root.tag == "testsuite":
            suites = [root]
        else:
            suites = root.findall(".//testsuite")

        summary = TestResultSummary()
        for suite in suites:
            summary.add(self._parse_suite(suite))
        return summary

    def _parse_suite(self, suite: ET.Element) -> TestResultSummary:
        total = _int(suite.get("tests"))
        failed = _int(suite.get("failures")) + _int(suite.get("errors"))
        skipped = _int(suite.get("skipped"))
        suite_name = suite.get("name", "")

        return TestResultSummary(
            total_tests=total,
            passed_tests=max(total - failed - skipped, 0),
            failed_tests=failed,
            skipped_tests=skipped,
            execution_time=_float(suite.get("time")),
            test_cases=[self._parse_case(case, suite_name) for case in suite.findall("testcase")],
        )

    @staticmethod
    def _parse_case(case: ET.Element, suite_name: str) -> TestCaseResult:
        result = TestCaseResult(
            name=case.get("name", ""),
            class_name=case.get("classname", suite_name),
            status="passed",
            execution_time=_float(case.get("time")),
        )

        problem = case.find("failure")
        if problem is None:
            problem = case.find("error")

        if problem is not None:
            result.status = "failed"
            result.error_message = problem.get("message")
            result.stack_trace = (problem.text or "").strip() or None
        elif case.find("skipped") is not None:
            result.status = "skipped"

        return result

    @staticmethod
    def fallback(specification_path: str, exit_code: Optional[int], stderr: str) -> TestResultSummary:
        """Single synthetic case: failed if anything hit stderr or the exit code is non-zero"""
        failed = bool(stderr) or (exit_code is not None and exit_code != 0)
        name = Path(specification_path).stem if specification_path else "execution"

        case = TestCaseResult(
            name=name,
            class_name=FALLBACK_CLASS_NAME,
            status="failed" if failed else "passed",
        )
        if failed:
            case.error_message = "Test execution failed"
            case.stack_trace = stderr or "Unknown error"

        return TestResultSummary(
            total_tests=1,
            passed_tests=0 if failed else 1,
            failed_tests=1 if failed else 0,
            test_cases=[case],
        )
