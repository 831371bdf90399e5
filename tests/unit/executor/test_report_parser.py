import pytest

from bdd_forge.executor.report_parser import FALLBACK_CLASS_NAME, ReportParser

SUREFIRE_REPORT = """\
<?xml version="1.0" encoding="UTF-8"?>
<testsuite name="com.acme.LoginTest" time="1.25" tests="3" errors="0" skipped="1" failures="1">
  <properties>
    <property name="java.version" value="17"/>
  </properties>
  <testcase name="testSuccessfulLogin" classname="com.acme.LoginTest" time="0.5"/>
  <testcase name="testBadPassword" classname="com.acme.LoginTest" time="0.7">
    <failure message="expected dashboard" type="org.opentest4j.AssertionFailedError">
      org.opentest4j.AssertionFailedError: expected dashboard
        at com.acme.LoginTest.testBadPassword(LoginTest.java:42)
    </failure>
  </testcase>
  <testcase name="testLater" classname="com.acme.LoginTest" time="0">
    <skipped/>
  </testcase>
</testsuite>
"""

ERROR_REPORT = """\
<testsuite name="com.acme.CartTest" tests="1" failures="0" errors="1" skipped="0" time="0.1">
  <testcase name="testCrash" classname="com.acme.CartTest" time="0.1">
    <error message="boom" type="java.lang.IllegalStateException">stack</error>
  </testcase>
</testsuite>
"""


class TestReportParser:
    """Test JUnit XML report parsing"""

    @pytest.fixture
    def parser(self):
        return ReportParser()

    def test_parse_suite_counts(self, parser):
        """Test counts come from the suite attributes in any order"""
        summary = parser.parse_string(SUREFIRE_REPORT)

        assert summary.total_tests == 3
        assert summary.failed_tests == 1
        assert summary.skipped_tests == 1
        assert summary.passed_tests == 1
        assert summary.execution_time == pytest.approx(1.25)

    def test_parse_test_cases(self, parser):
        """Test case classification and failure details"""
        cases = parser.parse_string(SUREFIRE_REPORT).test_cases

        assert [case.status for case in cases] == ["passed", "failed", "skipped"]
        assert cases[0].class_name == "com.acme.LoginTest"
        assert cases[1].execution_time == pytest.approx(0.7)
        assert cases[1].error_message == "expected dashboard"
        assert cases[1].stack_trace.startswith("org.opentest4j.AssertionFailedError")
        assert cases[0].error_message is None

    def test_error_counts_as_failure(self, parser):
        summary = parser.parse_string(ERROR_REPORT)

        assert summary.failed_tests == 1
        assert summary.passed_tests == 0
        assert summary.test_cases[0].status == "failed"
        assert summary.test_cases[0].stack_trace == "stack"

    def test_two_of_two_with_one_failure(self, parser):
        """Test the minimal two-case report"""
        content = (
            '<testsuite tests="2" failures="1" errors="0" skipped="0" time="0.3" name="S">'
            '<testcase name="a" classname="S" time="0.1"/>'
            '<testcase name="b" classname="S" time="0.2"><failure message="no">trace</failure></testcase>'
            '</testsuite>'
        )
        summary = parser.parse_string(content)

        assert (summary.total_tests, summary.passed_tests, summary.failed_tests) == (2, 1, 1)

    def test_testsuites_root(self, parser):
        """Test a wrapper element with several suites"""
        content = "<testsuites>" + SUREFIRE_REPORT.split("\n", 1)[1] + ERROR_REPORT + "</testsuites>"
        summary = parser.parse_string(content)

        assert summary.total_tests == 4
        assert summary.failed_tests == 2
        assert len(summary.test_cases) == 4

    def test_missing_attributes_default_to_zero(self, parser):
        summary = parser.parse_string('<testsuite><testcase name="x"/></testsuite>')

        assert summary.total_tests == 0
        assert summary.test_cases[0].class_name == ""
        assert summary.test_cases[0].execution_time == 0.0

    def test_parse_directory_merges_reports(self, parser, tmp_path):
        """Test every TEST-*.xml file is merged and others ignored"""
        (tmp_path / "TEST-com.acme.LoginTest.xml").write_text(SUREFIRE_REPORT)
        (tmp_path / "TEST-com.acme.CartTest.xml").write_text(ERROR_REPORT)
        (tmp_path / "com.acme.LoginTest.txt").write_text("not a report")

        summary = parser.parse_directory(tmp_path)

        assert summary.total_tests == 4
        assert summary.execution_time == pytest.approx(1.35)

    def test_unparseable_file_is_skipped(self, parser, tmp_path):
        (tmp_path / "TEST-broken.xml").write_text("<testsuite tests=")
        (tmp_path / "TEST-ok.xml").write_text(ERROR_REPORT)

        summary = parser.parse_directory(tmp_path)

        assert summary.total_tests == 1

    def test_declared_latin1_report(self, parser, tmp_path):
        """Test a report in its declared non-UTF-8 encoding is read with its failures"""
        latin1 = (
            '<?xml version="1.0" encoding="ISO-8859-1"?>\n'
            '<testsuite name="Caf\u00e9Test" tests="1" failures="1" errors="0" skipped="0" time="0.2">'
            '<testcase name="testCr\u00e8me" classname="Caf\u00e9Test" time="0.2">'
            '<failure message="d\u00e9j\u00e0 vu">trace</failure></testcase></testsuite>'
        )
        (tmp_path / "TEST-A.xml").write_text(SUREFIRE_REPORT, encoding="utf-8")
        (tmp_path / "TEST-B.xml").write_bytes(latin1.encode("iso-8859-1"))

        summary = parser.parse_directory(tmp_path)

        assert summary.total_tests == 4
        assert summary.failed_tests == 2
        assert summary.test_cases[-1].name == "testCr\u00e8me"
        assert summary.test_cases[-1].error_message == "d\u00e9j\u00e0 vu"

    def test_undecodable_report_keeps_other_reports(self, parser, tmp_path):
        """Test a report that is not valid in any declared encoding is skipped on its own"""
        reports = tmp_path / "target" / "surefire-reports"
        reports.mkdir(parents=True)
        (reports / "TEST-A.xml").write_text(SUREFIRE_REPORT, encoding="utf-8")
        (reports / "TEST-B.xml").write_bytes(
            '<testsuite name="Caf\u00e9" tests="1" failures="0"><testcase name="x"/></testsuite>'.encode("iso-8859-1")
        )

        summary = parser.collect("maven", tmp_path, exit_code=0)

        assert summary.total_tests == 3
        assert summary.failed_tests == 1
        assert FALLBACK_CLASS_NAME not in [case.class_name for case in summary.test_cases]

    def test_empty_or_missing_directory(self, parser, tmp_path):
        assert parser.parse_directory(tmp_path) is None
        assert parser.parse_directory(tmp_path / "absent") is None

    def test_collect_uses_build_tool_directory(self, parser, tmp_path):
        """Test maven and gradle report locations"""
        maven_dir = tmp_path / "target" / "surefire-reports"
        maven_dir.mkdir(parents=True)
        (maven_dir / "TEST-a.xml").write_text(ERROR_REPORT)

        gradle_dir = tmp_path / "build" / "test-results" / "test"
        gradle_dir.mkdir(parents=True)
        (gradle_dir / "TEST-b.xml").write_text(SUREFIRE_REPORT)

        assert parser.collect("maven", tmp_path).total_tests == 1
        assert parser.collect("gradle", tmp_path).total_tests == 3

    def test_collect_falls_back_on_success(self, parser, tmp_path):
        """Test the synthetic summary for a clean run without reports"""
        summary = parser.collect("maven", tmp_path, specification_path="features/login.feature", exit_code=0)

        assert (summary.total_tests, summary.passed_tests, summary.failed_tests) == (1, 1, 0)
        case = summary.test_cases[0]
        assert case.name == "login"
        assert case.class_name == FALLBACK_CLASS_NAME
        assert case.status == "passed"

    def test_collect_falls_back_on_failure(self, parser, tmp_path):
        """Test stderr output or a failing exit code marks the fallback failed"""
        with_stderr = parser.collect("gradle", tmp_path, exit_code=0, stderr="BUILD FAILED")
        assert with_stderr.failed_tests == 1
        assert with_stderr.test_cases[0].stack_trace == "BUILD FAILED"

        with_code = parser.collect("gradle", tmp_path, exit_code=1)
        assert with_code.test_cases[0].status == "failed"
        assert with_code.test_cases[0].stack_trace == "Unknown error"
        assert with_code.test_cases[0].error_message == "Test execution failed"

    def test_collect_never_raises(self, parser, tmp_path):
        """Test broken report files still produce a summary"""
        reports = tmp_path / "target" / "surefire-reports"
        reports.mkdir(parents=True)
        (reports / "TEST-broken.xml").write_text("<<<")

        summary = parser.collect("maven", tmp_path, exit_code=3)

        assert summary.total_tests == 1
        assert summary.failed_tests == 1
