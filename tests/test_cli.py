import json
import sys
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from bdd_forge import __version__
from bdd_forge.cli import cli
from bdd_forge.executor import TestOrchestrator

ORPHAN_STEP_FEATURE = """\
Given a step before anything
Feature: Broken
  Scenario: Nothing
"""


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, tmp_path):
    """Invoke the CLI with an isolated configuration file"""
    config_path = tmp_path / "bdd-forge.yaml"

    def _invoke(*args):
        return runner.invoke(cli, ["-c", str(config_path), *args])

    return _invoke


@pytest.fixture
def login_file(tmp_path, login_feature):
    path = tmp_path / "login.feature"
    path.write_text(login_feature)
    return path


@pytest.fixture
def pom(tmp_path):
    path = tmp_path / "pom.xml"
    path.write_text("<project/>")
    return path


def patched_command(script):
    return patch.object(TestOrchestrator, "_build_command", return_value=[sys.executable, "-c", script])


class TestBasicCommands:
    """Test version, parse, validate and format"""

    def test_version(self, invoke):
        result = invoke("version")

        assert result.exit_code == 0
        assert f"BDD Forge v{__version__}" in result.output
        assert "generator, executor" in result.output
        assert "Annotation templates: data, integration, web" in result.output

    def test_parse_json(self, invoke, login_file):
        result = invoke("parse", str(login_file))

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["feature"]["name"] == "User Login"
        assert len(data["feature"]["scenarios"]) == 2

    def test_parse_yaml(self, invoke, login_file):
        result = invoke("parse", str(login_file), "--format", "yaml")

        assert result.exit_code == 0
        assert yaml.safe_load(result.output)["feature"]["tags"] == ["@auth", "@smoke"]

    def test_parse_without_feature(self, invoke, tmp_path):
        path = tmp_path / "empty.feature"
        path.write_text("# nothing here\n")

        result = invoke("parse", str(path))

        assert result.exit_code == 1
        assert "❌ Error:" in result.output

    def test_validate_valid(self, invoke, login_file):
        result = invoke("validate", str(login_file))

        assert result.exit_code == 0
        assert "✅ Feature file is valid" in result.output

    def test_validate_invalid(self, invoke, tmp_path):
        """Test errors are listed with their codes and the exit status is non-zero"""
        path = tmp_path / "broken.feature"
        path.write_text(ORPHAN_STEP_FEATURE)

        result = invoke("validate", str(path))

        assert result.exit_code == 1
        assert "ORPHAN_STEP" in result.output
        assert "(line 1)" in result.output

    def test_format_to_file(self, invoke, login_file, tmp_path):
        output = tmp_path / "formatted.feature"

        result = invoke("format", str(login_file), "--output", str(output))

        assert result.exit_code == 0
        assert "✅ Saved to:" in result.output
        assert output.read_text().startswith("@auth @smoke\nFeature: User Login\n")

    def test_format_to_stdout(self, invoke, login_file):
        result = invoke("format", str(login_file))

        assert result.exit_code == 0
        assert "  Scenario: Login with note\n" in result.output


class TestGenerateCommand:
    """Test Java source generation from the command line"""

    def test_generate_inline(self, invoke, login_file):
        result = invoke("generate", str(login_file), "--package", "com.acme.login")

        assert result.exit_code == 0
        assert "package com.acme.login;" in result.output
        assert "public class UserLoginTest {" in result.output

    def test_generate_steps(self, invoke, login_file):
        result = invoke("generate", str(login_file), "--mode", "steps", "--class-name", "LoginSteps")

        assert result.exit_code == 0
        assert "public class LoginSteps {" in result.output
        assert "throw new PendingException();" in result.output

    def test_generate_options(self, invoke, login_file, tmp_path):
        """Test annotations, imports and output file"""
        output = tmp_path / "UserLoginTest.java"

        result = invoke(
            "generate", str(login_file),
            "-a", "@SpringBootTest",
            "-i", "com.acme.Helper",
            "-o", str(output),
        )

        assert result.exit_code == 0
        source = output.read_text()
        assert "import com.acme.Helper;" in source
        assert "@SpringBootTest\n" in source

    def test_generate_uses_config_file(self, runner, login_file, tmp_path):
        """Test the generator section of the config file supplies the default package"""
        config_path = tmp_path / "bdd-forge.yaml"
        config_path.write_text("generator:\n  default_package: org.sample.tests\n")

        result = runner.invoke(cli, ["-c", str(config_path), "generate", str(login_file)])

        assert result.exit_code == 0
        assert "package org.sample.tests;" in result.output

    def test_generate_invalid_package(self, invoke, login_file):
        result = invoke("generate", str(login_file), "--package", "Com.Bad")

        assert result.exit_code == 1
        assert "❌ Error:" in result.output

    def test_generate_unknown_template(self, invoke, login_file):
        result = invoke("generate", str(login_file), "--template", "mobile")

        assert result.exit_code == 1


class TestRunCommand:
    """Test running builds from the command line"""

    def test_run_success(self, invoke, pom):
        with patched_command("print('Tests run: 2, Failures: 0, Errors: 0, Skipped: 0')"):
            result = invoke("run", "-b", "maven", "-f", str(pom), "--spec", "login.feature")

        assert result.exit_code == 0
        assert "🚀 Started execution" in result.output
        assert "⏳ 29%" in result.output
        assert "Total:   1" in result.output
        assert "COMPLETED: Test execution completed successfully" in result.output

    def test_run_show_output(self, invoke, pom):
        with patched_command("print('compiling sources')"):
            result = invoke("run", "-b", "gradle", "-f", str(pom), "--show-output")

        assert result.exit_code == 0
        assert "compiling sources" in result.output

    def test_run_failure(self, invoke, pom):
        with patched_command("import sys; sys.exit(3)"):
            result = invoke("run", "-b", "maven", "-f", str(pom))

        assert result.exit_code == 1
        assert "FAILED: Process exited with code 3" in result.output
        assert "UnknownTestClass" in result.output

    def test_run_timeout_cancels(self, invoke, pom):
        with patched_command("import time; time.sleep(30)"):
            result = invoke("run", "-b", "maven", "-f", str(pom), "--timeout", "0.5")

        assert result.exit_code == 1
        assert "Timed out" in result.output
        assert "CANCELLED: Test execution was cancelled" in result.output

    def test_run_missing_build_file(self, invoke, tmp_path):
        result = invoke("run", "-b", "maven", "-f", str(tmp_path / "pom.xml"))

        assert result.exit_code == 1
        assert "Build file not found" in result.output

    def test_run_bad_env(self, invoke, pom):
        result = invoke("run", "-b", "maven", "-f", str(pom), "--env", "NOVALUE")

        assert result.exit_code == 2
        assert "KEY=VALUE" in result.output
