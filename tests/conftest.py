"""Shared pytest fixtures for floe tests."""

import json
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from floe.runners import RunnerRegistry, RunResult
from floe.workflow import Context


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def mock_runner():
    """Runner that succeeds with an empty JSON object unless told otherwise."""
    runner = MagicMock()
    runner.run.return_value = RunResult(exit_status=0, output="{}")
    return runner


@pytest.fixture
def registry(mock_runner):
    """Registry serving docker:// with the mock runner."""
    return RunnerRegistry({"docker": mock_runner})


@pytest.fixture
def mock_sleep():
    """Mock time.sleep so Wait states and retry backoff return immediately."""
    with patch("time.sleep") as sleep:
        yield sleep


@pytest.fixture
def mock_workflow(registry):
    """Stand-in for the driving workflow, for running single states."""
    workflow = MagicMock()
    workflow.context = Context(input={})
    workflow.credentials = {}
    workflow.runners = registry
    return workflow


@pytest.fixture
def mock_subprocess():
    """Mock subprocess.run for tests that call container tools."""
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        yield mock_run


@pytest.fixture
def hello_workflow_file(tmp_path):
    """A small Pass/Choice workflow written to disk."""
    path = tmp_path / "hello.asl"
    path.write_text(
        json.dumps(
            {
                "Comment": "Say hello",
                "StartAt": "Greet",
                "States": {
                    "Greet": {"Type": "Pass", "Result": {"greeting": "hello"}, "ResultPath": "$.out", "Next": "Check"},
                    "Check": {
                        "Type": "Choice",
                        "Choices": [
                            {
                                "And": [
                                    {"Variable": "$.fail", "IsPresent": True},
                                    {"Variable": "$.fail", "BooleanEquals": True},
                                ],
                                "Next": "Broken",
                            }
                        ],
                        "Default": "Done",
                    },
                    "Done": {"Type": "Succeed"},
                    "Broken": {"Type": "Fail", "Error": "Broken", "Cause": "asked to fail"},
                },
            }
        )
    )
    return path
