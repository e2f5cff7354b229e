"""
Unit tests for the yq query evaluator adapter.

subprocess.run is patched so these tests never need a yq binary.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

from cert_extractor.adapters.yq_evaluator import YqQueryEvaluator
from cert_extractor.domain.errors import QueryEvaluationError
from cert_extractor.result import ErrorCode
from tests.assertions import ResultAssertions

DOCUMENT = Path("/home/user/.kube/config")
EXPRESSION = "clusters.[*].name"


def _completed(returncode: int, stdout: str) -> MagicMock:
    completed = MagicMock()
    completed.returncode = returncode
    completed.stdout = stdout
    return completed


class TestInvocation:
    """
    GIVEN a YqQueryEvaluator
    WHEN evaluate is called
    THEN yq runs in read mode with combined output and the configured timeout.
    """

    @patch("cert_extractor.adapters.yq_evaluator.subprocess.run")
    def test_runs_read_command(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _completed(0, "prod\n")

        YqQueryEvaluator(binary="/usr/local/bin/yq", timeout=5).evaluate(DOCUMENT, EXPRESSION)

        args, kwargs = mock_run.call_args
        assert args[0] == ["/usr/local/bin/yq", "r", str(DOCUMENT), EXPRESSION]
        assert kwargs["stderr"] == subprocess.STDOUT
        assert kwargs["timeout"] == 5

    @patch("cert_extractor.adapters.yq_evaluator.subprocess.run")
    def test_returns_raw_stdout(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _completed(0, "prod\nstaging\n")

        result = YqQueryEvaluator().evaluate(DOCUMENT, EXPRESSION)

        assert ResultAssertions.assert_success(result) == "prod\nstaging\n"

    @patch("cert_extractor.adapters.yq_evaluator.subprocess.run")
    def test_no_match_is_empty_success(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _completed(0, "")

        assert ResultAssertions.assert_success(YqQueryEvaluator().evaluate(DOCUMENT, EXPRESSION)) == ""


class TestFailures:
    """
    GIVEN yq fails, is missing, or hangs
    WHEN evaluate is called
    THEN a QUERY_EVALUATION_ERROR carries yq's output verbatim.
    """

    @patch("cert_extractor.adapters.yq_evaluator.subprocess.run")
    def test_nonzero_exit_includes_output(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _completed(1, "Error: Parsing expression: Lexer error\n")

        result = YqQueryEvaluator().evaluate(DOCUMENT, "clusters.[")

        error = ResultAssertions.assert_failure(result, ErrorCode.QUERY_EVALUATION_ERROR)
        assert "Error: Parsing expression: Lexer error" in error.message
        assert "clusters.[" in error.message
        assert isinstance(error.exception, QueryEvaluationError)
        assert error.exception.output == "Error: Parsing expression: Lexer error\n"

    @patch("cert_extractor.adapters.yq_evaluator.subprocess.run")
    def test_missing_binary(self, mock_run: MagicMock) -> None:
        mock_run.side_effect = FileNotFoundError(2, "No such file or directory", "yq")

        result = YqQueryEvaluator().evaluate(DOCUMENT, EXPRESSION)

        ResultAssertions.assert_failure_message_contains(result, "No such file or directory")

    @patch("cert_extractor.adapters.yq_evaluator.subprocess.run")
    def test_timeout(self, mock_run: MagicMock) -> None:
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="yq", timeout=2, output=b"partial")

        result = YqQueryEvaluator(timeout=2).evaluate(DOCUMENT, EXPRESSION)

        error = ResultAssertions.assert_failure(result, ErrorCode.QUERY_EVALUATION_ERROR)
        assert "timed out after 2s" in error.message
        assert "partial" in error.message
