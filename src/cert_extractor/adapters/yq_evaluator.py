"""
yq adapter: evaluates path expressions against YAML documents in a subprocess.

Implements the QueryEvaluator port by running

    yq r <document> <expression>

once per expression. stdout and stderr are captured together so that on
failure the evaluator's own diagnostics end up verbatim in the error.
The subprocess is the only unbounded call in a read, so it runs under a
timeout; a timeout is reported like any other evaluation failure.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import structlog

from cert_extractor.domain.errors import CertificateExtractionError, QueryEvaluationError
from cert_extractor.result import Result

log = structlog.get_logger()


class YqQueryEvaluator:
    """
    Evaluate path expressions with the `yq` command-line tool.

    Implements the QueryEvaluator port.
    """

    def __init__(self, binary: str = "yq", timeout: float = 30) -> None:
        self._binary = binary
        self._timeout = timeout

    def evaluate(self, document: Path, expression: str) -> Result[str]:
        """
        Return the raw text matched by `expression` in `document`.

        Returns Result[str] (empty string when nothing matched), or
        Result.failure(QUERY_EVALUATION_ERROR, ...) carrying yq's output.
        """
        return Result.from_computation(
            lambda: self._run(document, expression),
            CertificateExtractionError,
        ).peek_failure(
            lambda err: log.warning("query.failed", document=str(document), expression=expression)
        )

    def _run(self, document: Path, expression: str) -> str:
        command = [self._binary, "r", str(document), expression]
        try:
            completed = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise QueryEvaluationError(
                document, expression, f"timed out after {self._timeout}s", _as_text(e.output)
            ) from e
        except OSError as e:
            raise QueryEvaluationError(document, expression, str(e)) from e

        if completed.returncode != 0:
            raise QueryEvaluationError(
                document,
                expression,
                f"exit status {completed.returncode}",
                completed.stdout,
            )

        log.debug(
            "query.evaluated",
            document=str(document),
            expression=expression,
            size=len(completed.stdout),
        )
        return completed.stdout


def _as_text(output: str | bytes | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode(errors="replace")
    return output
