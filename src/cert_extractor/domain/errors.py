"""
Extraction errors: one exception type per failure kind.

Readers raise these internally and convert them into Result failures at
their boundary (see `Result.from_computation`). Every message names the
file, expression, or secret involved so an error can be reported on its
own, without the call site that produced it.
"""

from __future__ import annotations

from pathlib import Path

from cert_extractor.result import ErrorCode


class CertificateExtractionError(Exception):
    """Base class for every failure raised while extracting certificates."""

    code: ErrorCode = ErrorCode.UNKNOWN_ERROR


class SourceReadError(CertificateExtractionError):
    """A file (PEM file, document, or referenced certificate) could not be read."""

    code = ErrorCode.IO_ERROR

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"cannot read {self.path}: {reason}")


class QueryEvaluationError(CertificateExtractionError):
    """The query evaluator exited non-zero, timed out, or could not be started."""

    code = ErrorCode.QUERY_EVALUATION_ERROR

    def __init__(self, document: str | Path, expression: str, reason: str, output: str = "") -> None:
        self.document = str(document)
        self.expression = expression
        self.reason = reason
        self.output = output
        super().__init__(
            f'failed to evaluate "{expression}" against {self.document}: '
            f"{reason} | stderr: {output}"
        )


class EncodingError(CertificateExtractionError):
    """Inline certificate data is not valid base64."""

    code = ErrorCode.ENCODING_ERROR

    def __init__(self, document: str | Path, expression: str, reason: str) -> None:
        self.document = str(document)
        self.expression = expression
        super().__init__(
            f'invalid base64 certificate data in {self.document} for "{expression}": {reason}'
        )


class MalformedCertificateError(CertificateExtractionError):
    """PEM armor or its DER payload is not a parseable X.509 certificate."""

    code = ErrorCode.MALFORMED_CERTIFICATE

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"tried to parse malformed x509 data, {reason}")


class CorrelationCountMismatchError(CertificateExtractionError):
    """Identity labels and certificates extracted for one pair differ in number."""

    code = ErrorCode.CORRELATION_COUNT_MISMATCH

    def __init__(self, document: str | Path, expected: int, actual: int, expression: str) -> None:
        self.document = str(document)
        self.expected = expected
        self.actual = actual
        self.expression = expression
        super().__init__(
            f"failed to parse some labels in {self.document} "
            f'(got {actual} IDs but {expected} certs for "{expression}")'
        )


class MissingFieldError(CertificateExtractionError):
    """A secret does not contain the certificate field."""

    code = ErrorCode.MISSING_FIELD

    def __init__(self, secret_name: str, field: str) -> None:
        self.secret_name = secret_name
        self.field = field
        super().__init__(f'secret "{secret_name}" has no key "{field}"')
