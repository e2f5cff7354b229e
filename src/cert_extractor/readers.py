"""
Source readers: locate certificate bytes in each kind of source.

  read_pem_file               PEM file on disk       → records without identity
  StructuredDocumentReader    kubeconfig-style YAML  → records correlated to names
  read_secret                 cluster secret         → records without identity

Every reader returns Result[list[CertificateRecord]]. Failures are terminal
for the source being read: no retries, no partial record lists.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Sequence
from pathlib import Path

import structlog
from cryptography import x509

from cert_extractor.adapters.pem_decoder import decode_pem
from cert_extractor.domain.errors import (
    CertificateExtractionError,
    CorrelationCountMismatchError,
    EncodingError,
    MissingFieldError,
    SourceReadError,
)
from cert_extractor.domain.models import CertificateRecord, Encoding, PathExpressionPair
from cert_extractor.domain.ports import QueryEvaluator, SecretLike
from cert_extractor.result import Result

log = structlog.get_logger()

TLS_CERT_KEY = "tls.crt"


def _read_file(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise SourceReadError(path, e.strerror or str(e)) from e


def _uncorrelated(certificates: list[x509.Certificate]) -> list[CertificateRecord]:
    return [CertificateRecord(certificate=cert) for cert in certificates]


# ─────────────────────── Direct file ───────────────────────


def read_pem_file(path: str | Path) -> Result[list[CertificateRecord]]:
    """
    Read a PEM file and decode every certificate in it.

    An unreadable file is an IO_ERROR; malformed content is the decoder's
    MALFORMED_CERTIFICATE failure, passed through unchanged.
    """
    return (
        Result.from_computation(lambda: _read_file(Path(path)), CertificateExtractionError)
        .flat_map(decode_pem)
        .map(_uncorrelated)
    )


# ─────────────────────── Structured document ───────────────────────


def _decode_inline(document: Path, expression: str, raw: str) -> bytes:
    """Base64-decode each matched value; one match per line."""
    decoded = b""
    for line in raw.splitlines():
        value = line.strip()
        if not value:
            continue
        try:
            decoded += base64.b64decode(value, validate=True)
        except binascii.Error as e:
            raise EncodingError(document, expression, str(e)) from e
    return decoded


def _read_references(document: Path, raw: str) -> bytes:
    """Read each referenced file, resolved against the document's directory."""
    contents = b""
    for line in raw.splitlines():
        reference = line.rstrip("\r\n")
        if not reference:
            continue
        contents += _read_file(document.parent / reference)
    return contents


def _split_labels(raw: str) -> list[str]:
    return [line for line in raw.split("\n") if line]


class StructuredDocumentReader:
    """
    Extract certificates from a structured (YAML/JSON) document.

    Each PathExpressionPair is resolved with two independent queries, one
    for the certificate material and one for the identity labels, and the
    results are paired by position. Since nothing else ties a certificate to
    its label, a count mismatch fails the whole read instead of guessing.
    """

    def __init__(self, evaluator: QueryEvaluator) -> None:
        self._evaluator = evaluator

    def read(
        self,
        document: str | Path,
        path_expressions: Sequence[PathExpressionPair],
    ) -> Result[list[CertificateRecord]]:
        """
        Evaluate every pair against `document`, in declaration order.

        Returns all records on success. The first failing pair aborts the
        read and its failure is returned; records from earlier pairs are
        discarded.
        """
        document = Path(document)
        records: list[CertificateRecord] = []
        for pair in path_expressions:
            result = self._read_pair(document, pair)
            if result.is_failure():
                return result
            records.extend(result.value())

        log.info(
            "document.parsed",
            document=str(document),
            pairs=len(path_expressions),
            certificates=len(records),
        )
        return Result.success(records)

    def _read_pair(self, document: Path, pair: PathExpressionPair) -> Result[list[CertificateRecord]]:
        return self._evaluator.evaluate(document, pair.certificate_expression).flat_map(
            lambda raw: self._records_for_match(document, pair, raw)
        )

    def _records_for_match(
        self,
        document: Path,
        pair: PathExpressionPair,
        raw: str,
    ) -> Result[list[CertificateRecord]]:
        if not raw.strip():
            log.debug(
                "document.pair_skipped",
                document=str(document),
                expression=pair.certificate_expression,
            )
            return Result.success([])

        return (
            self._decode_material(document, pair, raw)
            .flat_map(decode_pem)
            .flat_map(lambda certificates: self._correlate(document, pair, certificates))
        )

    def _decode_material(self, document: Path, pair: PathExpressionPair, raw: str) -> Result[bytes]:
        if pair.encoding is Encoding.INLINE_BASE64:
            return Result.from_computation(
                lambda: _decode_inline(document, pair.certificate_expression, raw),
                CertificateExtractionError,
            )
        return Result.from_computation(
            lambda: _read_references(document, raw),
            CertificateExtractionError,
        )

    def _correlate(
        self,
        document: Path,
        pair: PathExpressionPair,
        certificates: list[x509.Certificate],
    ) -> Result[list[CertificateRecord]]:
        return self._evaluator.evaluate(document, pair.identity_expression).flat_map(
            lambda raw: _pair_with_labels(document, pair, certificates, _split_labels(raw))
        )


def _pair_with_labels(
    document: Path,
    pair: PathExpressionPair,
    certificates: list[x509.Certificate],
    labels: list[str],
) -> Result[list[CertificateRecord]]:
    if len(labels) != len(certificates):
        return Result.from_error(
            CorrelationCountMismatchError(
                document,
                expected=len(certificates),
                actual=len(labels),
                expression=pair.identity_expression,
            )
        )
    return Result.success(
        [
            CertificateRecord(
                certificate=cert,
                identity=label,
                source_expression=pair.certificate_expression,
            )
            for cert, label in zip(certificates, labels, strict=True)
        ]
    )


# ─────────────────────── Cluster secret ───────────────────────


def read_secret(secret: SecretLike) -> Result[list[CertificateRecord]]:
    """
    Decode the certificates stored under the secret's `tls.crt` key.

    A secret without that key fails with MISSING_FIELD naming the secret.
    """
    if TLS_CERT_KEY not in secret.data:
        return Result.from_error(MissingFieldError(secret.name, TLS_CERT_KEY))

    return (
        decode_pem(secret.data[TLS_CERT_KEY])
        .map(_uncorrelated)
        .peek(lambda records: log.debug("secret.parsed", secret=secret.name, certificates=len(records)))
    )
