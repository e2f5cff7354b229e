"""
Domain models: value objects describing where certificates live and what was found.

Everything here is a frozen dataclass or an Enum. The mutable
CertificateSource that owns parsed records lives in `cert_extractor.source`.
"""

from __future__ import annotations

import base64
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, unique
from typing import TYPE_CHECKING, Any

from cryptography import x509
from cryptography.hazmat.primitives import hashes

from cert_extractor.result import FailureDescription

if TYPE_CHECKING:
    from cert_extractor.source import CertificateSource


@unique
class Encoding(Enum):
    """How certificate material is stored at a path-expression match."""

    INLINE_BASE64 = "inline-base64"
    FILE_REFERENCE = "file-reference"


@unique
class SourceFormat(Enum):
    """The kind of source a CertificateSource reads from."""

    DIRECT_FILE = "direct-file"
    STRUCTURED_DOCUMENT = "structured-document"
    CLUSTER_SECRET = "cluster-secret"


@dataclass(frozen=True, slots=True)
class PathExpressionPair:
    """
    Where to find certificates inside a structured document, and who owns them.

    `certificate_expression` selects the certificate material,
    `identity_expression` selects the owning labels (cluster or user names)
    in the same order, and `encoding` says how the material is stored.
    """

    certificate_expression: str
    identity_expression: str
    encoding: Encoding


@dataclass(frozen=True, slots=True)
class CertificateRecord:
    """
    One decoded certificate plus its correlation data.

    `identity` and `source_expression` are only set for certificates that
    came out of a structured document.
    """

    certificate: x509.Certificate = field(repr=False)
    identity: str | None = None
    source_expression: str | None = None

    @property
    def subject(self) -> str:
        return self.certificate.subject.rfc4514_string()

    @property
    def issuer(self) -> str:
        return self.certificate.issuer.rfc4514_string()

    @property
    def serial_number(self) -> int:
        return self.certificate.serial_number

    @property
    def not_valid_before(self) -> datetime:
        return self.certificate.not_valid_before_utc

    @property
    def not_valid_after(self) -> datetime:
        return self.certificate.not_valid_after_utc

    @property
    def fingerprint_sha256(self) -> str:
        return self.certificate.fingerprint(hashes.SHA256()).hex()


@dataclass(frozen=True, slots=True)
class ClusterSecret:
    """
    A cluster secret: a name plus string keys mapped to raw byte payloads.

    `data` holds already-decoded bytes. Use `from_manifest` for the
    base64-encoded form returned by the Kubernetes API.
    """

    name: str
    data: Mapping[str, bytes] = field(default_factory=dict, repr=False)
    namespace: str | None = None

    @classmethod
    def from_manifest(cls, manifest: Mapping[str, Any]) -> ClusterSecret:
        """
        Build a ClusterSecret from a Secret manifest or API response dict.

        `data` values are base64 strings; `stringData` values are plain text
        and win over `data` for the same key, as the API server applies them.
        Raises ValueError if a `data` value is not valid base64.
        """
        metadata = manifest.get("metadata") or {}
        payload: dict[str, bytes] = {}
        for key, value in (manifest.get("data") or {}).items():
            payload[key] = base64.b64decode(value or "", validate=True)
        for key, value in (manifest.get("stringData") or {}).items():
            payload[key] = (value or "").encode()
        return cls(
            name=metadata.get("name", ""),
            data=payload,
            namespace=metadata.get("namespace"),
        )


@dataclass(frozen=True, slots=True)
class SourceError:
    """A failure paired with the source that produced it."""

    underlying: FailureDescription
    source: CertificateSource

    @property
    def message(self) -> str:
        return self.underlying.message

    @property
    def exception(self) -> BaseException | None:
        return self.underlying.exception

    def __str__(self) -> str:
        return f"{self.source.path}: {self.underlying.message}"
