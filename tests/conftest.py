"""
Shared test fixtures and helpers for the cert-extractor test suite.

Certificates are generated on the fly with cryptography (self-signed,
EC P-256) so tests never depend on checked-in key material.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import TypeAlias

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

CertificateFactory: TypeAlias = Callable[..., x509.Certificate]


def make_certificate(
    common_name: str = "test.example.com",
    serial_number: int | None = None,
    not_before: datetime | None = None,
    lifetime: timedelta = timedelta(days=365),
) -> x509.Certificate:
    """Create a self-signed certificate for `common_name`."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    start = not_before or datetime(2024, 1, 1, tzinfo=UTC)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(serial_number or x509.random_serial_number())
        .not_valid_before(start)
        .not_valid_after(start + lifetime)
        .sign(key, hashes.SHA256())
    )


def to_pem(*certificates: x509.Certificate) -> bytes:
    """Concatenate the PEM encoding of every certificate."""
    return b"".join(cert.public_bytes(serialization.Encoding.PEM) for cert in certificates)


@pytest.fixture()
def certificate_factory() -> CertificateFactory:
    """Return the self-signed certificate factory."""
    return make_certificate


@pytest.fixture()
def certificate() -> x509.Certificate:
    """A single self-signed certificate."""
    return make_certificate("single.example.com", serial_number=1001)
