"""
cert_extractor: X.509 certificate extraction from configuration sources.

Reads certificates out of standalone PEM files, kubeconfig-style YAML
documents (inline base64 or file references, correlated to cluster and
user names), and cluster TLS secrets, and returns them as uniform
CertificateRecord values for downstream inspection such as expiry audits.

Every reader returns a Result from the railway in `cert_extractor.result`.
"""

__version__ = "0.1.0"
