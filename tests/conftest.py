"""
测试用证书生成工具
"""
from datetime import datetime, timezone, timedelta

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID, ExtendedKeyUsageOID


def _name(common_name):
    return x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])


def _key_usage(is_ca):
    return x509.KeyUsage(
        digital_signature=True,
        content_commitment=False,
        key_encipherment=False,
        data_encipherment=False,
        key_agreement=False,
        key_cert_sign=is_ca,
        crl_sign=is_ca,
        encipher_only=False,
        decipher_only=False
    )


def generate_certificate(common_name="example.com", not_before=None, not_after=None,
                         issuer=None, is_ca=False):
    """
    生成证书

    Args:
        common_name: 证书CN，非CA证书同时写入SAN
        not_before: 生效时间
        not_after: 过期时间
        issuer: (证书, 私钥)，为None时自签名
        is_ca: 是否为CA证书

    Returns:
        tuple: (证书, 私钥)
    """
    now = datetime.now(timezone.utc)
    not_before = not_before or now - timedelta(days=1)
    not_after = not_after or now + timedelta(days=365)

    key = ec.generate_private_key(ec.SECP256R1())
    issuer_cert, issuer_key = issuer if issuer else (None, key)
    issuer_name = issuer_cert.subject if issuer_cert else _name(common_name)
    issuer_public_key = issuer_key.public_key()

    builder = (
        x509.CertificateBuilder()
        .subject_name(_name(common_name))
        .issuer_name(issuer_name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before)
        .not_valid_after(not_after)
        .add_extension(x509.BasicConstraints(ca=is_ca, path_length=None), critical=True)
        .add_extension(_key_usage(is_ca), critical=True)
        .add_extension(x509.SubjectKeyIdentifier.from_public_key(key.public_key()), critical=False)
        .add_extension(
            x509.AuthorityKeyIdentifier.from_issuer_public_key(issuer_public_key), critical=False
        )
    )

    if not is_ca:
        builder = (
            builder
            .add_extension(x509.SubjectAlternativeName([x509.DNSName(common_name)]), critical=False)
            .add_extension(x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]), critical=False)
        )

    cert = builder.sign(issuer_key, hashes.SHA256())
    return cert, key


def to_der(cert) -> bytes:
    return cert.public_bytes(serialization.Encoding.DER)


def to_pem(cert) -> bytes:
    return cert.public_bytes(serialization.Encoding.PEM)


def key_to_pem(key) -> bytes:
    return key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption()
    )


@pytest.fixture
def der_certificate():
    """生成指定过期时间的DER证书"""
    def factory(not_after, common_name="example.com"):
        not_before = min(not_after, datetime.now(timezone.utc)) - timedelta(days=30)
        cert, _ = generate_certificate(common_name, not_before=not_before, not_after=not_after)
        return to_der(cert)
    return factory
