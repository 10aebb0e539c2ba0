"""
证书评估服务
"""
from datetime import datetime, timezone
from typing import Sequence
import logging

from cryptography import x509

from ..exceptions import NoCertificateError
from ..interfaces import CertificateEvaluatorInterface
from ..models import CheckResult, CertificateSelection, UnavailableReason


def parse_not_after(der_bytes: bytes) -> datetime:
    """
    解析DER编码证书的过期时间

    Args:
        der_bytes: DER编码的X.509证书

    Returns:
        datetime: UTC过期时间，精确到秒

    Raises:
        ValueError: 证书无法解析
    """
    cert = x509.load_der_x509_certificate(der_bytes)
    return cert.not_valid_after_utc.replace(microsecond=0, tzinfo=timezone.utc)


class CertificateEvaluator(CertificateEvaluatorInterface):
    """
    证书评估器实现

    证书链的顺序与TLS库返回的顺序一致（服务器发送的顺序，通常叶子证书在前）。
    默认评估链中的最后一个证书；FIRST 则评估服务器发送的第一个证书。
    """

    def __init__(self, selection: CertificateSelection = CertificateSelection.LAST):
        self.selection = selection
        self.logger = logging.getLogger(__name__)

    def select_certificate(self, domain_name: str, peer_chain: Sequence[bytes]) -> bytes:
        """
        从证书链中选择待评估的证书

        Raises:
            NoCertificateError: 证书链为空
        """
        if not peer_chain:
            raise NoCertificateError(domain_name, f"域名 {domain_name} 未提供任何证书")

        if self.selection is CertificateSelection.FIRST:
            return peer_chain[0]
        return peer_chain[-1]

    def evaluate(self, domain_name: str, peer_chain: Sequence[bytes], checked_at: datetime) -> CheckResult:
        """
        根据对端证书链计算检查结果

        Args:
            domain_name: 域名
            peer_chain: DER编码的证书链
            checked_at: 检查开始时间

        Returns:
            CheckResult: 检查结果，解析失败时为不可用状态
        """
        certificate = self.select_certificate(domain_name, peer_chain)

        try:
            not_after = parse_not_after(certificate)
        except ValueError as e:
            self.logger.warning(f"域名 {domain_name} 的证书无法解析: {e}")
            return CheckResult.unavailable(
                domain_name, checked_at, UnavailableReason.PARSE_FAILED, str(e)
            )

        return CheckResult.from_not_after(domain_name, checked_at, not_after)
