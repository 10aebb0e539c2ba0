"""
SSL证书检查服务
"""
import ssl
import socket
from datetime import datetime, timezone
from typing import List, Optional
import logging

import certifi

from ..exceptions import (
    CheckTimeoutError,
    ConnectionFailedError,
    DNSResolutionError,
    HandshakeFailure,
)
from ..interfaces import SSLCertificateCheckerInterface, TLSProbeInterface
from ..models import CheckResult, UnavailableReason
from .certificate_evaluator import CertificateEvaluator
from .domain_config import to_ascii_hostname


def build_trust_context(verify: bool = True, cafile: Optional[str] = None) -> ssl.SSLContext:
    """
    创建共享的TLS上下文

    上下文创建后不再修改，可在多个检查之间共享。

    Args:
        verify: 是否校验证书链和主机名
        cafile: 根证书文件，默认使用 certifi 随附的公共根证书

    Returns:
        ssl.SSLContext: TLS客户端上下文
    """
    context = ssl.create_default_context(cafile=cafile or certifi.where())
    if not verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


class TLSProbe(TLSProbeInterface):
    """TLS连接探测器"""

    def __init__(self, context: Optional[ssl.SSLContext] = None, timeout: float = 10.0, port: int = 443):
        """
        初始化TLS探测器

        Args:
            context: TLS上下文，默认使用公共根证书
            timeout: 连接、握手和写入的超时时间（秒）
            port: SSL端口，默认443
        """
        self.context = context or build_trust_context()
        self.timeout = timeout
        self.port = port
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def build_http_request(domain_name: str) -> bytes:
        """构造探测用的HTTP请求"""
        return (
            "GET / HTTP/1.1\r\n"
            f"Host: {domain_name}\r\n"
            "Connection: close\r\n"
            "Accept-Encoding: identity\r\n"
            "\r\n"
        ).encode('ascii')

    def connect_and_probe(self, domain_name: str) -> List[bytes]:
        """
        建立TLS连接、发送探测请求并返回对端证书链

        Args:
            domain_name: 域名

        Returns:
            List[bytes]: DER编码的证书链，顺序与服务器发送顺序一致

        Raises:
            InvalidDomainNameError: 域名格式无效
            DNSResolutionError: DNS解析失败
            ConnectionFailedError: TCP连接失败
            CheckTimeoutError: 超时
            HandshakeFailure: 握手或探测请求失败
        """
        hostname = to_ascii_hostname(domain_name)
        sock = self._open_connection(hostname)

        with sock:
            with self.context.wrap_socket(sock, server_hostname=hostname,
                                          do_handshake_on_connect=False) as ssock:
                self._run_io(hostname, ssock.do_handshake, UnavailableReason.HANDSHAKE_FAILED)
                self.logger.debug(f"域名 {hostname} TLS握手完成，协议: {ssock.version()}")

                self._run_io(hostname, lambda: ssock.sendall(self.build_http_request(hostname)),
                             UnavailableReason.PROBE_FAILED)

                return self._peer_chain(ssock)

    def _open_connection(self, hostname: str) -> socket.socket:
        """建立TCP连接"""
        try:
            return socket.create_connection((hostname, self.port), timeout=self.timeout)
        except socket.gaierror as e:
            raise DNSResolutionError(hostname, f"域名 {hostname} DNS解析失败: {e}") from e
        except socket.timeout as e:
            raise CheckTimeoutError(
                hostname, f"连接 {hostname}:{self.port} 超时（{self.timeout}秒）", self.timeout
            ) from e
        except OSError as e:
            raise ConnectionFailedError(hostname, f"无法连接 {hostname}:{self.port}: {e}") from e

    def _run_io(self, hostname: str, operation, reason: UnavailableReason):
        """执行握手或写入操作，将失败转换为对应的错误"""
        try:
            operation()
        except socket.timeout as e:
            raise CheckTimeoutError(
                hostname, f"域名 {hostname} TLS会话超时（{self.timeout}秒）", self.timeout
            ) from e
        except OSError as e:
            # ssl.SSLError 也是 OSError 的子类
            raise HandshakeFailure(hostname, f"{type(e).__name__}: {e}", reason) from e

    def _peer_chain(self, ssock: ssl.SSLSocket) -> List[bytes]:
        """
        读取对端证书链

        Python 3.13 之前没有公开的证书链接口，此时只返回叶子证书。
        """
        get_chain = getattr(ssock, 'get_unverified_chain', None)
        if get_chain is not None:
            return list(get_chain() or [])

        leaf = ssock.getpeercert(binary_form=True)
        return [leaf] if leaf else []


class SSLCertificateChecker(SSLCertificateCheckerInterface):
    """SSL证书检查器实现"""

    def __init__(self, probe: Optional[TLSProbeInterface] = None,
                 evaluator: Optional[CertificateEvaluator] = None):
        """
        初始化SSL证书检查器

        Args:
            probe: TLS探测器
            evaluator: 证书评估器
        """
        self.probe = probe or TLSProbe()
        self.evaluator = evaluator or CertificateEvaluator()
        self.logger = logging.getLogger(__name__)

    def check_certificate(self, domain: str) -> CheckResult:
        """
        检查单个域名的SSL证书

        连接类错误直接抛出；握手、探测和解析失败返回不可用结果。

        Args:
            domain: 要检查的域名

        Returns:
            CheckResult: 检查结果
        """
        checked_at = datetime.now(timezone.utc).replace(microsecond=0)

        try:
            peer_chain = self.probe.connect_and_probe(domain)
        except HandshakeFailure as e:
            self.logger.warning(f"域名 {domain} 无法获取证书（{e.reason.value}）: {e}")
            return CheckResult.unavailable(domain, checked_at, e.reason, str(e))

        self.logger.debug(f"域名 {domain} 返回 {len(peer_chain)} 个证书")
        return self.evaluator.evaluate(domain, peer_chain, checked_at)
