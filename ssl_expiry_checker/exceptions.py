"""
异常定义
"""
from typing import Optional

from .models import UnavailableReason


class CertificateCheckError(Exception):
    """证书检查错误基类"""

    def __init__(self, domain_name: str, message: str):
        self.domain_name = domain_name
        super().__init__(message)


class InvalidDomainNameError(CertificateCheckError):
    """域名格式无效，未进行任何网络操作"""


class DNSResolutionError(CertificateCheckError):
    """DNS解析失败"""


class ConnectionFailedError(CertificateCheckError):
    """TCP连接失败（拒绝连接、不可达等）"""


class CheckTimeoutError(CertificateCheckError):
    """连接、握手或写入超时"""

    def __init__(self, domain_name: str, message: str, timeout: Optional[float] = None):
        self.timeout = timeout
        super().__init__(domain_name, message)


class NoCertificateError(CertificateCheckError):
    """握手完成但对端未提供任何证书"""


class HandshakeFailure(CertificateCheckError):
    """
    建立连接后TLS握手或探测请求失败

    该错误不会传递给调用方，而是被转换为不可用的检查结果。
    """

    def __init__(self, domain_name: str, message: str, reason: UnavailableReason):
        self.reason = reason
        super().__init__(domain_name, message)


class ConfigurationError(Exception):
    """配置无效"""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))
