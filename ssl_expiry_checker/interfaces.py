"""
服务接口定义
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Sequence
from .models import CheckResult


class DomainConfigManagerInterface(ABC):
    """域名配置管理器接口"""

    @abstractmethod
    def get_domains(self) -> List[str]:
        """获取域名列表"""
        pass

    @abstractmethod
    def validate_domain(self, domain: str) -> bool:
        """验证域名格式"""
        pass


class TLSProbeInterface(ABC):
    """TLS连接探测接口"""

    @abstractmethod
    def connect_and_probe(self, domain_name: str) -> List[bytes]:
        """建立TLS连接并返回对端证书链（DER编码）"""
        pass


class CertificateEvaluatorInterface(ABC):
    """证书评估器接口"""

    @abstractmethod
    def evaluate(self, domain_name: str, peer_chain: Sequence[bytes], checked_at: datetime) -> CheckResult:
        """根据对端证书链计算检查结果"""
        pass


class SSLCertificateCheckerInterface(ABC):
    """SSL证书检查器接口"""

    @abstractmethod
    def check_certificate(self, domain: str) -> CheckResult:
        """检查单个域名的SSL证书"""
        pass


class NotificationServiceInterface(ABC):
    """通知服务接口"""

    @abstractmethod
    def send_report(self, results: List[CheckResult]) -> bool:
        """发送证书检查报告"""
        pass

    @abstractmethod
    def format_notification_content(self, results: List[CheckResult]) -> str:
        """格式化通知内容"""
        pass


class LoggerServiceInterface(ABC):
    """日志服务接口"""

    @abstractmethod
    def log_check_start(self, domain_count: int):
        """记录检查开始"""
        pass

    @abstractmethod
    def log_check_result(self, result: CheckResult):
        """记录检查结果"""
        pass

    @abstractmethod
    def log_error(self, domain: str, error: Exception):
        """记录错误信息"""
        pass
