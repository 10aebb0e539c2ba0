"""
数据模型定义
"""
from dataclasses import dataclass
from datetime import datetime, timezone, timedelta
from enum import Enum
from typing import Optional, Dict, Any


# 证书过期时间不可用时的占位值
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

SECONDS_PER_DAY = 86400


class CertificateStatus(Enum):
    """证书检查状态"""
    VALID = "valid"
    EXPIRED = "expired"
    UNAVAILABLE = "unavailable"


class UnavailableReason(Enum):
    """无法确定证书过期时间的原因"""
    HANDSHAKE_FAILED = "handshake_failed"
    PROBE_FAILED = "probe_failed"
    PARSE_FAILED = "parse_failed"


class CertificateSelection(Enum):
    """从证书链中选择待评估证书的方式"""
    LAST = "last"
    FIRST = "first"


@dataclass(frozen=True)
class CheckResult:
    """单个域名的证书检查结果"""
    domain_name: str
    checked_at: datetime
    status: CertificateStatus
    not_after: datetime = EPOCH
    reason: Optional[UnavailableReason] = None
    detail: Optional[str] = None

    @classmethod
    def from_not_after(cls, domain_name: str, checked_at: datetime, not_after: datetime) -> 'CheckResult':
        """
        根据证书过期时间构造检查结果

        Args:
            domain_name: 域名
            checked_at: 检查时间
            not_after: 证书过期时间

        Returns:
            CheckResult: VALID 或 EXPIRED 状态的结果
        """
        status = CertificateStatus.EXPIRED if not_after < checked_at else CertificateStatus.VALID
        return cls(
            domain_name=domain_name,
            checked_at=checked_at,
            status=status,
            not_after=not_after
        )

    @classmethod
    def unavailable(cls, domain_name: str, checked_at: datetime,
                    reason: UnavailableReason, detail: Optional[str] = None) -> 'CheckResult':
        """构造无法获取证书信息的结果"""
        return cls(
            domain_name=domain_name,
            checked_at=checked_at,
            status=CertificateStatus.UNAVAILABLE,
            reason=reason,
            detail=detail
        )

    @property
    def ok(self) -> bool:
        """证书是否已成功获取并解析"""
        return self.status is not CertificateStatus.UNAVAILABLE

    @property
    def seconds(self) -> int:
        """距离过期的秒数（负数表示已过期，不可用时为0）"""
        if not self.ok:
            return 0
        return int((self.not_after - self.checked_at).total_seconds())

    @property
    def days(self) -> int:
        """距离过期的整天数，向下取整"""
        return self.seconds // SECONDS_PER_DAY

    @property
    def is_expired(self) -> bool:
        """判断是否已过期"""
        return self.status is CertificateStatus.EXPIRED

    def is_expiring_soon(self, warning_days: int = 30) -> bool:
        """判断是否即将过期（警告期内）"""
        return self.status is CertificateStatus.VALID and 0 <= self.days <= warning_days

    def to_json(self) -> Dict[str, Any]:
        """转换为对外的JSON结构（不包含 not_after）"""
        return {
            'ok': self.ok,
            'days': self.days,
            'domain_name': self.domain_name,
            'checked_at': self.checked_at.isoformat(),
            'seconds': self.seconds
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'CheckResult':
        """
        从JSON结构还原检查结果

        not_after 由 checked_at 与 seconds 推导；不可用结果无法还原原因。
        """
        checked_at = datetime.fromisoformat(data['checked_at']).astimezone(timezone.utc)
        if not data['ok']:
            return cls(
                domain_name=data['domain_name'],
                checked_at=checked_at,
                status=CertificateStatus.UNAVAILABLE
            )
        not_after = checked_at + timedelta(seconds=int(data['seconds']))
        return cls.from_not_after(data['domain_name'], checked_at, not_after)
