"""
证书过期分类服务
"""
from typing import Dict, List, Any
from ..models import CheckResult, CertificateStatus


class ExpiryCalculator:
    """证书过期计算器"""

    def __init__(self, warning_days: int = 30):
        """
        初始化过期计算器

        Args:
            warning_days: 提前警告天数，默认30天
        """
        self.warning_days = warning_days

    def is_expiring_soon(self, result: CheckResult) -> bool:
        """判断证书是否即将过期（在警告期内）"""
        return result.is_expiring_soon(self.warning_days)

    def needs_attention(self, result: CheckResult) -> bool:
        """判断结果是否需要通知运维人员"""
        return not result.ok or result.is_expired or self.is_expiring_soon(result)

    def categorize_results(self, results: List[CheckResult]) -> Dict[str, Any]:
        """
        对检查结果进行分类

        Args:
            results: 检查结果列表

        Returns:
            dict: 分类结果
        """
        return {
            'total': len(results),
            'unavailable': [r for r in results if r.status is CertificateStatus.UNAVAILABLE],
            'expired': [r for r in results if r.is_expired],
            'expiring_soon': [r for r in results if self.is_expiring_soon(r)],
            'healthy': [r for r in results
                        if r.status is CertificateStatus.VALID and not self.is_expiring_soon(r)]
        }

    def get_expiry_summary(self, results: List[CheckResult]) -> str:
        """
        获取过期状态摘要

        Args:
            results: 检查结果列表

        Returns:
            str: 摘要信息
        """
        categorized = self.categorize_results(results)

        summary_parts = [f"总计: {categorized['total']} 个域名"]

        if categorized['healthy']:
            summary_parts.append(f"健康: {len(categorized['healthy'])} 个")

        if categorized['expiring_soon']:
            summary_parts.append(f"即将过期({self.warning_days}天内): {len(categorized['expiring_soon'])} 个")

        if categorized['expired']:
            summary_parts.append(f"已过期: {len(categorized['expired'])} 个")

        if categorized['unavailable']:
            summary_parts.append(f"无法获取: {len(categorized['unavailable'])} 个")

        return ", ".join(summary_parts)
