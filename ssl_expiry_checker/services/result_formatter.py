"""
检查结果输出格式化
"""
import json

from ..models import CheckResult, CertificateStatus


def format_text(result: CheckResult) -> str:
    """
    格式化为单行文本

    [v] certificate of sha512.badssl.com expires in 512 days (44,236,800 seconds)
    [x] certificate of expired.badssl.com is expired
    """
    if result.status is CertificateStatus.VALID:
        return (
            f"[v] certificate of {result.domain_name} "
            f"expires in {result.days:,} days ({result.seconds:,} seconds)"
        )
    return f"[x] certificate of {result.domain_name} is expired"


def format_json(result: CheckResult) -> str:
    """格式化为单行JSON"""
    return json.dumps(result.to_json(), ensure_ascii=False)
