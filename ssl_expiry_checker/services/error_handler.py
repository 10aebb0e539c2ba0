"""
错误处理服务
"""
from typing import Any, Dict, List
from datetime import datetime, timezone

from ..exceptions import (
    CertificateCheckError,
    CheckTimeoutError,
    ConnectionFailedError,
    DNSResolutionError,
    InvalidDomainNameError,
    NoCertificateError,
)


class CheckErrorHandler:
    """证书检查错误处理器"""

    def __init__(self):
        """初始化错误处理器"""
        self.errors: List[Dict[str, Any]] = []

    def handle_check_error(self, domain: str, error: Exception) -> Dict[str, Any]:
        """
        处理单个域名检查时的错误

        Args:
            domain: 域名
            error: 异常对象

        Returns:
            Dict[str, Any]: 错误处理结果
        """
        cause = error.__cause__
        error_info = {
            'domain': domain,
            'error_type': type(error).__name__,
            'error_message': str(error),
            'cause_type': type(cause).__name__ if cause is not None else None,
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'suggested_action': self._get_suggested_action(error)
        }

        self.errors.append(error_info)

        return error_info

    def _get_suggested_action(self, error: Exception) -> str:
        """
        获取错误的建议处理方案

        Args:
            error: 异常对象

        Returns:
            str: 建议的处理方案
        """
        if isinstance(error, InvalidDomainNameError):
            return "检查域名拼写，不要包含IP地址或非法字符"
        elif isinstance(error, DNSResolutionError):
            return "检查域名是否正确，DNS服务器是否可用"
        elif isinstance(error, CheckTimeoutError):
            return "检查网络连接，考虑增加超时时间"
        elif isinstance(error, ConnectionFailedError):
            return "检查目标服务器是否运行，443端口是否开放"
        elif isinstance(error, NoCertificateError):
            return "服务器未提供证书，检查服务器SSL配置"
        elif isinstance(error, CertificateCheckError):
            return "检查网络连接和服务器状态"
        else:
            return "未知错误，请查看调试日志"

    def get_error_statistics(self) -> Dict[str, Any]:
        """
        获取错误统计信息

        Returns:
            Dict[str, Any]: 错误统计
        """
        error_types: Dict[str, int] = {}
        for error_info in self.errors:
            error_type = error_info['error_type']
            error_types[error_type] = error_types.get(error_type, 0) + 1

        most_common_error = max(error_types.items(), key=lambda x: x[1]) if error_types else None

        return {
            'total_errors': len(self.errors),
            'error_types': error_types,
            'most_common_error': most_common_error[0] if most_common_error else None,
            'most_common_error_count': most_common_error[1] if most_common_error else 0
        }
