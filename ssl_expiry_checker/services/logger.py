"""
日志服务
"""
import os
import logging
import traceback
from datetime import datetime, timezone
from typing import Dict, Any, Optional, Sequence
from ..interfaces import LoggerServiceInterface
from ..models import CheckResult, CertificateStatus


class LoggerService(LoggerServiceInterface):
    """日志服务实现"""

    def __init__(self, logger_name: str = "ssl_expiry_checker", log_level: Optional[str] = None,
                 warning_days: int = 30):
        """
        初始化日志服务

        Args:
            logger_name: 日志器名称
            log_level: 日志级别，如果为None则从环境变量读取
            warning_days: 提前警告天数
        """
        self.logger_name = logger_name
        self.log_level = log_level or os.getenv('LOG_LEVEL', 'INFO')
        self.warning_days = warning_days

        # 配置日志器
        self.logger = logging.getLogger(logger_name)
        self._configure_logger()

        # 执行统计
        self.reset_stats()

    def _configure_logger(self):
        """配置日志器"""
        level = getattr(logging, self.log_level.upper(), logging.INFO)
        self.logger.setLevel(level)

        # 避免重复添加处理器
        if not self.logger.handlers:
            # 输出到stderr，stdout留给检查结果
            handler = logging.StreamHandler()
            handler.setLevel(level)

            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            handler.setFormatter(formatter)

            self.logger.addHandler(handler)
        else:
            for handler in self.logger.handlers:
                handler.setLevel(level)

        self.logger.propagate = False

    def log_check_start(self, domain_count: int):
        """
        记录检查开始

        Args:
            domain_count: 要检查的域名数量
        """
        self.execution_stats['start_time'] = datetime.now(timezone.utc)
        self.execution_stats['total_domains'] = domain_count

        self.logger.info(f"开始SSL证书检查，共 {domain_count} 个域名")

    def log_check_result(self, result: CheckResult):
        """
        记录检查结果

        Args:
            result: 检查结果
        """
        domain = result.domain_name

        if result.status is CertificateStatus.UNAVAILABLE:
            self.execution_stats['unavailable_checks'] += 1
            reason = result.reason.value if result.reason else 'unknown'
            self.logger.error(
                f"无法获取证书 - 域名: {domain}, "
                f"原因: {reason}, "
                f"详情: {result.detail}"
            )
            return

        self.execution_stats['successful_checks'] += 1

        if result.is_expired:
            self.logger.warning(
                f"证书已过期 - 域名: {domain}, "
                f"过期时间: {result.not_after.isoformat()}, "
                f"已过期: {abs(result.days)} 天"
            )
        elif result.is_expiring_soon(self.warning_days):
            self.logger.warning(
                f"证书即将过期 - 域名: {domain}, "
                f"过期时间: {result.not_after.isoformat()}, "
                f"剩余天数: {result.days} 天"
            )
        else:
            self.logger.info(
                f"证书正常 - 域名: {domain}, "
                f"过期时间: {result.not_after.isoformat()}, "
                f"剩余天数: {result.days} 天"
            )

    def log_error(self, domain: str, error: Exception):
        """
        记录错误信息

        Args:
            domain: 域名
            error: 异常对象
        """
        self.logger.error(
            f"域名 {domain} 检查时发生错误: {type(error).__name__}: {str(error)}"
        )

        # 记录详细的堆栈跟踪（调试级别）
        self.logger.debug(f"域名 {domain} 错误堆栈跟踪:\n{''.join(traceback.format_exception(error))}")

    def log_check_end(self):
        """记录检查结束"""
        self.execution_stats['end_time'] = datetime.now(timezone.utc)
        self.logger.info("SSL证书检查完成")

    def log_configuration_info(self, config: Dict[str, Any]):
        """
        记录配置信息

        Args:
            config: 配置信息字典
        """
        self.logger.debug("系统配置信息:")
        for key, value in config.items():
            if key == 'sns_topic_arn' and value:
                parts = value.split(':')
                value = f"{':'.join(parts[:3])}:***:{parts[-1]}" if len(parts) >= 6 else "***"
            self.logger.debug(f"  {key}: {value}")

    def get_execution_summary(self, error_statistics: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        获取执行摘要

        Args:
            error_statistics: 错误处理器给出的错误统计

        Returns:
            Dict[str, Any]: 执行摘要信息
        """
        stats = self.execution_stats
        duration = 0.0
        if stats['start_time'] and stats['end_time']:
            duration = (stats['end_time'] - stats['start_time']).total_seconds()

        return {
            'start_time': stats['start_time'].isoformat() if stats['start_time'] else None,
            'end_time': stats['end_time'].isoformat() if stats['end_time'] else None,
            'duration_seconds': duration,
            'total_domains': stats['total_domains'],
            'successful_checks': stats['successful_checks'],
            'unavailable_checks': stats['unavailable_checks'],
            'error_count': error_statistics['total_errors'] if error_statistics else 0
        }

    def log_execution_summary(self, expiry_summary: Optional[str] = None,
                              error_statistics: Optional[Dict[str, Any]] = None,
                              errors: Sequence[Dict[str, Any]] = ()):
        """
        记录执行摘要

        Args:
            expiry_summary: 证书过期分类摘要
            error_statistics: 错误统计
            errors: 错误处理器记录的错误信息
        """
        summary = self.get_execution_summary(error_statistics)

        self.logger.info(
            f"检查统计: 总计 {summary['total_domains']} 个域名, "
            f"成功 {summary['successful_checks']} 个, "
            f"无法获取 {summary['unavailable_checks']} 个, "
            f"错误 {summary['error_count']} 个, "
            f"耗时 {summary['duration_seconds']:.2f} 秒"
        )

        if expiry_summary:
            self.logger.info(f"证书状态: {expiry_summary}")

        if error_statistics and error_statistics['most_common_error']:
            self.logger.info(
                f"最常见错误: {error_statistics['most_common_error']} "
                f"({error_statistics['most_common_error_count']} 次)"
            )

        for i, error in enumerate(errors[:5], 1):  # 只显示前5个错误
            self.logger.info(f"  错误 {i}: {error['domain']} - {error['error_type']}: {error['error_message']}")

        if len(errors) > 5:
            self.logger.info(f"  ... 还有 {len(errors) - 5} 个错误")

    def reset_stats(self):
        """重置执行统计"""
        self.execution_stats = {
            'start_time': None,
            'end_time': None,
            'total_domains': 0,
            'successful_checks': 0,
            'unavailable_checks': 0
        }
