"""
运行配置加载与验证
"""
import os
import math
import re
import logging
from dataclasses import dataclass, replace
from typing import Dict, Any, List, Optional, Mapping

from ..exceptions import ConfigurationError
from ..models import CertificateSelection


VALID_LOG_LEVELS = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}

TRUE_VALUES = {'1', 'true', 'yes', 'on'}
FALSE_VALUES = {'0', 'false', 'no', 'off'}

ARN_PATTERN = r'^arn:aws:sns:[a-z0-9-]+:\d{12}:[a-zA-Z0-9_-]+$'


@dataclass(frozen=True)
class CheckerConfig:
    """检查器运行配置"""
    timeout: float = 10.0
    port: int = 443
    selection: CertificateSelection = CertificateSelection.LAST
    verify: bool = True
    warning_days: int = 30
    log_level: str = 'INFO'
    sns_topic_arn: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'CheckerConfig':
        """
        从环境变量加载配置

        Args:
            environ: 环境变量映射，默认为 os.environ

        Returns:
            CheckerConfig: 配置对象

        Raises:
            ConfigurationError: 任一配置项无效
        """
        environ = os.environ if environ is None else environ
        validator = ConfigValidator()
        values = validator.parse(environ)
        return cls(**values)

    def with_overrides(self, **overrides: Any) -> 'CheckerConfig':
        """
        使用命令行参数覆盖配置，值为None的项保持不变

        Raises:
            ConfigurationError: 覆盖值无效
        """
        changes = {key: value for key, value in overrides.items() if value is not None}

        errors = ConfigValidator().validate_values(changes)
        if errors:
            raise ConfigurationError(errors)

        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """转换为便于记录日志的字典"""
        return {
            'timeout': self.timeout,
            'port': self.port,
            'selection': self.selection.value,
            'verify': self.verify,
            'warning_days': self.warning_days,
            'log_level': self.log_level,
            'sns_topic_arn': self.sns_topic_arn or ''
        }


class ConfigValidator:
    """配置验证器"""

    def __init__(self):
        """初始化配置验证器"""
        self.logger = logging.getLogger(__name__)

        # 支持的环境变量
        self.env_vars = {
            'CHECK_TIMEOUT': '连接超时时间（秒）',
            'CHECK_PORT': 'TLS端口',
            'CERT_SELECTION': '证书链选择方式（last/first）',
            'VERIFY_CERTIFICATES': '是否校验证书（true/false）',
            'WARNING_DAYS': '提前警告天数',
            'LOG_LEVEL': '日志级别',
            'SNS_TOPIC_ARN': 'SNS主题ARN'
        }

    def parse(self, environ: Mapping[str, str]) -> Dict[str, Any]:
        """
        解析并验证环境变量

        Args:
            environ: 环境变量映射

        Returns:
            Dict[str, Any]: CheckerConfig 的构造参数

        Raises:
            ConfigurationError: 收集到的全部错误
        """
        errors: List[str] = []
        values: Dict[str, Any] = {}

        timeout = environ.get('CHECK_TIMEOUT')
        if timeout:
            try:
                values['timeout'] = float(timeout)
                if not self.is_valid_timeout(values['timeout']):
                    errors.append(f"CHECK_TIMEOUT 必须为有限正数: {timeout}")
            except ValueError:
                errors.append(f"CHECK_TIMEOUT 不是有效数字: {timeout}")

        port = environ.get('CHECK_PORT')
        if port:
            if port.isdigit() and self.is_valid_port(int(port)):
                values['port'] = int(port)
            else:
                errors.append(f"CHECK_PORT 不是有效端口: {port}")

        selection = environ.get('CERT_SELECTION')
        if selection:
            try:
                values['selection'] = CertificateSelection(selection.strip().lower())
            except ValueError:
                errors.append(f"CERT_SELECTION 必须为 last 或 first: {selection}")

        verify = environ.get('VERIFY_CERTIFICATES')
        if verify:
            if verify.strip().lower() in TRUE_VALUES:
                values['verify'] = True
            elif verify.strip().lower() in FALSE_VALUES:
                values['verify'] = False
            else:
                errors.append(f"VERIFY_CERTIFICATES 必须为 true 或 false: {verify}")

        warning_days = environ.get('WARNING_DAYS')
        if warning_days:
            if warning_days.isdigit():
                values['warning_days'] = int(warning_days)
            else:
                errors.append(f"WARNING_DAYS 必须为非负整数: {warning_days}")

        log_level = environ.get('LOG_LEVEL')
        if log_level:
            if log_level.upper() in VALID_LOG_LEVELS:
                values['log_level'] = log_level.upper()
            else:
                errors.append(f"LOG_LEVEL 无效: {log_level}")

        topic_arn = environ.get('SNS_TOPIC_ARN')
        if topic_arn:
            if self.validate_sns_topic_arn(topic_arn):
                values['sns_topic_arn'] = topic_arn
            else:
                errors.append(f"SNS_TOPIC_ARN 格式无效: {topic_arn}")

        if errors:
            for error in errors:
                self.logger.error(f"配置错误: {error}")
            raise ConfigurationError(errors)

        return values

    def validate_values(self, values: Mapping[str, Any]) -> List[str]:
        """
        验证已转换类型的配置值，用于命令行覆盖

        Args:
            values: CheckerConfig 字段名到值的映射

        Returns:
            List[str]: 错误信息列表，为空表示全部有效
        """
        errors: List[str] = []

        if 'timeout' in values and not self.is_valid_timeout(values['timeout']):
            errors.append(f"超时时间必须为有限正数: {values['timeout']}")

        if 'port' in values and not self.is_valid_port(values['port']):
            errors.append(f"端口无效: {values['port']}")

        if 'warning_days' in values and values['warning_days'] < 0:
            errors.append(f"提前警告天数必须为非负整数: {values['warning_days']}")

        if 'log_level' in values and values['log_level'] not in VALID_LOG_LEVELS:
            errors.append(f"日志级别无效: {values['log_level']}")

        for error in errors:
            self.logger.error(f"配置错误: {error}")

        return errors

    @staticmethod
    def is_valid_timeout(timeout: float) -> bool:
        """超时时间必须为有限正数，socket 不接受 nan 和负数"""
        return math.isfinite(timeout) and timeout > 0

    @staticmethod
    def is_valid_port(port: int) -> bool:
        """端口必须在 1-65535 之间"""
        return 0 < port < 65536

    def validate_sns_topic_arn(self, topic_arn: str) -> bool:
        """
        验证SNS主题ARN格式

        Args:
            topic_arn: 主题ARN

        Returns:
            bool: 是否有效
        """
        return bool(re.match(ARN_PATTERN, topic_arn))
