"""
域名配置管理服务
"""
import os
import re
from typing import List, Optional, Sequence
import logging

import idna

from ..exceptions import InvalidDomainNameError
from ..interfaces import DomainConfigManagerInterface


# 最后一个标签必须以字母开头，用于排除IP地址
DOMAIN_PATTERN = re.compile(
    r'^(?:[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)*[a-z](?:[a-z0-9-]{0,61}[a-z0-9])?$'
)


def to_ascii_hostname(domain: str) -> str:
    """
    将域名转换为可用于SNI的ASCII形式

    Args:
        domain: 域名，允许国际化域名

    Returns:
        str: 小写的ASCII域名

    Raises:
        InvalidDomainNameError: 域名格式无效
    """
    if not domain or not isinstance(domain, str):
        raise InvalidDomainNameError(str(domain), "域名为空")

    try:
        ascii_name = idna.encode(domain, uts46=True).decode('ascii')
    except idna.IDNAError as e:
        raise InvalidDomainNameError(domain, f"域名 {domain} 格式无效: {e}") from e

    if len(ascii_name) > 253 or not DOMAIN_PATTERN.match(ascii_name):
        raise InvalidDomainNameError(domain, f"域名 {domain} 格式无效")

    return ascii_name


class DomainConfigManager(DomainConfigManagerInterface):
    """域名配置管理器实现"""

    def __init__(self, domains: Optional[Sequence[str]] = None, env_var_name: str = "DOMAINS"):
        """
        初始化域名配置管理器

        Args:
            domains: 命令行给出的域名，为空时从环境变量读取
            env_var_name: 环境变量名称，默认为"DOMAINS"
        """
        self.explicit_domains = list(domains or [])
        self.env_var_name = env_var_name
        self.logger = logging.getLogger(__name__)

    def get_domains(self) -> List[str]:
        """
        获取域名列表，保持输入顺序

        无效域名不会被过滤，由检查器在进行网络操作前报错。

        Returns:
            List[str]: 清理后的域名列表
        """
        if self.explicit_domains:
            raw_domains = self.explicit_domains
        else:
            domains_str = os.getenv(self.env_var_name, "")
            if not domains_str.strip():
                self.logger.warning(f"未指定域名，环境变量 {self.env_var_name} 也为空")
                return []
            raw_domains = domains_str.split(',')

        domains = []
        for domain in raw_domains:
            cleaned = self._clean_domain(domain)
            if cleaned:
                domains.append(cleaned)

        self.logger.info(f"成功加载 {len(domains)} 个域名")
        return domains

    def validate_domain(self, domain: str) -> bool:
        """
        验证域名格式

        Args:
            domain: 要验证的域名

        Returns:
            bool: 域名是否有效
        """
        try:
            to_ascii_hostname(domain)
        except InvalidDomainNameError:
            return False
        return True

    def _clean_domain(self, domain: str) -> str:
        """
        清理域名格式

        Args:
            domain: 原始域名

        Returns:
            str: 清理后的域名
        """
        domain = domain.strip()

        # 移除协议前缀
        if domain.startswith('https://'):
            domain = domain[8:]
        elif domain.startswith('http://'):
            domain = domain[7:]

        # 移除路径部分
        if '/' in domain:
            domain = domain.split('/')[0]

        # 移除端口号
        if ':' in domain:
            domain = domain.split(':')[0]

        return domain.strip().lower()
