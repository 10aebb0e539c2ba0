"""
SNS通知服务
"""
import os
from typing import List, Optional
import logging
from datetime import datetime, timezone

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..interfaces import NotificationServiceInterface
from ..models import CheckResult
from .expiry_calculator import ExpiryCalculator


class SNSNotificationService(NotificationServiceInterface):
    """SNS通知服务实现"""

    def __init__(self, topic_arn: Optional[str] = None, region_name: Optional[str] = None,
                 warning_days: int = 30):
        """
        初始化SNS通知服务

        Args:
            topic_arn: SNS主题ARN，如果为None则从环境变量读取
            region_name: AWS区域名称，如果为None则从ARN中提取
            warning_days: 提前警告天数
        """
        self.topic_arn = topic_arn or os.getenv('SNS_TOPIC_ARN')
        self.expiry_calculator = ExpiryCalculator(warning_days)
        self.logger = logging.getLogger(__name__)

        if region_name:
            self.region_name = region_name
        elif self.topic_arn and self.topic_arn.startswith('arn:aws:sns:'):
            self.region_name = self.topic_arn.split(':')[3]
        else:
            self.region_name = os.getenv('AWS_REGION', 'us-east-1')

        self.sns_client = boto3.client('sns', region_name=self.region_name)

    def send_report(self, results: List[CheckResult]) -> bool:
        """
        发送需要关注的证书检查结果

        Args:
            results: 全部检查结果

        Returns:
            bool: 发送是否成功（无需发送时也返回True）
        """
        attention = [r for r in results if self.expiry_calculator.needs_attention(r)]
        if not attention:
            self.logger.info("所有证书状态正常，无需发送通知")
            return True

        if not self.topic_arn:
            self.logger.error("SNS主题ARN未配置")
            return False

        try:
            response = self.sns_client.publish(
                TopicArn=self.topic_arn,
                Subject=self._format_subject(attention),
                Message=self.format_notification_content(attention)
            )
        except ClientError as e:
            error = e.response['Error']
            self.logger.error(f"SNS发送失败 - {error['Code']}: {error['Message']}")
            return False
        except BotoCoreError as e:
            self.logger.error(f"发送SNS通知时发生错误: {e}")
            return False

        self.logger.info(f"SNS通知发送成功，MessageId: {response.get('MessageId')}")
        return True

    def format_notification_content(self, results: List[CheckResult]) -> str:
        """
        格式化通知内容

        Args:
            results: 检查结果列表

        Returns:
            str: 格式化的通知内容
        """
        if not results:
            return "所有SSL证书状态正常。"

        categorized = self.expiry_calculator.categorize_results(results)

        lines = [
            "SSL证书过期检查报告",
            "=" * 30,
            f"发送时间: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S')} UTC",
            ""
        ]

        if categorized['expired']:
            lines.append("已过期证书:")
            for result in categorized['expired']:
                lines.append(f"• {result.domain_name}")
                lines.append(f"  过期时间: {result.not_after.strftime('%Y-%m-%d %H:%M:%S')}")
                lines.append(f"  已过期: {abs(result.days)} 天")
            lines.append("")

        if categorized['expiring_soon']:
            lines.append(f"即将过期证书 ({self.expiry_calculator.warning_days}天内):")
            for result in categorized['expiring_soon']:
                lines.append(f"• {result.domain_name}")
                lines.append(f"  过期时间: {result.not_after.strftime('%Y-%m-%d %H:%M:%S')}")
                lines.append(f"  剩余天数: {result.days} 天")
            lines.append("")

        if categorized['unavailable']:
            lines.append("无法获取证书:")
            for result in categorized['unavailable']:
                reason = result.reason.value if result.reason else 'unknown'
                lines.append(f"• {result.domain_name}")
                lines.append(f"  原因: {reason}")
                lines.append(f"  检查时间: {result.checked_at.strftime('%Y-%m-%d %H:%M:%S')}")
            lines.append("")

        lines.append("此消息由SSL证书检查工具自动发送。")

        return "\n".join(lines)

    def _format_subject(self, results: List[CheckResult]) -> str:
        """格式化消息主题"""
        categorized = self.expiry_calculator.categorize_results(results)
        expired_count = len(categorized['expired'])
        expiring_count = len(categorized['expiring_soon'])
        unavailable_count = len(categorized['unavailable'])

        if expired_count > 0:
            return f"SSL证书警报: {expired_count}个证书已过期"
        elif expiring_count > 0:
            return f"SSL证书提醒: {expiring_count}个证书即将过期"
        elif unavailable_count > 0:
            return f"SSL证书提醒: {unavailable_count}个域名无法获取证书"
        return "SSL证书状态报告"
