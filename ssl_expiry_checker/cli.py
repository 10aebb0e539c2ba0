"""
命令行入口
"""
import argparse
import sys
from typing import List, Optional, TextIO

from .exceptions import CertificateCheckError, ConfigurationError
from .models import CheckResult, CertificateSelection
from .services.certificate_evaluator import CertificateEvaluator
from .services.config import CheckerConfig
from .services.domain_config import DomainConfigManager
from .services.error_handler import CheckErrorHandler
from .services.expiry_calculator import ExpiryCalculator
from .services.logger import LoggerService
from .services.result_formatter import format_json, format_text
from .services.sns_notification import SNSNotificationService
from .services.ssl_checker import SSLCertificateChecker, TLSProbe, build_trust_context


class CertificateExpiryCheck:
    """依次检查多个域名并输出结果"""

    def __init__(self, config: CheckerConfig, json_output: bool = False,
                 stdout: Optional[TextIO] = None, stderr: Optional[TextIO] = None):
        """
        初始化检查流程

        Args:
            config: 运行配置
            json_output: 是否以JSON格式输出
            stdout: 结果输出流
            stderr: 错误输出流
        """
        self.config = config
        self.json_output = json_output
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr

        self.logger_service = LoggerService(log_level=config.log_level, warning_days=config.warning_days)
        self.error_handler = CheckErrorHandler()
        self.expiry_calculator = ExpiryCalculator(config.warning_days)

        # TLS上下文只创建一次，所有域名共享
        probe = TLSProbe(
            context=build_trust_context(verify=config.verify),
            timeout=config.timeout,
            port=config.port
        )
        self.checker = SSLCertificateChecker(probe, CertificateEvaluator(config.selection))

        self.logger_service.log_configuration_info(config.to_dict())

    def run(self, domains: List[str]) -> List[CheckResult]:
        """
        检查域名列表

        Args:
            domains: 域名列表

        Returns:
            List[CheckResult]: 成功得到的检查结果，出现硬错误的域名不包含在内
        """
        self.logger_service.log_check_start(len(domains))
        results = []

        for domain in domains:
            try:
                result = self.checker.check_certificate(domain)
            except CertificateCheckError as e:
                self.logger_service.log_error(domain, e)
                error_info = self.error_handler.handle_check_error(domain, e)
                print(f"{error_info['error_type']}: {error_info['error_message']} "
                      f"({error_info['suggested_action']})", file=self.stderr)
                continue

            self.logger_service.log_check_result(result)
            results.append(result)
            print(format_json(result) if self.json_output else format_text(result), file=self.stdout)

        self.logger_service.log_check_end()
        self.logger_service.log_execution_summary(
            expiry_summary=self.expiry_calculator.get_expiry_summary(results),
            error_statistics=self.error_handler.get_error_statistics(),
            errors=self.error_handler.errors
        )
        return results

    @property
    def had_errors(self) -> bool:
        """是否出现过硬错误"""
        return bool(self.error_handler.errors)

    def notify(self, results: List[CheckResult]) -> bool:
        """通过SNS发送需要关注的结果"""
        service = SNSNotificationService(
            topic_arn=self.config.sns_topic_arn,
            warning_days=self.config.warning_days
        )
        return service.send_report(results)


def build_parser() -> argparse.ArgumentParser:
    """构造命令行参数解析器"""
    parser = argparse.ArgumentParser(
        prog="ssl-expiry-checker",
        description="Check expiration date of SSL certificate"
    )
    parser.add_argument("--json", action="store_true", help="Print in JSON format")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Log level (default: LOG_LEVEL or INFO)")
    parser.add_argument("--timeout", type=float,
                        help="Connect/handshake/write timeout in seconds (default: 10)")
    parser.add_argument("--no-verify", action="store_true",
                        help="Do not verify the certificate chain, report expired certificates as expired")
    parser.add_argument("--select", choices=[s.value for s in CertificateSelection],
                        help="Certificate of the peer chain to evaluate (default: last)")
    parser.add_argument("--warning-days", type=int,
                        help="Days before expiry that count as expiring soon (default: 30)")
    parser.add_argument("--notify", action="store_true",
                        help="Publish a report to SNS_TOPIC_ARN when a certificate needs attention")

    subparsers = parser.add_subparsers(dest="command", required=True)
    check = subparsers.add_parser("check", help="Check domain name(s) immediately")
    check.add_argument("domain_name", nargs="*",
                       help="One or many domain names to check (default: DOMAINS)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    命令行入口

    Returns:
        int: 退出码，出现硬错误或通知失败时为1
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = CheckerConfig.from_env().with_overrides(
            timeout=args.timeout,
            selection=CertificateSelection(args.select) if args.select else None,
            verify=False if args.no_verify else None,
            warning_days=args.warning_days,
            log_level=args.log_level
        )
    except ConfigurationError as e:
        parser.error(str(e))

    command = CertificateExpiryCheck(config, json_output=args.json)

    domains = DomainConfigManager(args.domain_name).get_domains()
    if not domains:
        parser.error("no domain name given")

    results = command.run(domains)

    exit_code = 1 if command.had_errors else 0
    if args.notify and not command.notify(results):
        exit_code = 1

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
