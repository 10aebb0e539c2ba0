"""
集成测试（本地TLS服务器）
"""
import pytest
import socket
import ssl
import struct
import threading
import time
from datetime import datetime, timezone, timedelta

from conftest import generate_certificate, to_pem, key_to_pem

from ssl_expiry_checker.exceptions import ConnectionFailedError
from ssl_expiry_checker.models import CertificateStatus, UnavailableReason, EPOCH
from ssl_expiry_checker.services.ssl_checker import SSLCertificateChecker, TLSProbe, build_trust_context


class LocalTLSServer:
    """在本地回环地址上接受一次TLS连接的服务器"""

    def __init__(self, certfile, keyfile, close_after_handshake=False):
        self.context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        self.context.load_cert_chain(certfile, keyfile)
        self.listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.listener.bind(("127.0.0.1", 0))
        self.listener.listen(1)
        self.listener.settimeout(10)
        self.port = self.listener.getsockname()[1]
        self.close_after_handshake = close_after_handshake
        self.closed = threading.Event()
        self.thread = threading.Thread(target=self._serve, daemon=True)

    def _serve(self):
        try:
            conn, _ = self.listener.accept()
        except OSError:
            self.closed.set()
            return
        conn.settimeout(10)
        try:
            with self.context.wrap_socket(conn, server_side=True) as tls:
                if self.close_after_handshake:
                    # SO_LINGER 为0时关闭连接会发送RST
                    tls.setsockopt(socket.SOL_SOCKET, socket.SO_LINGER, struct.pack('ii', 1, 0))
                    return
                tls.recv(4096)
                tls.sendall(b"HTTP/1.1 204 No Content\r\nConnection: close\r\n\r\n")
        except OSError:
            # 客户端拒绝证书时握手失败
            conn.close()
        finally:
            self.closed.set()

    def __enter__(self):
        self.thread.start()
        return self

    def __exit__(self, *exc_info):
        self.thread.join(timeout=10)
        self.listener.close()


class DelayedRequestProbe(TLSProbe):
    """握手完成后等到服务器关闭连接才发送请求"""

    def __init__(self, server, **kwargs):
        super().__init__(**kwargs)
        self.server = server

    def build_http_request(self, domain_name):
        self.server.closed.wait(timeout=10)
        # 等待RST到达客户端
        time.sleep(0.2)
        return super().build_http_request(domain_name)


@pytest.fixture
def certificate_files(tmp_path):
    """生成CA和服务器证书文件"""
    def factory(not_after):
        now = datetime.now(timezone.utc)
        ca = generate_certificate("Test Root CA", not_after=now + timedelta(days=3650), is_ca=True)
        leaf_cert, leaf_key = generate_certificate(
            "localhost",
            not_before=min(not_after, now) - timedelta(days=30),
            not_after=not_after,
            issuer=ca
        )

        cafile = tmp_path / "ca.pem"
        certfile = tmp_path / "server.pem"
        keyfile = tmp_path / "server.key"
        cafile.write_bytes(to_pem(ca[0]))
        certfile.write_bytes(to_pem(leaf_cert))
        keyfile.write_bytes(key_to_pem(leaf_key))
        return str(cafile), str(certfile), str(keyfile)
    return factory


class TestLocalTLSServer:
    """本地TLS服务器集成测试"""

    def _checker(self, port, cafile, verify=True):
        context = build_trust_context(verify=verify, cafile=cafile)
        return SSLCertificateChecker(TLSProbe(context=context, timeout=5, port=port))

    def test_valid_certificate(self, certificate_files):
        """测试有效证书"""
        not_after = datetime.now(timezone.utc).replace(microsecond=0) + timedelta(days=365)
        cafile, certfile, keyfile = certificate_files(not_after)

        with LocalTLSServer(certfile, keyfile) as server:
            result = self._checker(server.port, cafile).check_certificate("localhost")

        assert result.status is CertificateStatus.VALID
        assert result.ok is True
        assert result.days > 0
        assert result.not_after == not_after
        assert result.not_after == result.checked_at + timedelta(seconds=result.seconds)
        assert result.days == result.seconds // 86400

    def test_expired_certificate_fails_handshake(self, certificate_files):
        """测试校验证书时过期证书导致握手失败"""
        not_after = datetime.now(timezone.utc) - timedelta(days=5)
        cafile, certfile, keyfile = certificate_files(not_after)

        with LocalTLSServer(certfile, keyfile) as server:
            result = self._checker(server.port, cafile).check_certificate("localhost")

        assert result.status is CertificateStatus.UNAVAILABLE
        assert result.reason is UnavailableReason.HANDSHAKE_FAILED
        assert result.days == 0
        assert result.seconds == 0
        assert result.not_after == EPOCH
        assert result.checked_at > EPOCH

    def test_expired_certificate_without_verification(self, certificate_files):
        """测试不校验证书时报告已过期"""
        not_after = datetime.now(timezone.utc).replace(microsecond=0) - timedelta(days=5)
        cafile, certfile, keyfile = certificate_files(not_after)

        with LocalTLSServer(certfile, keyfile) as server:
            result = self._checker(server.port, cafile, verify=False).check_certificate("localhost")

        assert result.status is CertificateStatus.EXPIRED
        assert result.ok is True
        assert result.not_after == not_after
        assert result.days <= -5
        assert result.seconds < 0

    def test_peer_closes_after_handshake(self, certificate_files):
        """测试握手后服务器立即关闭连接时返回不可用结果"""
        not_after = datetime.now(timezone.utc) + timedelta(days=365)
        cafile, certfile, keyfile = certificate_files(not_after)

        with LocalTLSServer(certfile, keyfile, close_after_handshake=True) as server:
            probe = DelayedRequestProbe(
                server, context=build_trust_context(cafile=cafile), timeout=5, port=server.port
            )
            result = SSLCertificateChecker(probe).check_certificate("localhost")

        assert result.status is CertificateStatus.UNAVAILABLE
        assert result.reason is UnavailableReason.PROBE_FAILED
        assert result.ok is False
        assert result.days == 0
        assert result.seconds == 0
        assert result.not_after == EPOCH
        assert result.checked_at > EPOCH

    def test_port_not_listening(self):
        """测试端口未监听时抛出连接错误"""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
        sock.close()

        checker = SSLCertificateChecker(TLSProbe(timeout=5, port=port))

        with pytest.raises(ConnectionFailedError):
            checker.check_certificate("localhost")
