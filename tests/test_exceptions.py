"""测试异常类"""

from promised.exceptions import (
    CapabilityNotConfiguredError,
    CodecError,
    ConfigurationError,
    NetworkError,
    PromisedError,
    StatusError,
    StorageError,
    TransportError,
    ValidationError,
)


class TestPromisedError:
    """测试基础异常类"""

    def test_basic_error(self):
        error = PromisedError("Test error message")

        assert str(error) == "Test error message"
        assert error.message == "Test error message"
        assert error.context == {}

    def test_error_with_context(self):
        error = PromisedError("Test error", {"key": "value", "number": 42})

        assert "Test error" in str(error)
        assert "Context: key=value, number=42" in str(error)


class TestNetworkErrors:
    """测试网络异常"""

    def test_transport_error(self):
        error = TransportError("Connection refused", url="http://host.test/a")

        assert isinstance(error, NetworkError)
        assert error.status_code is None
        assert str(error) == "Connection refused | URL: http://host.test/a"

    def test_status_error(self):
        error = StatusError("404 - Not Found : http://host.test/a", 404, url="http://host.test/a")

        assert isinstance(error, NetworkError)
        assert error.status_code == 404
        assert "Status: 404" in str(error)


class TestOtherErrors:
    """测试存储、编解码、配置异常"""

    def test_storage_error(self):
        error = StorageError("Couldn't write", file_path="/tmp/a.bin", operation="write")

        assert str(error) == "Couldn't write | Operation: write | File: /tmp/a.bin"

    def test_codec_error(self):
        error = CodecError("Invalid gzip data", codec="gzip")

        assert error.codec == "gzip"
        assert "Codec: gzip" in str(error)

    def test_capability_not_configured(self):
        error = CapabilityNotConfiguredError("xml_parser")

        assert isinstance(error, ConfigurationError)
        assert error.capability == "xml_parser"
        assert error.config_key == "xml_parser"
        assert "Capability 'xml_parser' is not configured" in str(error)

    def test_hierarchy(self):
        for cls in (ValidationError, ConfigurationError, NetworkError, StorageError, CodecError):
            assert issubclass(cls, PromisedError)
