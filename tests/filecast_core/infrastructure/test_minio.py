"""
Unit tests for MinIO infrastructure client.

The MinIO client should:
- Be a singleton for connection reuse
- Be configured from filecast_core.config settings
"""

from unittest.mock import MagicMock, patch

import pytest


class TestMinioClientConnector:
    """Tests for MinIO singleton connector."""

    def test_get_instance_returns_minio_client(self, mock_minio_module):
        from filecast_core.infrastructure.minio import MinioClientConnector

        client = MinioClientConnector.get_instance()

        assert client is mock_minio_module.return_value

    def test_returns_same_instance_on_multiple_calls(self, mock_minio_module):
        """Multiple calls should return the same instance (singleton)."""
        from filecast_core.infrastructure.minio import MinioClientConnector

        client1 = MinioClientConnector.get_instance()
        client2 = MinioClientConnector.get_instance()

        assert client1 is client2
        mock_minio_module.assert_called_once()

    def test_uses_settings_for_configuration(self, mock_minio_module):
        from filecast_core.infrastructure.minio import MinioClientConnector

        with patch("filecast_core.infrastructure.minio.settings") as mock_settings:
            mock_settings.MINIO_ENDPOINT = "minio.example.com:9000"
            mock_settings.MINIO_ACCESS_KEY = "myaccess"
            mock_settings.MINIO_SECRET_KEY = "mysecret"
            mock_settings.MINIO_SECURE = True

            MinioClientConnector.get_instance()

        call_kwargs = mock_minio_module.call_args[1]
        assert call_kwargs["endpoint"] == "minio.example.com:9000"
        assert call_kwargs["access_key"] == "myaccess"
        assert call_kwargs["secure"] is True

    def test_construction_failure_is_raised(self, mock_minio_module):
        from filecast_core.infrastructure.minio import MinioClientConnector

        mock_minio_module.side_effect = ValueError("bad endpoint")

        with pytest.raises(ValueError):
            MinioClientConnector.get_instance()


class TestGetMinioClientFunction:
    """Tests for the convenience function."""

    def test_get_minio_client_returns_client(self, mock_minio_module):
        from filecast_core.infrastructure.minio import get_minio_client

        assert get_minio_client() is mock_minio_module.return_value


# --- Fixtures ---


@pytest.fixture
def mock_minio_module():
    """Mock the Minio class and reset the singleton around each test."""
    from filecast_core.infrastructure.minio import MinioClientConnector

    MinioClientConnector.reset()
    with patch("filecast_core.infrastructure.minio.Minio") as mock_minio:
        mock_minio.return_value = MagicMock()
        yield mock_minio
    MinioClientConnector.reset()
