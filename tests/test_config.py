"""
Tests for codec configuration.
"""

import pytest

from qrst_tools.config import CodecConfig, get_default_config, set_default_config
from qrst_tools.qrst import loads

from conftest import blank_record, make_header


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every QRST_* variable and reset the default configuration."""
    for name in ("QRST_FILL_BLANK", "QRST_VERIFY", "QRST_FILLER", "QRST_COMPRESS"):
        monkeypatch.delenv(name, raising=False)
    set_default_config(None)
    yield monkeypatch
    set_default_config(None)


class TestCodecConfig:
    """Tests for CodecConfig construction."""

    def test_defaults(self):
        config = CodecConfig()
        assert config.fill_blank_tracks is False
        assert config.verify_on_load is False
        assert config.disassemble_filler == 0xF6
        assert config.compress_tracks is True

    def test_from_env_empty(self, clean_env):
        """Test that an empty environment gives the defaults."""
        assert CodecConfig.from_env() == CodecConfig()

    def test_from_env(self, clean_env):
        """Test reading every variable."""
        clean_env.setenv("QRST_FILL_BLANK", "yes")
        clean_env.setenv("QRST_VERIFY", "1")
        clean_env.setenv("QRST_FILLER", "0xE5")
        clean_env.setenv("QRST_COMPRESS", "off")

        config = CodecConfig.from_env()
        assert config.fill_blank_tracks is True
        assert config.verify_on_load is True
        assert config.disassemble_filler == 0xE5
        assert config.compress_tracks is False

    @pytest.mark.parametrize("value", ["banana", "256", "-1"])
    def test_invalid_filler_ignored(self, clean_env, value):
        """Test that an unusable filler value falls back to the default."""
        clean_env.setenv("QRST_FILLER", value)
        assert CodecConfig.from_env().disassemble_filler == 0xF6

    def test_from_pytest_config(self, clean_env, pytestconfig):
        """Test reading the ini options (unset in this project's ini)."""
        config = CodecConfig.from_pytest_config(pytestconfig)
        assert config.fill_blank_tracks is False
        assert config.verify_on_load is False

    def test_from_pytest_config_overrides_env(self, clean_env):
        """Test that ini values take precedence over the environment."""
        class FakeConfig:
            def getini(self, name):
                return {"qrst_fill_blank": "true", "qrst_verify": "false"}[name]

        clean_env.setenv("QRST_VERIFY", "1")
        config = CodecConfig.from_pytest_config(FakeConfig())
        assert config.fill_blank_tracks is True
        assert config.verify_on_load is False


class TestDefaultConfig:
    """Tests for the package default configuration."""

    def test_created_from_env(self, clean_env):
        clean_env.setenv("QRST_FILL_BLANK", "true")
        assert get_default_config().fill_blank_tracks is True

    def test_cached(self, clean_env):
        """Test that the default is created once."""
        assert get_default_config() is get_default_config()

    def test_set_default(self, clean_env):
        """Test that loaders pick up an installed default."""
        data = make_header() + blank_record(0, 0, 0xF6)

        set_default_config(CodecConfig(fill_blank_tracks=True))
        assert loads(data).records[0].data[:4] == b"\xF6\xF6\xF6\xF6"

        set_default_config(CodecConfig(fill_blank_tracks=False))
        assert loads(data).records[0].data[:4] == bytes(4)

    def test_codec_config_fixture(self, codec_config: CodecConfig):
        """Test that the fixture installs its configuration as the default."""
        assert get_default_config() is codec_config
