"""
Tests for transport configuration loading and option resolution.
"""

import pytest

from src.core.config import ConfigurationError, connection_options, load_config
from src.domain.models import DEFAULT_DOCKER_HOST


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file_uses_defaults(self, tmp_path):
        """No file means the documented defaults."""
        config = load_config(tmp_path / "dokken.yaml")
        assert config.read_timeout == 3600
        assert config.write_timeout == 3600
        assert config.docker_host is None
        assert config.image_prefix is None
        assert config.check_transfer is True

    def test_reads_yaml(self, tmp_path):
        """Values in the YAML file are applied."""
        path = tmp_path / "dokken.yaml"
        path.write_text("image_prefix: someara\nread_timeout: 60\ncheck_transfer: false\n")

        config = load_config(path)

        assert config.image_prefix == "someara"
        assert config.read_timeout == 60
        assert config.check_transfer is False

    def test_empty_file_uses_defaults(self, tmp_path):
        """An empty YAML document is treated as no settings."""
        path = tmp_path / "dokken.yaml"
        path.write_text("")
        assert load_config(path).read_timeout == 3600

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        """DOCKER_HOST and DOKKEN_* variables win over the file."""
        path = tmp_path / "dokken.yaml"
        path.write_text("docker_host: tcp://file:2376\nimage_prefix: file\n")
        monkeypatch.setenv("DOCKER_HOST", "tcp://env:2376")
        monkeypatch.setenv("DOKKEN_IMAGE_PREFIX", "env")
        monkeypatch.setenv("DOKKEN_WRITE_TIMEOUT", "120")

        config = load_config(path)

        assert config.docker_host == "tcp://env:2376"
        assert config.image_prefix == "env"
        assert config.write_timeout == 120

    def test_non_mapping_rejected(self, tmp_path):
        """A YAML list is not a configuration."""
        path = tmp_path / "dokken.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(path)

    def test_invalid_value_rejected(self, tmp_path):
        """Bad values surface as ConfigurationError."""
        path = tmp_path / "dokken.yaml"
        path.write_text("read_timeout: -5\n")
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_unknown_key_rejected(self, tmp_path):
        """Typos in the config file are caught."""
        path = tmp_path / "dokken.yaml"
        path.write_text("imge_prefix: someara\n")
        with pytest.raises(ConfigurationError):
            load_config(path)


class TestConnectionOptions:
    """Tests for the connection options resolver."""

    def test_resolves_fields(self):
        """Merged data maps onto ConnectionOptions."""
        opts = connection_options(
            {
                "instance_name": "web",
                "docker_host": "tcp://10.0.0.5:2376",
                "kitchen_container": {"Id": "abc"},
                "image_prefix": "someara",
                "read_timeout": 10,
                "write_timeout": 20,
            }
        )
        assert opts.instance_name == "web"
        assert opts.docker_host == "tcp://10.0.0.5:2376"
        assert opts.kitchen_container == {"Id": "abc"}
        assert opts.image_prefix == "someara"
        assert (opts.read_timeout, opts.write_timeout) == (10, 20)

    def test_instance_name_required(self):
        """instance_name is mandatory."""
        with pytest.raises(ConfigurationError, match="instance_name"):
            connection_options({"docker_host": "tcp://10.0.0.5:2376"})

    def test_docker_host_from_environment(self, monkeypatch):
        """DOCKER_HOST supplies the endpoint when none is configured."""
        monkeypatch.setenv("DOCKER_HOST", "tcp://env:2376")
        opts = connection_options({"instance_name": "web", "docker_host": None})
        assert opts.docker_host == "tcp://env:2376"

    def test_docker_host_default(self):
        """Without configuration or environment, the local socket is used."""
        opts = connection_options({"instance_name": "web"})
        assert opts.docker_host == DEFAULT_DOCKER_HOST

    def test_equal_inputs_give_equal_options(self):
        """Resolution is pure."""
        data = {"instance_name": "web", "kitchen_container": {"Ports": {"22/tcp": []}}}
        assert connection_options(data) == connection_options(dict(data))

    def test_different_inputs_give_different_options(self):
        """Any field change is visible through equality."""
        base = {"instance_name": "web"}
        assert connection_options(base) != connection_options({"instance_name": "db"})
        assert connection_options(base) != connection_options({**base, "image_prefix": "x"})

    def test_invalid_timeout(self):
        """Malformed values become ConfigurationError."""
        with pytest.raises(ConfigurationError):
            connection_options({"instance_name": "web", "read_timeout": "soon"})
