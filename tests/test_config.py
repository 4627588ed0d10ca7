"""Tests for configuration loading"""
import pytest

from nim_proxy.core.config import (
    expand_env_vars,
    expand_config_env_vars,
    get_config,
    load_config,
    merge_config,
    str_to_bool,
)
from nim_proxy.models.config import DEFAULT_MODEL_MAPPING


@pytest.mark.unit
class TestEnvExpansion:
    """Test environment variable expansion"""

    def test_simple_substitution(self, monkeypatch):
        """Test ${VAR}"""
        monkeypatch.setenv('NIM_TEST_VAR', 'value')
        assert expand_env_vars('x-${NIM_TEST_VAR}-y') == 'x-value-y'

    def test_default_value(self, monkeypatch):
        """Test ${VAR:-default} with the variable unset"""
        monkeypatch.delenv('NIM_TEST_MISSING', raising=False)
        assert expand_env_vars('${NIM_TEST_MISSING:-https://a.b/v1}') == 'https://a.b/v1'

    def test_missing_without_default(self, monkeypatch):
        """Test that an unset variable without default becomes empty"""
        monkeypatch.delenv('NIM_TEST_MISSING', raising=False)
        assert expand_env_vars('${NIM_TEST_MISSING}') == ''

    def test_non_string_untouched(self):
        """Test that non-strings pass through"""
        assert expand_env_vars(42) == 42

    def test_recursive_expansion(self, monkeypatch):
        """Test expansion through nested dicts and lists"""
        monkeypatch.setenv('NIM_TEST_VAR', 'v')
        config = {'a': ['${NIM_TEST_VAR}', 1], 'b': {'c': '${NIM_TEST_VAR}'}}

        assert expand_config_env_vars(config) == {'a': ['v', 1], 'b': {'c': 'v'}}


@pytest.mark.unit
class TestHelpers:
    """Test config helpers"""

    @pytest.mark.parametrize('value, expected', [
        ('true', True), ('ON', True), ('1', True), ('no', False), ('', False), (False, False), (1, True)
    ])
    def test_str_to_bool(self, value, expected):
        """Test boolean coercion"""
        assert str_to_bool(value) is expected

    def test_merge_config(self):
        """Test that nested keys merge and scalars override"""
        base = {'a': {'x': 1, 'y': 2}, 'b': 1}
        merged = merge_config(base, {'a': {'y': 3}, 'c': 4})

        assert merged == {'a': {'x': 1, 'y': 3}, 'b': 1, 'c': 4}
        assert base == {'a': {'x': 1, 'y': 2}, 'b': 1}


@pytest.mark.unit
class TestLoadConfig:
    """Test load_config"""

    def test_missing_file_uses_defaults(self, tmp_path):
        """Test built-in defaults when no file exists"""
        config = load_config(str(tmp_path / 'absent.yaml'))

        assert config.backend.api_base == 'https://integrate.api.nvidia.com/v1'
        assert config.backend.api_key is None
        assert config.server.port == 3000
        assert config.reasoning.show_reasoning is True
        assert config.reasoning.enable_thinking_mode is True
        assert config.model_mapping == DEFAULT_MODEL_MAPPING
        assert config.passthrough_models == []

    def test_defaults_read_environment(self, tmp_path, monkeypatch):
        """Test that the defaults honour NIM_* and toggle variables"""
        monkeypatch.setenv('NIM_API_BASE', 'http://localhost:8000/v1')
        monkeypatch.setenv('NIM_API_KEY', 'nvapi-123')
        monkeypatch.setenv('SHOW_REASONING', 'false')
        monkeypatch.setenv('PORT', '8080')

        config = load_config(str(tmp_path / 'absent.yaml'))

        assert config.backend.api_base == 'http://localhost:8000/v1'
        assert config.backend.api_key == 'nvapi-123'
        assert config.reasoning.show_reasoning is False
        assert config.server.port == 8080

    def test_file_overrides_defaults(self, write_config, test_config_dict):
        """Test that file values win over the defaults"""
        test_config_dict['reasoning'] = {'show_reasoning': 'off'}
        path = write_config(test_config_dict)

        config = load_config(path)

        assert config.backend.api_base == 'https://nim.test/v1'
        assert config.reasoning.show_reasoning is False
        assert config.reasoning.enable_thinking_mode is True
        assert config.model_mapping == test_config_dict['model_mapping']
        assert config.defaults.top_p == 0.95

    def test_get_config_uses_config_path(self, write_config, test_config_dict):
        """Test the cached accessor"""
        write_config(test_config_dict)

        config = get_config()

        assert config.backend.api_key == 'test-nim-key'
        assert get_config() is config
