"""Unit tests for utils/config_manager.py"""

import os
import sys
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

_python_dir = Path(__file__).parent.parent / "python"
if str(_python_dir.absolute()) not in sys.path:
    sys.path.insert(0, str(_python_dir.absolute()))

_INPUT_VARS = (
    "ENVIRONMENT",
    "CONFIG_FILE",
    "INPUT_REPOSITORY",
    "REPOSITORY",
    "INPUT_GH_TOKEN",
    "GH_TOKEN",
    "GITHUB_TOKEN",
    "GITHUB_API_URL",
    "MAX_WORKERS",
)


@pytest.fixture(autouse=True)
def patch_config_manager_import():
    """Isolate tests from the caller's environment"""
    with patch.dict(os.environ, {}):
        for name in _INPUT_VARS:
            os.environ.pop(name, None)
        yield


@pytest.fixture
def config_file():
    """Write a YAML config file and remove it afterwards"""
    paths = []

    def _write(config):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            yaml.dump(config, f)
            paths.append(f.name)
            return f.name

    yield _write

    for path in paths:
        os.unlink(path)


class TestEnvironmentSwitch:
    """Tests for should_load_config_file"""

    @pytest.mark.parametrize("environment", ["development", "test", "staging", "Development"])
    def test_loads_in_non_production_environments(self, environment):
        """Test a set, non-production ENVIRONMENT enables the config file"""
        from utils.config_manager import should_load_config_file

        assert should_load_config_file(environment) is True

    @pytest.mark.parametrize("environment", ["production", "PRODUCTION", "", "   "])
    def test_skips_in_production_or_unset(self, environment):
        """Test production or an unset ENVIRONMENT skips the config file"""
        from utils.config_manager import should_load_config_file

        assert should_load_config_file(environment) is False

    def test_reads_environment_variable(self):
        """Test the switch falls back to the ENVIRONMENT variable"""
        from utils.config_manager import should_load_config_file

        with patch.dict(os.environ, {"ENVIRONMENT": "development"}):
            assert should_load_config_file() is True
        assert should_load_config_file() is False


class TestConfigManagerInitialization:
    """Tests for ConfigManager initialization"""

    def test_uses_defaults_when_file_not_loaded(self, config_file):
        """Test the file is ignored in production even when it exists"""
        from utils.config_manager import ConfigManager

        path = config_file({"github": {"per_page": 10}})
        cm = ConfigManager(config_file=path, validate=False)

        assert cm.load_file is False
        assert cm.get_per_page() == 100

    def test_loads_config_from_yaml_file(self, config_file):
        """Test loading configuration from a YAML file in development"""
        from utils.config_manager import ConfigManager

        path = config_file(
            {
                "github": {"repository": "acme/widgets", "per_page": 50},
                "analysis": {"max_workers": 4},
            }
        )

        with patch.dict(os.environ, {"ENVIRONMENT": "development"}):
            cm = ConfigManager(config_file=path, validate=False)

        assert cm.get_repository() == "acme/widgets"
        assert cm.get_per_page() == 50
        assert cm.get_max_workers() == 4

    def test_merges_user_config_with_defaults(self, config_file):
        """Test that user config is merged with defaults"""
        from utils.config_manager import ConfigManager

        path = config_file({"retry": {"max_retries": 1}})
        cm = ConfigManager(config_file=path, validate=False, load_file=True)

        assert cm.get_max_retries() == 1
        assert cm.get_retry_initial_delay() == 1.0
        assert cm.get_api_url() == "https://api.github.com"

    def test_missing_file_uses_defaults(self):
        """Test a missing file falls back to defaults"""
        from utils.config_manager import ConfigManager

        cm = ConfigManager(config_file="/nonexistent/config.yaml", validate=False, load_file=True)

        assert cm.get_per_page() == 100
        assert cm.get_repository() is None

    def test_config_file_env_var(self, config_file):
        """Test CONFIG_FILE selects the file"""
        from utils.config_manager import ConfigManager

        path = config_file({"github": {"timeout": 5}})
        with patch.dict(os.environ, {"CONFIG_FILE": path, "ENVIRONMENT": "test"}):
            cm = ConfigManager(validate=False)

        assert cm.config_file == path
        assert cm.get_timeout() == 5


class TestInputs:
    """Tests for repository and token lookup"""

    @pytest.fixture
    def cm(self):
        from utils.config_manager import ConfigManager

        return ConfigManager(config_file="/nonexistent/config.yaml", validate=False, load_file=False)

    def test_actions_inputs_take_precedence(self, cm):
        """Test INPUT_* variables win over plain ones"""
        with patch.dict(
            os.environ,
            {
                "INPUT_REPOSITORY": "acme/widgets",
                "REPOSITORY": "acme/other",
                "INPUT_GH_TOKEN": "input-token",
                "GH_TOKEN": "gh-token",
            },
        ):
            assert cm.get_repository() == "acme/widgets"
            assert cm.get_token() == "input-token"

    def test_falls_back_to_plain_variables(self, cm):
        """Test REPOSITORY and GITHUB_TOKEN are used without Actions inputs"""
        with patch.dict(os.environ, {"REPOSITORY": "octocat/dotfiles", "GITHUB_TOKEN": "github-token"}):
            assert cm.get_repository() == "octocat/dotfiles"
            assert cm.get_token() == "github-token"

    def test_empty_inputs_are_ignored(self, cm):
        """Test empty Actions inputs do not shadow other sources"""
        with patch.dict(os.environ, {"INPUT_GH_TOKEN": "", "GH_TOKEN": "gh-token"}):
            assert cm.get_token() == "gh-token"

    def test_token_never_read_from_config(self, cm):
        """Test a token in the config file is ignored"""
        cm.config["github"]["token"] = "committed-token"
        assert cm.get_token() is None

    def test_max_workers_env_override(self, cm):
        """Test MAX_WORKERS overrides the config value"""
        with patch.dict(os.environ, {"MAX_WORKERS": "8"}):
            assert cm.get_max_workers() == 8
        assert cm.get_max_workers() == 0

    def test_print_config_masks_token(self, cm, capsys):
        """Test the token is never printed"""
        with patch.dict(os.environ, {"GH_TOKEN": "ghp_supersecret"}):
            cm.print_config()

        out = capsys.readouterr().out
        assert "ghp_supersecret" not in out
        assert "Token: ***" in out


class TestValidation:
    """Tests for validate_config"""

    def _manager(self, config_file, config):
        from utils.config_manager import ConfigManager

        return ConfigManager(config_file=config_file(config), validate=False, load_file=True)

    def test_defaults_are_valid(self):
        """Test the built-in defaults pass validation"""
        from utils.config_manager import ConfigManager

        ConfigManager(config_file="/nonexistent/config.yaml", validate=True, load_file=False)

    @pytest.mark.parametrize(
        "config, expected",
        [
            ({"github": {"api_url": "http://api.github.com"}}, "github.api_url"),
            ({"github": {"per_page": 0}}, "github.per_page"),
            ({"github": {"per_page": 101}}, "github.per_page"),
            ({"github": {"timeout": 0}}, "github.timeout"),
            ({"analysis": {"max_workers": -1}}, "analysis.max_workers"),
            ({"retry": {"max_retries": -1}}, "retry.max_retries"),
            ({"retry": {"initial_delay": 10.0, "max_delay": 1.0}}, "retry.max_delay"),
            ({"retry": {"exponential_base": 0.5}}, "retry.exponential_base"),
        ],
    )
    def test_invalid_values_raise(self, config_file, config, expected):
        """Test each invalid value is reported"""
        from utils.error_utils import ConfigValidationError

        cm = self._manager(config_file, config)
        with pytest.raises(ConfigValidationError) as exc_info:
            cm.validate_config()

        assert expected in str(exc_info.value)

    def test_collects_all_errors(self, config_file):
        """Test several errors are reported together"""
        from utils.error_utils import ConfigValidationError

        cm = self._manager(config_file, {"github": {"per_page": 0, "timeout": 0}})
        with pytest.raises(ConfigValidationError) as exc_info:
            cm.validate_config()

        assert "github.per_page" in str(exc_info.value)
        assert "github.timeout" in str(exc_info.value)

    def test_high_max_workers_only_warns(self, config_file, caplog):
        """Test a very high worker cap is a warning, not an error"""
        cm = self._manager(config_file, {"analysis": {"max_workers": 500}})

        cm.validate_config()

        assert "max_workers is very high" in caplog.text
