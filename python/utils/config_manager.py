#!/usr/bin/env python3
"""
Configuration Manager for the untagged container version cleaner

This module handles loading and managing configuration from config.yaml
and environment variables.

The config file is a local development convenience: it is only read when
ENVIRONMENT is set to something other than "production". In CI the tool is
configured entirely through environment variables (GitHub Actions inputs
arrive as INPUT_<NAME>).
"""

import logging
import os
import re
from typing import Any, Dict, Optional

import yaml

from utils.error_utils import ConfigValidationError

PRODUCTION_ENVIRONMENT = "production"


def should_load_config_file(environment: Optional[str] = None) -> bool:
    """True when a non-production ENVIRONMENT is set"""
    if environment is None:
        environment = os.environ.get("ENVIRONMENT", "")
    environment = environment.strip().lower()
    return bool(environment) and environment != PRODUCTION_ENVIRONMENT


def _first_env(*names: str) -> Optional[str]:
    """Return the first non-empty environment variable among names"""
    for name in names:
        value = os.environ.get(name)
        if value and value.strip():
            return value.strip()
    return None


class ConfigManager:
    """Manages configuration for the untagged version cleaner"""

    def __init__(self, config_file: str = None, validate: bool = True, load_file: Optional[bool] = None):
        """Initialize ConfigManager

        Args:
            config_file: Path to configuration YAML file (defaults to config.yaml or CONFIG_FILE env var)
            validate: If True, validate configuration on initialization
            load_file: Force loading (or skipping) the config file; defaults to the ENVIRONMENT switch
        """
        if config_file is None:
            config_file = os.environ.get("CONFIG_FILE", "config.yaml")
        self.config_file = config_file
        self.load_file = should_load_config_file() if load_file is None else load_file
        self.config = self._load_config()

        if validate:
            self.validate_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file with defaults"""
        default_config = {
            "github": {
                "api_url": "https://api.github.com",
                "api_version": "2022-11-28",
                "per_page": 100,
                "timeout": 30,
                "pool_maxsize": 20,
                "repository": "",
            },
            "analysis": {"max_workers": 0, "output_dir": "reports"},
            "retry": {
                "max_retries": 3,
                "initial_delay": 1.0,
                "max_delay": 30.0,
                "exponential_base": 2.0,
                "jitter": True,
            },
        }

        if not self.load_file:
            return default_config

        try:
            if os.path.exists(self.config_file):
                logging.info(f"Loading the config file {self.config_file}...")
                with open(self.config_file, "r") as f:
                    user_config = yaml.safe_load(f) or {}
                return self._merge_config(default_config, user_config)
            else:
                logging.warning(f"Config file {self.config_file} not found, using defaults")
                return default_config
        except (OSError, yaml.YAMLError) as e:
            logging.error(f"Error loading config file: {e}")
            return default_config

    def _merge_config(self, default: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge user config with defaults"""
        result = default.copy()
        for key, value in user.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result

    # Inputs
    def get_repository(self) -> Optional[str]:
        """Get the owner/name repository identifier.
        Priority: INPUT_REPOSITORY -> REPOSITORY -> config.github.repository
        """
        return _first_env("INPUT_REPOSITORY", "REPOSITORY") or self.config["github"].get("repository") or None

    def get_token(self) -> Optional[str]:
        """Get the API token. Never read from the config file so it cannot be committed.
        Priority: INPUT_GH_TOKEN -> GH_TOKEN -> GITHUB_TOKEN
        """
        return _first_env("INPUT_GH_TOKEN", "GH_TOKEN", "GITHUB_TOKEN")

    # GitHub API configuration
    def get_api_url(self) -> str:
        return (_first_env("GITHUB_API_URL") or self.config["github"]["api_url"]).rstrip("/")

    def get_api_version(self) -> str:
        return str(self.config["github"]["api_version"])

    def get_per_page(self) -> int:
        return int(self.config["github"]["per_page"])

    def get_timeout(self) -> int:
        """Per-request HTTP timeout in seconds"""
        return int(self.config["github"]["timeout"])

    def get_pool_maxsize(self) -> int:
        return int(self.config["github"]["pool_maxsize"])

    # Analysis configuration
    def get_max_workers(self) -> int:
        """Cap on concurrent API calls per fan-out; 0 means one worker per item"""
        value = _first_env("MAX_WORKERS")
        if value is not None:
            try:
                return int(value)
            except ValueError:
                logging.warning(f"Ignoring non-integer MAX_WORKERS={value!r}")
        return int(self.config["analysis"]["max_workers"])

    def get_output_dir(self) -> str:
        return self.config["analysis"]["output_dir"]

    # Retry configuration
    def get_max_retries(self) -> int:
        return int(self.config["retry"]["max_retries"])

    def get_retry_initial_delay(self) -> float:
        return float(self.config["retry"]["initial_delay"])

    def get_retry_max_delay(self) -> float:
        return float(self.config["retry"]["max_delay"])

    def get_retry_exponential_base(self) -> float:
        return float(self.config["retry"]["exponential_base"])

    def get_retry_jitter(self) -> bool:
        return bool(self.config["retry"]["jitter"])

    def validate_config(self) -> None:
        """Validate configuration values

        Raises:
            ConfigValidationError: If configuration is invalid
        """
        errors = []
        warnings = []

        api_url = self.get_api_url()
        if not self._is_valid_api_url(api_url):
            errors.append(f"github.api_url must be an https URL, got: {api_url!r}")

        try:
            per_page = self.get_per_page()
            if per_page < 1 or per_page > 100:
                errors.append(f"github.per_page must be between 1 and 100, got: {per_page}")
        except (TypeError, ValueError):
            errors.append(f"github.per_page must be an integer, got: {self.config['github']['per_page']!r}")

        for field, getter in (("github.timeout", self.get_timeout), ("github.pool_maxsize", self.get_pool_maxsize)):
            try:
                if getter() < 1:
                    errors.append(f"{field} must be a positive integer, got: {getter()}")
            except (TypeError, ValueError):
                errors.append(f"{field} must be a positive integer")

        try:
            max_workers = self.get_max_workers()
            if max_workers < 0:
                errors.append(f"analysis.max_workers must be 0 (uncapped) or a positive integer, got: {max_workers}")
            elif max_workers > 100:
                warnings.append(f"max_workers is very high ({max_workers}), expect secondary rate limits")
        except (TypeError, ValueError):
            errors.append("analysis.max_workers must be an integer")

        try:
            max_retries = self.get_max_retries()
            initial_delay = self.get_retry_initial_delay()
            max_delay = self.get_retry_max_delay()
            exponential_base = self.get_retry_exponential_base()
        except (TypeError, ValueError) as e:
            errors.append(f"retry settings must be numbers: {e}")
        else:
            if max_retries < 0:
                errors.append(f"retry.max_retries must be a non-negative integer, got: {max_retries}")
            elif max_retries > 10:
                warnings.append(f"max_retries is very high ({max_retries}), failures may take a long time")
            if initial_delay < 0:
                errors.append(f"retry.initial_delay must be a non-negative number, got: {initial_delay}")
            if max_delay < initial_delay:
                errors.append(f"retry.max_delay ({max_delay}) must be >= retry.initial_delay ({initial_delay})")
            if exponential_base < 1.0:
                errors.append(f"retry.exponential_base must be >= 1.0, got: {exponential_base}")

        for warning in warnings:
            logging.warning(f"Configuration warning: {warning}")

        if errors:
            error_msg = "Configuration validation failed:\n  " + "\n  ".join(errors)
            logging.error(error_msg)
            raise ConfigValidationError(error_msg)

    def _is_valid_api_url(self, url: str) -> bool:
        """Validate API URL format"""
        if not url:
            return False
        pattern = r"^https://[a-zA-Z0-9]([a-zA-Z0-9\-\.]*[a-zA-Z0-9])?(:[0-9]{1,5})?(/[^\s]*)?$"
        return bool(re.match(pattern, url))

    def print_config(self):
        """Print current configuration"""
        print("Current Configuration:")
        print(f"  Repository: {self.get_repository() or 'Not set'}")
        print(f"  API URL: {self.get_api_url()}")
        print(f"  API Version: {self.get_api_version()}")
        print(f"  Page Size: {self.get_per_page()}")
        print(f"  Timeout: {self.get_timeout()}")
        max_workers = self.get_max_workers()
        print(f"  Max Workers: {max_workers or 'one per item'}")
        print(f"  Max Retries: {self.get_max_retries()}")
        print(f"  Output Directory: {self.get_output_dir()}")
        print(f"  Config File: {self.config_file if self.load_file else 'Not loaded'}")
        print(f"  Token: {'***' if self.get_token() else 'Not set'}")

