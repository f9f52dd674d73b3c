"""
Configuration management module.

This module handles loading the YAML configuration file and exposes the
flat key -> string parameter map the data store consumes, plus typed
getters for every recognized parameter.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping

import yaml

from .exceptions import ConfigurationError
from .utils import flatten_mapping, parse_bool

# parameters
HOME_PARAM = 'home'

CONSUMER_KEY_PARAM = 'oauth.consumer_key'
PRIVATE_KEY_PARAM = 'oauth.private_key'
SECRET_PARAM = 'oauth.secret'
ACCESS_TOKEN_PARAM = 'oauth.access_token'

USERNAME_PARAM = 'basicauth.username'
PASSWORD_PARAM = 'basicauth.password'

JQL_PARAM = 'issue.jql'
COMMENTS_PARAM = 'issue.comments'

IGNORE_FOLDER = 'ignore_folder'
IGNORE_ERROR = 'ignore_error'
DEFAULT_PERMISSIONS = 'default_permissions'
NUMBER_OF_THREADS = 'number_of_threads'
READ_INTERVAL = 'readInterval'

COMMENTS_ENDPOINT = 'endpoint'
COMMENTS_EMBEDDED = 'embedded'


class DataStoreParams:
    """
    Typed view over the flat parameter map.

    Missing string parameters read as empty strings, so callers can test
    for presence with plain truthiness.
    """

    def __init__(self, params: Mapping[str, Any]):
        self._params = {k: '' if v is None else str(v) for k, v in params.items()}

    def as_dict(self) -> Dict[str, str]:
        return dict(self._params)

    def get(self, key: str, default: str = '') -> str:
        return self._params.get(key, default)

    @property
    def home(self) -> str:
        return self.get(HOME_PARAM).strip()

    @property
    def username(self) -> str:
        return self.get(USERNAME_PARAM)

    @property
    def password(self) -> str:
        return self.get(PASSWORD_PARAM)

    @property
    def consumer_key(self) -> str:
        return self.get(CONSUMER_KEY_PARAM)

    @property
    def private_key(self) -> str:
        return self.get(PRIVATE_KEY_PARAM)

    @property
    def secret(self) -> str:
        return self.get(SECRET_PARAM)

    @property
    def access_token(self) -> str:
        return self.get(ACCESS_TOKEN_PARAM)

    @property
    def jql(self) -> str:
        return self.get(JQL_PARAM)

    @property
    def comments_strategy(self) -> str:
        strategy = self.get(COMMENTS_PARAM).strip().lower() or COMMENTS_ENDPOINT
        if strategy not in (COMMENTS_ENDPOINT, COMMENTS_EMBEDDED):
            raise ConfigurationError(
                f"parameter \"{COMMENTS_PARAM}\" must be \"{COMMENTS_ENDPOINT}\" "
                f"or \"{COMMENTS_EMBEDDED}\": {strategy}"
            )
        return strategy

    @property
    def number_of_threads(self) -> int:
        return self._get_int(NUMBER_OF_THREADS, 1, minimum=1)

    @property
    def read_interval(self) -> int:
        """Delay between REST requests in milliseconds."""
        return self._get_int(READ_INTERVAL, 0, minimum=0)

    @property
    def ignore_folder(self) -> bool:
        return parse_bool(self.get(IGNORE_FOLDER))

    @property
    def ignore_error(self) -> bool:
        return parse_bool(self.get(IGNORE_ERROR))

    @property
    def default_permissions(self) -> List[str]:
        value = self.get(DEFAULT_PERMISSIONS)
        return [p.strip() for p in value.split(',') if p.strip()]

    def _get_int(self, key: str, default: int, minimum: int) -> int:
        value = self.get(key).strip()
        if not value:
            return default
        try:
            number = int(value)
        except ValueError:
            raise ConfigurationError(f"parameter \"{key}\" must be an integer: {value}") from None
        if number < minimum:
            raise ConfigurationError(f"parameter \"{key}\" must be >= {minimum}: {value}")
        return number

    def __repr__(self) -> str:
        return f"DataStoreParams(home={self.home!r}, jql={self.jql!r})"


class Config:
    """
    Configuration manager that loads and validates a YAML file.

    Layout::

        datastore:        # parameter map, nested or dotted keys
          home: https://jira.example.com
          basicauth:
            username: bot
            password: secret
        defaults:         # default fields merged under every record
          label: jira
        output:
          path: data/issues.jsonl
        logging:
          level: INFO
          log_dir: logs
    """

    def __init__(self, config_path: str = "config.yaml"):
        """
        Initialize configuration from YAML file.

        Args:
            config_path: Path to configuration file (default: config.yaml)

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigurationError: If the file is not valid YAML or the
                datastore section is missing
        """
        self.config_path = config_path
        self._config: Dict[str, Any] = {}
        self._load_config()
        self._validate_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        if not os.path.exists(self.config_path):
            raise FileNotFoundError(
                f"Configuration file not found: {self.config_path}"
            )

        with open(self.config_path, 'r', encoding='utf-8') as f:
            try:
                self._config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    f"Error parsing config file {self.config_path}: {e}"
                ) from e

    def _validate_config(self) -> None:
        if not isinstance(self._config, dict):
            raise ConfigurationError("Configuration root must be a mapping")

        datastore = self._config.get('datastore')
        if not isinstance(datastore, dict):
            raise ConfigurationError(
                "Required configuration section 'datastore' is missing"
            )

        defaults = self._config.get('defaults', {})
        if defaults is not None and not isinstance(defaults, dict):
            raise ConfigurationError("defaults must be a mapping")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key in dot notation (e.g., 'logging.level')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """Override a value using dot notation, creating sections as needed."""
        keys = key.split('.')
        section = self._config
        for k in keys[:-1]:
            section = section.setdefault(k, {})
        section[keys[-1]] = value

    @property
    def params(self) -> DataStoreParams:
        """Flattened datastore parameters."""
        return DataStoreParams(dict(flatten_mapping(self._config['datastore'])))

    @property
    def defaults(self) -> Dict[str, Any]:
        """Default fields merged under every record."""
        return dict(self._config.get('defaults') or {})

    @property
    def output_path(self) -> str:
        return self.get('output.path', 'data/jira_issues.jsonl')

    @property
    def log_level(self) -> str:
        return self.get('logging.level', 'INFO')

    def __repr__(self) -> str:
        return f"Config(path={self.config_path!r}, params={self.params!r})"


def load_config(config_path: str = "config.yaml") -> Config:
    """
    Load configuration from file.

    Args:
        config_path: Path to configuration file

    Returns:
        Config object
    """
    config = Config(config_path)
    Path(config.output_path).parent.mkdir(parents=True, exist_ok=True)
    return config
