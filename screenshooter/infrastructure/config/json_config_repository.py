#screenshooter/infrastructure/config/json_config_repository.py

"""
JSON-based implementation of the configuration repository.

Stores preferences in a JSON file on disk.
"""
import os
import json
import threading
from pathlib import Path
from typing import Dict, Any, Callable, List, Optional

from screenshooter.domain.services.i_config_repository_service import IConfigRepository, UploadSettings
from screenshooter.domain.services.i_logger_service import ILoggerService
from screenshooter.domain.models.capture_options import CaptureOptions
from screenshooter.domain.common.result import Result
from screenshooter.domain.common.errors import ConfigurationError

CONFIG_ENV_VAR = "SCREENSHOOTER_CONFIG"

DEFAULT_UPLOAD_URL = "https://api.globalupload.io/transport/add"
DEFAULT_GATEWAY_URL = "https://ipfs.io/ipfs/"
DEFAULT_UPLOAD_TIMEOUT = 60.0


def default_config_path() -> str:
    """$SCREENSHOOTER_CONFIG, else ~/.config/screenshooter/config.json."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return override
    return str(Path.home() / ".config" / "screenshooter" / "config.json")


class JsonConfigRepository(IConfigRepository):
    """
    JSON-based implementation of the configuration repository.

    Stores configuration in a JSON file and provides thread-safe access.
    """

    def __init__(self, config_file: str, logger: ILoggerService):
        """
        Initialize the repository.

        Args:
            config_file: Path to the JSON configuration file
            logger: Logger service
        """
        self.config_file = config_file
        self.logger = logger
        self._config_cache: Optional[Dict[str, Any]] = None
        self._last_modified = 0.0
        self._lock = threading.RLock()
        self._observers: List[Callable[[], None]] = []

        # Capture keys mirror CaptureOptions.to_dict()
        self.DEFAULT_CONFIG = dict(CaptureOptions().to_dict())
        self.DEFAULT_CONFIG.update({
            "upload_url": DEFAULT_UPLOAD_URL,
            "upload_timeout": DEFAULT_UPLOAD_TIMEOUT,
            "gateway_url": DEFAULT_GATEWAY_URL,
            "log_level": "INFO",
        })

    def load_config(self, force_reload: bool = False) -> Result[Dict[str, Any]]:
        """
        Load configuration from storage.

        A missing file is created with defaults; missing keys are merged in.

        Args:
            force_reload: Whether to force a reload from storage

        Returns:
            Result containing the configuration dictionary
        """
        with self._lock:
            # Reload if another process touched the file
            try:
                if os.path.exists(self.config_file):
                    mtime = os.path.getmtime(self.config_file)
                    if mtime > self._last_modified:
                        force_reload = True
            except OSError as e:
                self.logger.debug(f"Error checking config file modification time: {e}")

            if self._config_cache is not None and not force_reload:
                return Result.ok(self._config_cache)

            config = None
            if os.path.exists(self.config_file):
                try:
                    with open(self.config_file, "r", encoding="utf-8") as f:
                        config = json.load(f)
                    self._last_modified = os.path.getmtime(self.config_file)
                    self.logger.info(f"Config loaded from {self.config_file}")
                except (OSError, ValueError) as e:
                    self.logger.error(f"Error loading config from {self.config_file}: {e}")
                    config = None

                if config is not None and not isinstance(config, dict):
                    self.logger.error(f"Config in {self.config_file} is not a JSON object, using defaults")
                    config = None

            if config is None:
                self.logger.warning("Config file missing or unreadable. Writing default settings.")
                config = dict(self.DEFAULT_CONFIG)
                save_result = self.save_config(config)
                if save_result.is_failure:
                    return Result.fail(save_result.error)
            else:
                updated = False
                for key, default_value in self.DEFAULT_CONFIG.items():
                    if key not in config:
                        config[key] = default_value
                        updated = True

                # Normalize types of numeric settings
                for key, cast in (("delay", int), ("upload_timeout", float)):
                    if not isinstance(config[key], cast) or isinstance(config[key], bool):
                        try:
                            config[key] = cast(config[key])
                        except (ValueError, TypeError):
                            config[key] = self.DEFAULT_CONFIG[key]
                        updated = True

                if updated:
                    save_result = self.save_config(config)
                    if save_result.is_failure:
                        return Result.fail(save_result.error)

            self._config_cache = config
            return Result.ok(config)

    def save_config(self, config: Dict[str, Any]) -> Result[bool]:
        """
        Save configuration to storage.

        Written to a temporary file first and moved into place.
        """
        with self._lock:
            try:
                config_dir = os.path.dirname(self.config_file)
                if config_dir:
                    os.makedirs(config_dir, exist_ok=True)

                temp_path = f"{self.config_file}.tmp"
                with open(temp_path, "w", encoding="utf-8") as f:
                    json.dump(config, f, indent=4)
                os.replace(temp_path, self.config_file)

                self.logger.info(f"Config saved to {self.config_file}")
                self._config_cache = config
                self._last_modified = os.path.getmtime(self.config_file)
            except (OSError, TypeError, ValueError) as e:
                self.logger.error(f"Error saving config: {e}")
                return Result.fail(ConfigurationError(
                    message=f"Failed to save config: {e}",
                    details={"config_file": self.config_file},
                    inner_error=e
                ))

        self._notify_observers()
        return Result.ok(True)

    def get_global_setting(self, key: str, default: Any = None) -> Any:
        with self._lock:
            config_result = self.load_config()
            if config_result.is_failure:
                self.logger.error(f"Error loading config: {config_result.error}")
                return default
            return config_result.value.get(key, default)

    def set_global_setting(self, key: str, value: Any) -> Result[bool]:
        with self._lock:
            config_result = self.load_config()
            if config_result.is_failure:
                return Result.fail(config_result.error)

            config = dict(config_result.value)
            config[key] = value
            return self.save_config(config)

    def load_capture_options(self) -> Result[CaptureOptions]:
        return self.load_config().map(CaptureOptions.from_dict)

    def save_capture_options(self, options: CaptureOptions) -> Result[bool]:
        with self._lock:
            config_result = self.load_config()
            if config_result.is_failure:
                return Result.fail(config_result.error)

            config = dict(config_result.value)
            config.update(options.to_dict())
            return self.save_config(config)

    def get_upload_settings(self) -> UploadSettings:
        upload_url = self.get_global_setting("upload_url") or DEFAULT_UPLOAD_URL
        gateway_url = self.get_global_setting("gateway_url") or DEFAULT_GATEWAY_URL
        try:
            timeout = float(self.get_global_setting("upload_timeout", DEFAULT_UPLOAD_TIMEOUT))
            if timeout <= 0:
                timeout = DEFAULT_UPLOAD_TIMEOUT
        except (ValueError, TypeError):
            timeout = DEFAULT_UPLOAD_TIMEOUT
        return UploadSettings(upload_url=upload_url, timeout_seconds=timeout, gateway_url=gateway_url)

    def register_observer(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback not in self._observers:
                self._observers.append(callback)
                self.logger.debug(f"Observer registered: {callback.__qualname__}")

    def unregister_observer(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._observers:
                self._observers.remove(callback)
                self.logger.debug(f"Observer unregistered: {callback.__qualname__}")

    def _notify_observers(self) -> None:
        """Call all registered observer functions."""
        with self._lock:
            observers = self._observers.copy()

        for callback in observers:
            try:
                callback()
            except Exception as e:
                self.logger.error(f"Error notifying config observer: {e}")
