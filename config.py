# config.py - PicViewer Configuration
"""
Configuration management for PicViewer, loaded from a TOML file
"""

import logging
import shutil
from pathlib import Path
from typing import Any, Dict, Optional

import toml

from slideshow import DEFAULT_DELAY_MS, MIN_DELAY_MS, SLIDESHOW_MODES

OUTPUT_FORMATS = ["PNG", "JPEG", "WEBP"]


class PicViewerConfig:
    """PicViewer configuration class"""

    def __init__(self, **kwargs):
        # Folder Settings
        self.root_folder: Optional[str] = kwargs.get("root_folder") or None

        # Slideshow Settings
        slideshow_config = kwargs.get("slideshow", {})
        self.slideshow_mode = slideshow_config.get("mode", "sequence")
        self.slideshow_delay = slideshow_config.get("delay", DEFAULT_DELAY_MS)
        self.slideshow_autostart = slideshow_config.get("autostart", False)

        # Image Loading
        self.prefetch_enabled = kwargs.get("prefetch_enabled", True)
        self.output_format = str(kwargs.get("output_format", "PNG")).upper()
        self.random_seed: Optional[int] = kwargs.get("random_seed")

        # Logging
        self.log_level = kwargs.get("log_level", "INFO")
        self.log_file = kwargs.get("log_file", None)
        if self.log_file:
            self.log_file = Path(self.log_file)

        self._validate()
        self._validate_slideshow()

    def _validate(self):
        """Validate configuration values"""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if str(self.log_level).upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {valid_levels}")
        self.log_level = str(self.log_level).upper()

        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(f"output_format must be one of: {OUTPUT_FORMATS}")

        if not isinstance(self.prefetch_enabled, bool):
            raise ValueError("prefetch_enabled must be boolean")

        if self.random_seed is not None and not isinstance(self.random_seed, int):
            raise ValueError("random_seed must be an integer")

        if self.root_folder and not Path(self.root_folder).expanduser().is_dir():
            logging.warning(f"Configured root_folder does not exist: {self.root_folder}")

    def _validate_slideshow(self):
        """Validate slideshow configuration"""
        if self.slideshow_mode not in SLIDESHOW_MODES:
            logging.error(f"Invalid slideshow mode: '{self.slideshow_mode}'. Valid: {SLIDESHOW_MODES}")
            self.slideshow_mode = "sequence"

        if not isinstance(self.slideshow_delay, int):
            raise ValueError("slideshow delay must be an integer number of milliseconds")
        if self.slideshow_delay < MIN_DELAY_MS:
            logging.warning(f"Slideshow delay {self.slideshow_delay}ms raised to minimum {MIN_DELAY_MS}ms")
            self.slideshow_delay = MIN_DELAY_MS

        if not isinstance(self.slideshow_autostart, bool):
            raise ValueError("slideshow autostart must be boolean")

    def get_root_folder(self) -> Optional[str]:
        """Configured root folder with ~ expanded"""
        if not self.root_folder:
            return None
        return str(Path(self.root_folder).expanduser())

    @classmethod
    def from_file(cls, config_path: str = "config.toml") -> "PicViewerConfig":
        """Load configuration from TOML file"""
        config_file = Path(config_path)

        if not config_file.exists():
            logging.info(f"Config file {config_path} not found, creating default")
            default_config = cls()
            default_config.save_to_file(config_path)
            return default_config

        try:
            logging.info(f"Loading configuration from {config_path}")
            config_data = toml.load(config_file)
            logging.debug(f"Loaded config keys: {list(config_data.keys())}")

            config_instance = cls(**config_data)
            logging.info(f"Slideshow: {config_instance.slideshow_mode}, {config_instance.slideshow_delay}ms")
            return config_instance

        except toml.TomlDecodeError as e:
            logging.error(f"TOML syntax error in {config_path}: {e}")
            backup_path = config_file.with_suffix('.toml.broken')
            try:
                shutil.copy2(config_file, backup_path)
                logging.info(f"Broken config backed up to: {backup_path}")
            except OSError as copy_error:
                logging.warning(f"Could not back up broken config: {copy_error}")
            return cls()

        except (ValueError, TypeError) as e:
            logging.error(f"Invalid configuration in {config_path}: {e}")
            return cls()

    def save_to_file(self, config_path: str = "config.toml"):
        """Save configuration to TOML file"""
        config_file = Path(config_path)

        if config_file.exists():
            backup_file = config_file.with_suffix('.toml.backup')
            try:
                shutil.copy2(config_file, backup_file)
                logging.debug(f"Config backup created: {backup_file}")
            except OSError as e:
                logging.warning(f"Could not create config backup: {e}")

        try:
            with open(config_file, 'w') as f:
                toml.dump(self._to_dict(), f)
            logging.info(f"Configuration saved to {config_path}")
        except OSError as e:
            logging.error(f"Error saving config file: {e}")

    def _to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary"""
        config_dict: Dict[str, Any] = {
            'prefetch_enabled': self.prefetch_enabled,
            'output_format': self.output_format,
            'log_level': self.log_level,
        }

        if self.root_folder:
            config_dict['root_folder'] = self.root_folder
        if self.random_seed is not None:
            config_dict['random_seed'] = self.random_seed
        if self.log_file:
            config_dict['log_file'] = str(self.log_file)

        config_dict['slideshow'] = {
            'mode': self.slideshow_mode,
            'delay': self.slideshow_delay,
            'autostart': self.slideshow_autostart,
        }

        return config_dict
