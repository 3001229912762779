import json
import os
import logging
from typing import Dict, Any

logger = logging.getLogger("app")

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

def resolve_path(path: str) -> str:
    """Relative paths are taken from the project root, not the working directory."""
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)

def load_company_config(path: str) -> Dict[str, Any]:
    """
    Loads company configuration (branding, notification templates) from a JSON file.
    Raises FileNotFoundError if config is missing.
    Returns: Dict containing config.
    """
    config_path = resolve_path(path)
    if not os.path.exists(config_path):
        logger.critical(f"❌ Company config file '{config_path}' not found! The application cannot start.")
        raise FileNotFoundError(f"Configuration file not found at {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config = json.load(f)
            logger.info(f"✅ Company config loaded for: {config.get('company_name', 'Unknown')}")
            return config
    except json.JSONDecodeError as e:
        logger.critical(f"❌ Invalid JSON in company config: {e}")
        raise ValueError(f"Invalid JSON in config file: {e}")

def get_notification_settings(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Helper to get the notifications block of the company config.
    Returns an empty dict when the block is absent.
    """
    return config.get("notifications", {})
