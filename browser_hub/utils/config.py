"""
Configuration Management Module

Handles loading and validation of browser, audit and memory settings from
environment variables (optionally via a .env file).
"""

import os
from typing import Optional

from dotenv import load_dotenv

from browser_hub.types import BackendKind, BrowserConfig, BrowserKind, MemoryContext, Viewport

# Load environment variables
load_dotenv()

TRUE_VALUES = {'1', 'true', 'yes', 'on'}
FALSE_VALUES = {'0', 'false', 'no', 'off'}

DEFAULT_AUDIT_LOG_DIR = 'logs'


def parse_bool(value: Optional[str], default: bool = False, name: str = 'value') -> bool:
    """
    Parse a boolean environment value.

    Args:
        value: Raw string (None means unset)
        default: Returned when the value is unset or blank
        name: Variable name used in the error message

    Raises:
        ValueError: If the value is not a recognised boolean
    """
    if value is None or not value.strip():
        return default
    normalized = value.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be one of true/false/1/0/yes/no/on/off, got '{value}'")


def parse_viewport(value: Optional[str]) -> Optional[Viewport]:
    """
    Parse a viewport given as 'WIDTHxHEIGHT' (e.g. '1280x720').

    Raises:
        ValueError: If the value is malformed
    """
    if value is None or not value.strip():
        return None
    try:
        width, height = value.lower().split('x')
        return Viewport(int(width), int(height))
    except ValueError:
        raise ValueError(f"BROWSER_VIEWPORT must look like 1280x720, got '{value}'")


def _parse_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer number of milliseconds, got '{value}'")


def load_backend_kind() -> BackendKind:
    """Backend named by BROWSER_BACKEND, defaulting to the multi-browser backend."""
    value = os.getenv('BROWSER_BACKEND')
    if not value:
        return BackendKind.MULTI_BROWSER
    return BackendKind.parse(value)


def load_browser_config() -> BrowserConfig:
    """
    Build a BrowserConfig from environment variables.

    Returns:
        BrowserConfig populated from BROWSER_* variables

    Raises:
        ValueError: If BROWSER_KIND is missing or any value is invalid
    """
    browser = os.getenv('BROWSER_KIND')
    if not browser:
        raise ValueError(
            "BROWSER_KIND not found. "
            "Please set BROWSER_KIND (chromium, firefox, webkit, chrome, edge or safari) in .env file"
        )

    return BrowserConfig(
        browser=BrowserKind.parse(browser),
        headless=parse_bool(os.getenv('BROWSER_HEADLESS'), default=True, name='BROWSER_HEADLESS'),
        slow_mo=_parse_int('BROWSER_SLOW_MO') or 0,
        timeout=_parse_int('BROWSER_TIMEOUT'),
        viewport=parse_viewport(os.getenv('BROWSER_VIEWPORT')),
        user_agent=os.getenv('BROWSER_USER_AGENT') or None,
        stealth=parse_bool(os.getenv('BROWSER_STEALTH'), default=False, name='BROWSER_STEALTH'),
    )


def get_audit_log_dir() -> str:
    return os.getenv('AUDIT_LOG_DIR') or DEFAULT_AUDIT_LOG_DIR


def load_memory_context() -> Optional[MemoryContext]:
    """
    Build a MemoryContext from MEMORY_CONTEXT_ID, MEMORY_API_KEY and MEMORY_BASE_URL.

    Returns:
        The context, or None if any of the three is unset
    """
    context_id = os.getenv('MEMORY_CONTEXT_ID')
    api_key = os.getenv('MEMORY_API_KEY')
    base_url = os.getenv('MEMORY_BASE_URL')

    if not (context_id and api_key and base_url):
        return None

    return MemoryContext(
        context_id=context_id,
        api_key=api_key,
        base_url=base_url.rstrip('/'),
    )
