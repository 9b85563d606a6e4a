"""
Core module initialization.
Exports configuration, logging and the domain error hierarchy.
"""

from digital_menu.core.config import get_settings, Settings, EnvironmentMode
from digital_menu.core.exceptions import DigitalMenuError

__all__ = ["get_settings", "Settings", "EnvironmentMode", "DigitalMenuError"]
