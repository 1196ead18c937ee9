"""
crm-sync CLI Base Command Classes

Abstract base classes for consistent command structure.
"""

from .base_command import BaseCommand
from .environment_command import EnvironmentCommand

__all__ = [
    "BaseCommand",
    "EnvironmentCommand",
]
