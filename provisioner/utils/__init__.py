"""
Utility modules for the provisioning system.
"""

from .logging import setup_root_logger, format_failure

__all__ = ["setup_root_logger", "format_failure"]
