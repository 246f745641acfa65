"""
Idempotent provisioning of development tools on Ubuntu systems.
"""

__version__ = "0.1.0"
