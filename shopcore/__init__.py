"""
shopcore: storefront backend core.

This package contains the shared in-process infrastructure for:
- Events (typed domain event broker and catalog)
- Monitoring (metrics exposition)
- Configuration and composition root
"""

__version__ = "0.1.0"
