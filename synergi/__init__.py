"""
synergi - multi-agent chat router with streamed responses.
"""

__version__ = "0.3.0"
__logo__ = "⚡"
