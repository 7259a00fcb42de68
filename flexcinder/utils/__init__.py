"""Utilities package"""

from flexcinder.utils.logger import get_logger, setup_logging
from flexcinder.utils.response import format_result, render_envelope, render_result

__all__ = ['get_logger', 'setup_logging', 'format_result', 'render_envelope', 'render_result']
