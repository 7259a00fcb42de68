"""Volume providers package"""

from flexcinder.providers.base import BaseProvider
from flexcinder.providers.cinder import CinderProvider

__all__ = ['BaseProvider', 'CinderProvider']
