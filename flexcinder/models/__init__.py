"""Driver data models"""

from flexcinder.models.schemas import DriverConfig, PersistedMountState

__all__ = ['DriverConfig', 'PersistedMountState']
