"""Base volume provider interface"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from flexcinder.models import DriverConfig


class BaseProvider(ABC):
    """Abstract base class for volume providers"""

    @abstractmethod
    def attach_disk(self, config: DriverConfig, target_dir: str) -> Dict[str, Any]:
        """
        Attach the volume described by config.

        Args:
            config: Volume configuration
            target_dir: Mount target directory the volume is attached for

        Returns:
            Provider metadata of the attached volume (volume_type, name,
            hosts, ports)

        Raises:
            ProviderError: If the attach fails
        """
        pass

    @abstractmethod
    def detach_disk(self, config: DriverConfig) -> None:
        """
        Detach the volume described by config.

        Raises:
            ProviderError: If the detach fails
        """
        pass
