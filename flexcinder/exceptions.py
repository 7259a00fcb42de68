"""Custom exceptions for the Cinder flexvolume driver"""


class FlexVolumeException(Exception):
    """Base exception for the flexvolume driver"""
    pass


class InvalidInvocation(FlexVolumeException):
    """Raised when the driver is invoked with no or wrongly-sized arguments"""
    pass


class InvalidOptions(FlexVolumeException):
    """Raised when the jsonOptions blob is malformed or misses a required key"""

    def __init__(self, message: str, key: str = None):
        super().__init__(message)
        self.key = key


class ProviderConfigError(InvalidOptions):
    """Raised when the provider configuration file cannot be used"""
    pass


class MetadataIOError(FlexVolumeException):
    """Raised when the sidecar metadata file is missing, unreadable or invalid"""
    pass


class ProviderError(FlexVolumeException):
    """Raised when the volume provider fails to attach or detach a disk"""
    pass


class NotFoundError(FlexVolumeException):
    """Raised when the mount target directory does not exist"""
    pass


class ConfigurationException(FlexVolumeException):
    """Raised for driver settings errors"""
    pass
