# flexcinder/__init__.py
"""
Cinder FlexVolume driver

A volume driver executed by the kubelet once per lifecycle operation. Mount
attaches a Cinder volume and records it in a sidecar file inside the mount
target directory; unmount reads that file back to detach the volume.

Example:
    $ flexcinder init
    {"status": "Success", "capabilities": {"attach": false}}
    $ flexcinder mount /var/lib/kubelet/pods/.../vol '{"volume-id": "v1", "kubernetes.io/fsType": "ext4"}'
    {"status": "Success"}
"""

from .driver import (
    Dispatcher,
    FlexVolumeDriver,
    Operation,
    build_registry
)

from .exceptions import (
    FlexVolumeException,
    InvalidInvocation,
    InvalidOptions,
    MetadataIOError,
    NotFoundError,
    ProviderError
)

__version__ = '1.0.0'
__license__ = 'Apache 2.0'

__all__ = [
    # Driver
    'Dispatcher',
    'FlexVolumeDriver',
    'Operation',
    'build_registry',

    # Exceptions
    'FlexVolumeException',
    'InvalidInvocation',
    'InvalidOptions',
    'MetadataIOError',
    'NotFoundError',
    'ProviderError',

    # Version
    '__version__',
]


def get_version():
    """Get the current version of the package."""
    return __version__
