"""Driver services package"""

from flexcinder.services.metadata_store import FileMetadataStore, MetadataStore
from flexcinder.services.volume_service import VolumeService

__all__ = ['FileMetadataStore', 'MetadataStore', 'VolumeService']
