"""Volume service - mount/unmount orchestration"""

import os
from typing import Any, Dict, Optional

from flexcinder.exceptions import FlexVolumeException, NotFoundError
from flexcinder.models import PersistedMountState
from flexcinder.services.assembler import ProviderFactory, config_from_options, config_from_state
from flexcinder.services.metadata_store import MetadataStore
from flexcinder.utils.logger import get_logger

LOG = get_logger(__name__)


class VolumeService:
    """Mount and unmount a volume on a target directory.

    mount:   options -> configured -> attached -> persisted
    unmount: dir checked -> configured (from sidecar) -> detached -> cleaned

    Any step failing ends the operation with that step's error. The only
    compensation is on mount: a volume that was attached but whose sidecar
    could not be written is rolled back on a best-effort basis.
    """

    def __init__(self, store: MetadataStore, provider_factory: ProviderFactory,
                 default_config_ref: str):
        self.store = store
        self.provider_factory = provider_factory
        self.default_config_ref = default_config_ref

    def mount(self, target_dir: str, json_options: str) -> Optional[Dict[str, Any]]:
        """
        Attach the volume and record it in target_dir.

        Args:
            target_dir: Mount target directory
            json_options: Raw jsonOptions blob

        Returns:
            None, mount reports no extra fields

        Raises:
            InvalidOptions: If the options cannot be used
            ProviderError: If the attach fails
            MetadataIOError: If the sidecar cannot be written (after rollback)
        """
        LOG.debug(f"Cinder flexvolume mount to {target_dir}",
                  extra={'operation': 'mount', 'target_dir': target_dir})

        config, provider = config_from_options(
            json_options, self.provider_factory, self.default_config_ref
        )

        try:
            metadata = provider.attach_disk(config, target_dir)
        except FlexVolumeException as e:
            LOG.info(f"AttachDisk failed: {e}",
                     extra={'operation': 'mount', 'volume_id': config.volume_id})
            raise
        LOG.info(f"Cinder volume {config.volume_id} attached",
                 extra={'operation': 'mount', 'volume_id': config.volume_id})

        config.metadata = metadata or {}
        state = PersistedMountState.from_config(config, config.metadata)

        try:
            self.store.write(target_dir, state)
        except FlexVolumeException as e:
            LOG.error(f"Failed to persist mount state of {config.volume_id}: {e}",
                      extra={'operation': 'mount', 'volume_id': config.volume_id,
                             'target_dir': target_dir})
            self._compensate_mount(provider, config, target_dir)
            raise

        return None

    def _compensate_mount(self, provider, config, target_dir: str) -> Dict[str, Any]:
        """
        Roll back an attached but unrecorded volume.

        Only an empty target directory is removed. Failures are logged and
        never raised; the caller reports the original persistence error.
        """
        outcome = {
            'volume_id': config.volume_id,
            'target_dir': target_dir,
            'dir_removed': False,
            'detached': False,
            'errors': [],
        }

        try:
            os.rmdir(target_dir)
            outcome['dir_removed'] = True
        except OSError as e:
            outcome['errors'].append(f"remove {target_dir}: {e}")

        try:
            provider.detach_disk(config)
            outcome['detached'] = True
        except Exception as e:
            outcome['errors'].append(f"detach {config.volume_id}: {e}")

        if outcome['errors']:
            LOG.warning(f"Failed to roll back mount of {config.volume_id}: "
                        f"{'; '.join(outcome['errors'])}",
                        extra={'operation': 'mount', 'compensation': outcome})
        else:
            LOG.info(f"Rolled back mount of {config.volume_id}",
                     extra={'operation': 'mount', 'compensation': outcome})
        return outcome

    def unmount(self, target_dir: str) -> Optional[Dict[str, Any]]:
        """
        Detach the volume recorded in target_dir and drop the record.

        The directory itself is removed by the orchestrator.

        Raises:
            NotFoundError: If target_dir does not exist
            MetadataIOError: If the sidecar is missing or malformed
            ProviderError: If the detach fails, the sidecar is kept
        """
        LOG.debug(f"Cinder flexvolume unmount of {target_dir}",
                  extra={'operation': 'unmount', 'target_dir': target_dir})

        if not os.path.exists(target_dir):
            raise NotFoundError(f"volume directory: {target_dir} does not exist")

        config, provider = config_from_state(target_dir, self.store, self.provider_factory)

        try:
            provider.detach_disk(config)
        except FlexVolumeException as e:
            LOG.info(f"DetachDisk failed: {e}",
                     extra={'operation': 'unmount', 'volume_id': config.volume_id})
            raise

        self.store.delete(target_dir)
        LOG.info(f"Cinder volume {config.volume_id} unmounted from {target_dir}",
                 extra={'operation': 'unmount', 'volume_id': config.volume_id})
        return None
