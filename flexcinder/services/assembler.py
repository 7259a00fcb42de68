"""Driver configuration assembly

Mount builds its configuration from the user's jsonOptions; every later
invocation rebuilds it from the sidecar file written by mount.
"""

from typing import Callable, Tuple

from flexcinder.exceptions import FlexVolumeException, ProviderConfigError
from flexcinder.models import DriverConfig
from flexcinder.providers.base import BaseProvider
from flexcinder.services.metadata_store import MetadataStore
from flexcinder.utils.logger import get_logger
from flexcinder.utils.validators import optional_string, parse_json_options, require_string

LOG = get_logger(__name__)

VOLUME_ID_KEY = 'volume-id'
CINDER_CONFIG_KEY = 'cinder-config'
FS_TYPE_KEY = 'kubernetes.io/fsType'
READ_WRITE_KEY = 'kubernetes.io/readwrite'

ProviderFactory = Callable[[str], BaseProvider]


def _create_provider(provider_factory: ProviderFactory, config_ref: str) -> BaseProvider:
    try:
        return provider_factory(config_ref)
    except FlexVolumeException:
        raise
    except (OSError, ValueError) as e:
        raise ProviderConfigError(f"cannot create provider from {config_ref}: {e}")


def config_from_options(json_options: str, provider_factory: ProviderFactory,
                        default_config_ref: str) -> Tuple[DriverConfig, BaseProvider]:
    """
    Build the driver configuration for mount.

    Args:
        json_options: Raw jsonOptions blob
        provider_factory: Callable creating a provider from a config reference
        default_config_ref: Provider config used when the options name none

    Returns:
        Tuple of (config, provider)

    Raises:
        InvalidOptions: If a required option is missing or has a wrong type
    """
    options = parse_json_options(json_options)

    volume_id = require_string(options, VOLUME_ID_KEY, json_options)
    fs_type = require_string(options, FS_TYPE_KEY, json_options, allow_empty=True)
    config_ref = optional_string(options, CINDER_CONFIG_KEY, json_options,
                                 default=default_config_ref) or default_config_ref
    read_write = optional_string(options, READ_WRITE_KEY, json_options, default='rw')

    config = DriverConfig(
        volume_id=volume_id,
        fs_type=fs_type,
        cinder_config=config_ref,
        read_only=(read_write == 'ro'),
    )
    provider = _create_provider(provider_factory, config_ref)
    return config, provider


def config_from_state(target_dir: str, store: MetadataStore,
                      provider_factory: ProviderFactory) -> Tuple[DriverConfig, BaseProvider]:
    """
    Rebuild the driver configuration from the sidecar of target_dir.

    Raises:
        MetadataIOError: If the sidecar is missing or malformed
    """
    state = store.read(target_dir)
    LOG.debug(f"Recovered volume {state.volume_id} from {target_dir}")

    config = DriverConfig(
        volume_id=state.volume_id,
        fs_type=state.fs_type,
        cinder_config=state.config_key,
    )
    provider = _create_provider(provider_factory, state.config_key)
    return config, provider
