"""Cinder volume provider using the block storage API"""

import os
from configparser import ConfigParser, Error as ConfigParserError
from typing import Any, Dict, Optional

from keystoneauth1 import exceptions as ks_exceptions
from keystoneauth1 import session as ks_session
from keystoneauth1.identity import v3

from flexcinder.exceptions import ProviderConfigError, ProviderError
from flexcinder.models import DriverConfig
from flexcinder.providers.base import BaseProvider
from flexcinder.utils.logger import get_logger

LOG = get_logger(__name__)

SUPPORTED_VOLUME_TYPES = ('rbd',)


class CinderProvider(BaseProvider):
    """Attaches Cinder volumes for hypervisor-based container runtimes.

    The volume is not mapped on the host: attaching reserves it in Cinder,
    initializes an rbd connection and records the connection data so the
    runtime can hand the disk to the VM.
    """

    REQUIRED_KEYS = ('auth-url', 'username', 'password')

    def __init__(self, settings: Dict[str, str], node_name: str,
                 timeout: int = 60, session: Optional[ks_session.Session] = None):
        """
        Initialize CinderProvider.

        Args:
            settings: [Global] and [RBD] options of the cinder config file
            node_name: Host name reported to Cinder in attachments
            timeout: HTTP timeout for Cinder and Keystone requests
            session: Pre-built keystone session (optional)
        """
        self.settings = settings
        self.node_name = node_name
        self.timeout = timeout
        self.region = settings.get('region') or None
        self.keyring = settings.get('keyring') or None
        self.session = session or self._create_session()

    @classmethod
    def from_config_file(cls, config_file: str, node_name: str,
                         timeout: int = 60) -> 'CinderProvider':
        """
        Create a provider from a cinder config file.

        Expected format:
        [Global]
        auth-url = http://keystone:5000/v3
        username = admin
        password = secret
        tenant-name = admin
        domain-name = Default
        region = RegionOne

        [RBD]
        keyring = AQBr...==

        Raises:
            ProviderConfigError: If the file is missing or incomplete
        """
        if not os.path.isfile(config_file):
            raise ProviderConfigError(f"cinder config file {config_file} does not exist")

        parser = ConfigParser(interpolation=None)
        try:
            with open(config_file, 'r') as f:
                parser.read_file(f)
        except (OSError, ConfigParserError) as e:
            raise ProviderConfigError(f"cannot read cinder config file {config_file}: {e}")

        if not parser.has_section('Global'):
            raise ProviderConfigError(f"cinder config file {config_file} has no [Global] section")

        settings = dict(parser.items('Global'))
        if parser.has_section('RBD'):
            settings.update(parser.items('RBD'))

        missing = [key for key in cls.REQUIRED_KEYS if not settings.get(key)]
        if not settings.get('tenant-id') and not settings.get('tenant-name'):
            missing.append('tenant-id/tenant-name')
        if missing:
            raise ProviderConfigError(
                f"cinder config file {config_file} misses {', '.join(missing)}"
            )

        LOG.debug(f"Loaded cinder config from {config_file}")
        return cls(settings, node_name=node_name, timeout=timeout)

    def _create_session(self) -> ks_session.Session:
        domain_id = self.settings.get('domain-id') or None
        domain_name = self.settings.get('domain-name') or None
        if not domain_id and not domain_name:
            domain_name = 'Default'

        auth = v3.Password(
            auth_url=self.settings['auth-url'],
            username=self.settings['username'],
            password=self.settings['password'],
            project_id=self.settings.get('tenant-id') or None,
            project_name=self.settings.get('tenant-name') or None,
            user_domain_id=domain_id,
            user_domain_name=domain_name,
            project_domain_id=domain_id,
            project_domain_name=domain_name,
        )
        return ks_session.Session(auth=auth, timeout=self.timeout)

    def _connector(self) -> Dict[str, Any]:
        return {
            'host': self.node_name,
            'os_type': 'linux',
            'multipath': False,
        }

    def _request(self, method: str, url: str, body: Optional[Dict] = None) -> Dict[str, Any]:
        endpoint_filter = {'service_type': 'volumev3', 'interface': 'public'}
        if self.region:
            endpoint_filter['region_name'] = self.region

        response = self.session.request(
            url, method, json=body, endpoint_filter=endpoint_filter
        )
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(f"invalid response to {method} {url}: {e}")
        if not isinstance(data, dict):
            raise ProviderError(f"invalid response to {method} {url}: expected an object")
        return data

    def _action(self, volume_id: str, action: str, params: Any = None) -> Dict[str, Any]:
        LOG.debug(f"Cinder action {action} on volume {volume_id}")
        return self._request('POST', f'/volumes/{volume_id}/action', {action: params})

    def attach_disk(self, config: DriverConfig, target_dir: str) -> Dict[str, Any]:
        """
        Reserve the volume, initialize its connection and mark it attached.

        Returns:
            Metadata with volume_type, name, hosts, ports (and keyring when
            configured)
        """
        volume_id = config.volume_id
        try:
            volume = self._request('GET', f'/volumes/{volume_id}').get('volume')
        except ks_exceptions.ClientException as e:
            raise ProviderError(f"failed to get cinder volume {volume_id}: {e}")

        status = volume.get('status') if isinstance(volume, dict) else None
        if status != 'available':
            raise ProviderError(f"cinder volume {volume_id} is {status}, expected available")

        try:
            self._action(volume_id, 'os-reserve')
        except ks_exceptions.ClientException as e:
            raise ProviderError(f"failed to reserve cinder volume {volume_id}: {e}")

        try:
            result = self._action(volume_id, 'os-initialize_connection',
                                  {'connector': self._connector()})
            connection = result.get('connection_info')
            if not isinstance(connection, dict):
                raise ProviderError(
                    f"cinder returned no connection info for volume {volume_id}"
                )
            volume_type = connection.get('driver_volume_type')
            if volume_type not in SUPPORTED_VOLUME_TYPES:
                raise ProviderError(
                    f"cinder volume {volume_id} has unsupported volume type {volume_type}"
                )

            self._action(volume_id, 'os-attach', {
                'mountpoint': target_dir,
                'host_name': self.node_name,
                'mode': 'ro' if config.read_only else 'rw',
            })
        except (ks_exceptions.ClientException, ProviderError) as e:
            self._unreserve(volume_id)
            if isinstance(e, ProviderError):
                raise
            raise ProviderError(f"failed to attach cinder volume {volume_id}: {e}")

        data = connection.get('data')
        if not isinstance(data, dict):
            data = {}
        metadata = {
            'volume_type': volume_type,
            'name': data.get('name'),
            'hosts': data.get('hosts', []),
            'ports': data.get('ports', []),
        }
        if self.keyring:
            metadata['keyring'] = self.keyring

        config.metadata = metadata
        LOG.info(f"Cinder volume {volume_id} attached on {self.node_name}",
                 extra={'volume_id': volume_id, 'target_dir': target_dir})
        return metadata

    def _unreserve(self, volume_id: str):
        try:
            self._action(volume_id, 'os-unreserve')
        except (ks_exceptions.ClientException, ProviderError) as e:
            LOG.warning(f"Failed to unreserve cinder volume {volume_id}: {e}")

    def detach_disk(self, config: DriverConfig) -> None:
        """Terminate the connection of the volume and mark it detached."""
        volume_id = config.volume_id
        try:
            self._action(volume_id, 'os-begin_detaching')
        except ks_exceptions.ClientException as e:
            raise ProviderError(f"failed to detach cinder volume {volume_id}: {e}")

        try:
            self._action(volume_id, 'os-terminate_connection',
                         {'connector': self._connector()})
            self._action(volume_id, 'os-detach', {})
        except (ks_exceptions.ClientException, ProviderError) as e:
            try:
                self._action(volume_id, 'os-roll_detaching')
            except (ks_exceptions.ClientException, ProviderError) as roll_error:
                LOG.warning(f"Failed to roll back detaching of {volume_id}: {roll_error}")
            raise ProviderError(f"failed to detach cinder volume {volume_id}: {e}")

        LOG.info(f"Cinder volume {volume_id} detached", extra={'volume_id': volume_id})
