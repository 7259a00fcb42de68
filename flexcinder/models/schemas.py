"""Data schemas for driver state"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from flexcinder.utils.logger import get_logger
from flexcinder.utils.validators import extract_string_list

LOG = get_logger(__name__)

# top-level key of the sidecar document
SIDECAR_SECTION = 'cinder'


@dataclass
class DriverConfig:
    """Volume configuration assembled once per invocation"""
    volume_id: str
    fs_type: str
    cinder_config: str
    read_only: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PersistedMountState:
    """Record kept in the mount target directory between invocations"""
    config_key: str
    volume_id: str
    fs_type: str
    volume_type: Optional[str] = None
    name: Optional[str] = None
    hosts: List[str] = field(default_factory=list)
    ports: List[str] = field(default_factory=list)

    @classmethod
    def from_config(cls, config: DriverConfig,
                    metadata: Optional[Dict[str, Any]] = None) -> 'PersistedMountState':
        """
        Build the record from a driver config and provider metadata.

        Hosts and ports that cannot be read as string lists are dropped.
        """
        metadata = metadata or {}
        state = cls(
            config_key=config.cinder_config,
            volume_id=config.volume_id,
            fs_type=config.fs_type,
        )

        if isinstance(metadata.get('volume_type'), str):
            state.volume_type = metadata['volume_type']
        if isinstance(metadata.get('name'), str):
            state.name = metadata['name']

        for key in ('hosts', 'ports'):
            if key not in metadata:
                continue
            try:
                setattr(state, key, extract_string_list(metadata[key]))
            except ValueError as e:
                LOG.warning(f"cannot parse metadata {key}: {e}")

        return state

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'configKey': self.config_key,
            'volumeID': self.volume_id,
            'fsType': self.fs_type,
        }
        if self.volume_type is not None:
            data['volumeType'] = self.volume_type
        if self.name is not None:
            data['name'] = self.name
        if self.hosts:
            data['hosts'] = list(self.hosts)
        if self.ports:
            data['ports'] = list(self.ports)
        return {SIDECAR_SECTION: data}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PersistedMountState':
        """
        Parse a sidecar document.

        Raises:
            ValueError: If the document does not describe a mounted volume
        """
        if not isinstance(data, dict) or not isinstance(data.get(SIDECAR_SECTION), dict):
            raise ValueError(f"missing '{SIDECAR_SECTION}' section")
        section = data[SIDECAR_SECTION]

        def required(key: str) -> str:
            value = section.get(key)
            if not isinstance(value, str) or not value:
                raise ValueError(f"missing or invalid '{key}'")
            return value

        def optional(key: str) -> Optional[str]:
            value = section.get(key)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"invalid '{key}'")
            return value

        return cls(
            config_key=required('configKey'),
            volume_id=required('volumeID'),
            fs_type=optional('fsType') or '',
            volume_type=optional('volumeType'),
            name=optional('name'),
            hosts=extract_string_list(section.get('hosts') or []),
            ports=extract_string_list(section.get('ports') or []),
        )
