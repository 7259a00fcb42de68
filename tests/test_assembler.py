"""
Unit tests for configuration assembly
"""

import json
import unittest

from flexcinder.exceptions import InvalidOptions, MetadataIOError
from flexcinder.models import PersistedMountState
from flexcinder.services.assembler import config_from_options, config_from_state
from tests.fakes import InMemoryMetadataStore, ProviderFactory

DEFAULT_CONFIG = '/etc/kubernetes/cinder.conf'


class TestConfigFromOptions(unittest.TestCase):
    """Test cases for config_from_options"""

    def setUp(self):
        self.factory = ProviderFactory()

    def test_minimal_options(self):
        """Test required options with the default cinder config"""
        options = json.dumps({'volume-id': 'v1', 'kubernetes.io/fsType': 'ext4'})
        config, provider = config_from_options(options, self.factory, DEFAULT_CONFIG)

        self.assertEqual(config.volume_id, 'v1')
        self.assertEqual(config.fs_type, 'ext4')
        self.assertEqual(config.cinder_config, DEFAULT_CONFIG)
        self.assertFalse(config.read_only)
        self.assertEqual(config.metadata, {})
        self.assertIs(provider, self.factory.provider)
        self.assertEqual(self.factory.config_refs, [DEFAULT_CONFIG])

    def test_all_options(self):
        """Test optional keys and extra kubelet options"""
        options = json.dumps({
            'volume-id': 'v1',
            'kubernetes.io/fsType': '',
            'cinder-config': '/etc/cinder/a.conf',
            'kubernetes.io/readwrite': 'ro',
            'kubernetes.io/pod.name': 'web-0',
        })
        config, _ = config_from_options(options, self.factory, DEFAULT_CONFIG)

        self.assertEqual(config.fs_type, '')
        self.assertEqual(config.cinder_config, '/etc/cinder/a.conf')
        self.assertTrue(config.read_only)

    def test_invalid_key_is_named(self):
        """Test the offending key is reported"""
        cases = {
            'volume-id': {'kubernetes.io/fsType': 'ext4'},
            'kubernetes.io/fsType': {'volume-id': 'v1', 'kubernetes.io/fsType': 4},
            'cinder-config': {'volume-id': 'v1', 'kubernetes.io/fsType': 'ext4',
                              'cinder-config': ['/a']},
        }
        for key, options in cases.items():
            with self.assertRaises(InvalidOptions) as ctx:
                config_from_options(json.dumps(options), self.factory, DEFAULT_CONFIG)
            self.assertEqual(ctx.exception.key, key)
            self.assertIn(key, str(ctx.exception))

        self.assertEqual(self.factory.config_refs, [])


class TestConfigFromState(unittest.TestCase):
    """Test cases for config_from_state"""

    def test_recover_config(self):
        """Test the configuration is rebuilt from persisted state"""
        store = InMemoryMetadataStore()
        store.write('/mnt/a', PersistedMountState('/etc/cinder/a.conf', 'v1', 'ext4'))
        factory = ProviderFactory()

        config, _ = config_from_state('/mnt/a', store, factory)

        self.assertEqual((config.volume_id, config.fs_type, config.cinder_config),
                         ('v1', 'ext4', '/etc/cinder/a.conf'))
        self.assertEqual(factory.config_refs, ['/etc/cinder/a.conf'])

    def test_missing_state(self):
        """Test missing state is an error, not a default"""
        factory = ProviderFactory()
        with self.assertRaises(MetadataIOError):
            config_from_state('/mnt/a', InMemoryMetadataStore(), factory)
        self.assertEqual(factory.config_refs, [])


if __name__ == '__main__':
    unittest.main()
