"""
Unit tests for the driver dispatcher and command registry
"""

import json
import unittest
from types import MappingProxyType
from unittest.mock import MagicMock

from flexcinder.driver import Dispatcher, FlexVolumeDriver, Operation, build_registry
from flexcinder.exceptions import InvalidInvocation, ProviderError
from flexcinder.services.volume_service import VolumeService
from tests.fakes import InMemoryMetadataStore, ProviderFactory


class TestDispatcher(unittest.TestCase):
    """Test cases for Dispatcher"""

    def setUp(self):
        """Set up test fixtures"""
        self.volume_service = MagicMock(spec=VolumeService)
        self.volume_service.mount.return_value = None
        self.volume_service.unmount.return_value = None
        self.dispatcher = Dispatcher(FlexVolumeDriver(self.volume_service))

    def test_init(self):
        """Test init reports attach capability off"""
        self.assertEqual(
            self.dispatcher.run(['init']),
            {'status': 'Success', 'capabilities': {'attach': False}}
        )

    def test_init_line(self):
        """Test init renders one JSON line"""
        line = self.dispatcher.run_line(['init'])
        self.assertTrue(line.endswith('\n'))
        self.assertEqual(line.count('\n'), 1)
        self.assertEqual(
            json.loads(line),
            {'status': 'Success', 'capabilities': {'attach': False}}
        )

    def test_stub_operations(self):
        """Test attach, detach, waitforattach and isattached stubs"""
        self.assertEqual(self.dispatcher.run(['attach', '{}', 'node1']), {'status': 'Success'})
        self.assertEqual(self.dispatcher.run(['detach', '/dev/vdb', 'node1']), {'status': 'Success'})
        self.assertEqual(
            self.dispatcher.run(['waitforattach', '/dev/vdb', '{}']),
            {'status': 'Success', 'device': '/dev/vdb'}
        )
        self.assertEqual(
            self.dispatcher.run(['isattached', '{}', 'node1']),
            {'status': 'Success', 'attached': True}
        )
        self.volume_service.mount.assert_not_called()
        self.volume_service.unmount.assert_not_called()

    def test_mount_and_unmount_delegate(self):
        """Test mount and unmount call the volume service once"""
        self.assertEqual(self.dispatcher.run(['mount', '/mnt/a', '{}']), {'status': 'Success'})
        self.volume_service.mount.assert_called_once_with('/mnt/a', '{}')

        self.assertEqual(self.dispatcher.run(['unmount', '/mnt/a']), {'status': 'Success'})
        self.volume_service.unmount.assert_called_once_with('/mnt/a')

    def test_unknown_operation(self):
        """Test unknown operations are not supported, whatever their args"""
        for args in (['getvolumename'], ['expandvolume', 'a', 'b', 'c'], ['MOUNT', 'a', 'b']):
            self.assertEqual(self.dispatcher.run(args), {'status': 'Not supported'})

    def test_no_arguments(self):
        """Test empty invocation fails"""
        with self.assertRaises(InvalidInvocation):
            self.dispatcher.do_run([])

        envelope = self.dispatcher.run([])
        self.assertEqual(envelope['status'], 'Failure')
        self.assertIn('no arguments', envelope['message'])

    def test_wrong_argument_count(self):
        """Test every registered operation rejects a wrong arity"""
        for name, operation in build_registry().items():
            args = [name] + ['x'] * (operation.num_args + 1)
            envelope = self.dispatcher.run(args)

            self.assertEqual(envelope['status'], 'Failure')
            self.assertIn(f"unexpected number of args {operation.num_args + 1}", envelope['message'])
            self.assertIn(f"(expected {operation.num_args})", envelope['message'])
            self.assertNotIn('capabilities', envelope)

    def test_handler_error_becomes_failure(self):
        """Test handler errors are reported verbatim"""
        self.volume_service.unmount.side_effect = ProviderError('detach failed: 503')

        self.assertEqual(
            self.dispatcher.run(['unmount', '/mnt/a']),
            {'status': 'Failure', 'message': 'detach failed: 503'}
        )

    def test_unexpected_error_becomes_failure(self):
        """Test unexpected exceptions still produce an envelope"""
        self.volume_service.mount.side_effect = RuntimeError('boom')

        self.assertEqual(
            self.dispatcher.run(['mount', '/mnt/a', '{}']),
            {'status': 'Failure', 'message': 'boom'}
        )

    def test_substitute_registry(self):
        """Test a smaller registry can be injected"""
        handler = MagicMock(return_value={'answer': 42})
        registry = MappingProxyType({'probe': Operation('probe', 1, handler)})
        dispatcher = Dispatcher(FlexVolumeDriver(self.volume_service), registry)

        self.assertEqual(dispatcher.run(['probe', 'a']), {'status': 'Success', 'answer': 42})
        handler.assert_called_once_with(dispatcher.driver, ['a'])
        self.assertEqual(dispatcher.run(['init']), {'status': 'Not supported'})


class TestRegistry(unittest.TestCase):
    """Test cases for the command registry"""

    def test_registry_contents(self):
        """Test the registered operations and their arity"""
        registry = build_registry()
        self.assertEqual(
            {name: op.num_args for name, op in registry.items()},
            {
                'init': 0,
                'attach': 2,
                'detach': 2,
                'waitforattach': 2,
                'isattached': 2,
                'mount': 2,
                'unmount': 1,
            }
        )

    def test_registry_is_read_only(self):
        """Test the registry cannot be modified"""
        registry = build_registry()
        with self.assertRaises(TypeError):
            registry['init'] = None


class TestDispatcherScenarios(unittest.TestCase):
    """End-to-end scenarios through the real volume service"""

    def setUp(self):
        self.store = InMemoryMetadataStore()
        self.factory = ProviderFactory()
        service = VolumeService(self.store, self.factory, '/etc/kubernetes/cinder.conf')
        self.dispatcher = Dispatcher(FlexVolumeDriver(service))

    def test_mount_missing_volume_id(self):
        """Test mount with options lacking the volume id"""
        envelope = self.dispatcher.run(['mount', '/mnt/a', '{}'])

        self.assertEqual(envelope['status'], 'Failure')
        self.assertTrue(envelope['message'].startswith('jsonOptions is not set by user properly: '))
        self.assertEqual(self.factory.provider.attached, [])

    def test_unmount_nonexistent_dir(self):
        """Test unmount of a missing directory"""
        envelope = self.dispatcher.run(['unmount', '/nonexistent/flexcinder/dir'])

        self.assertEqual(envelope, {
            'status': 'Failure',
            'message': 'volume directory: /nonexistent/flexcinder/dir does not exist'
        })
        self.assertEqual(self.factory.provider.detached, [])


if __name__ == '__main__':
    unittest.main()
