"""Flexvolume driver commands and dispatcher

Invocation: <driver executable> <operation> [args...]
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional

from flexcinder.exceptions import FlexVolumeException, InvalidInvocation
from flexcinder.services.volume_service import VolumeService
from flexcinder.utils.logger import get_logger
from flexcinder.utils.response import STATUS_NOT_SUPPORTED, format_result, render_envelope

LOG = get_logger(__name__)

Result = Optional[Dict[str, Any]]


class FlexVolumeDriver:
    """Handlers of the flexvolume operations.

    attach, detach, waitforattach and isattached are stubs: the volume is
    attached and detached as part of mount and unmount.
    """

    def __init__(self, volume_service: VolumeService):
        self.volume_service = volume_service

    # Invocation: <driver executable> init
    def init(self) -> Result:
        return {'capabilities': {'attach': False}}

    # Invocation: <driver executable> attach <json options> <node name>
    def attach(self, json_options: str, node_name: str) -> Result:
        return None

    # Invocation: <driver executable> detach <mount device> <node name>
    def detach(self, mount_dev: str, node_name: str) -> Result:
        return None

    # Invocation: <driver executable> waitforattach <mount device> <json options>
    def wait_for_attach(self, mount_dev: str, json_options: str) -> Result:
        return {'device': mount_dev}

    # Invocation: <driver executable> isattached <json options> <node name>
    def is_attached(self, json_options: str, node_name: str) -> Result:
        return {'attached': True}

    # Invocation: <driver executable> mount <mount dir> <json options>
    def mount(self, target_dir: str, json_options: str) -> Result:
        return self.volume_service.mount(target_dir, json_options)

    # Invocation: <driver executable> unmount <mount dir>
    def unmount(self, target_dir: str) -> Result:
        return self.volume_service.unmount(target_dir)


@dataclass(frozen=True)
class Operation:
    """A registered driver operation"""
    name: str
    num_args: int
    run: Callable[[FlexVolumeDriver, List[str]], Result]


def build_registry() -> Mapping[str, Operation]:
    """Return the read-only table of supported operations."""
    operations = [
        Operation('init', 0, lambda d, args: d.init()),
        Operation('attach', 2, lambda d, args: d.attach(args[0], args[1])),
        Operation('detach', 2, lambda d, args: d.detach(args[0], args[1])),
        Operation('waitforattach', 2, lambda d, args: d.wait_for_attach(args[0], args[1])),
        Operation('isattached', 2, lambda d, args: d.is_attached(args[0], args[1])),
        Operation('mount', 2, lambda d, args: d.mount(args[0], args[1])),
        Operation('unmount', 1, lambda d, args: d.unmount(args[0])),
    ]
    return MappingProxyType({op.name: op for op in operations})


class Dispatcher:
    """Runs one driver invocation"""

    def __init__(self, driver: FlexVolumeDriver,
                 registry: Optional[Mapping[str, Operation]] = None):
        self.driver = driver
        self.registry = registry if registry is not None else build_registry()

    def do_run(self, args: List[str]) -> Result:
        """
        Dispatch args to the matching operation.

        Args:
            args: Operation name followed by its arguments

        Returns:
            Result fields of the operation

        Raises:
            InvalidInvocation: If args is empty or has the wrong arity
        """
        if not args:
            raise InvalidInvocation("no arguments passed to flexvolume driver")

        op, op_args = args[0], list(args[1:])
        operation = self.registry.get(op)
        if operation is None:
            LOG.debug(f"Operation {op} is not supported", extra={'operation': op})
            return {'status': STATUS_NOT_SUPPORTED}

        if operation.num_args != len(op_args):
            raise InvalidInvocation(
                f"unexpected number of args {len(op_args)} "
                f"(expected {operation.num_args}) for operation {op!r}"
            )

        return operation.run(self.driver, op_args)

    def run(self, args: List[str]) -> Dict[str, Any]:
        """Dispatch args and return the response envelope."""
        op = args[0] if args else None
        try:
            fields = self.do_run(args)
        except FlexVolumeException as e:
            LOG.error(f"Operation {op} failed: {e}", extra={'operation': op})
            return format_result(error=e)
        except Exception as e:
            LOG.error(f"Operation {op} failed unexpectedly: {e}",
                      exc_info=True, extra={'operation': op})
            return format_result(error=e)

        return format_result(fields)

    def run_line(self, args: List[str]) -> str:
        """Dispatch args and return the envelope as one line of JSON."""
        return render_envelope(self.run(args))
