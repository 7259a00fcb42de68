"""Driver executable entry point"""

import sys
from functools import partial

import click

from flexcinder.config import DriverSettings
from flexcinder.driver import Dispatcher, FlexVolumeDriver
from flexcinder.exceptions import ConfigurationException
from flexcinder.providers import CinderProvider
from flexcinder.services.metadata_store import FileMetadataStore
from flexcinder.services.volume_service import VolumeService
from flexcinder.utils.logger import get_logger, setup_logging
from flexcinder.utils.response import render_result

LOG = get_logger(__name__)


def create_dispatcher(settings: DriverSettings) -> Dispatcher:
    """Wire the driver for one invocation."""
    provider_factory = partial(
        CinderProvider.from_config_file,
        node_name=settings.node_name,
        timeout=settings.request_timeout,
    )
    volume_service = VolumeService(
        store=FileMetadataStore(settings.metadata_file_name),
        provider_factory=provider_factory,
        default_config_ref=settings.default_cinder_config,
    )
    return Dispatcher(FlexVolumeDriver(volume_service))


@click.command(context_settings={
    'ignore_unknown_options': True,
    'allow_interspersed_args': False,
})
@click.option('--config', 'config_file', envvar='FLEXCINDER_CONFIG',
              help='Driver settings file path')
@click.argument('args', nargs=-1, type=click.UNPROCESSED)
def cli(config_file, args):
    """Cinder flexvolume driver.

    Called by the kubelet as: flexcinder <operation> [args...]
    """
    try:
        settings = DriverSettings.load(config_file)
    except ConfigurationException as e:
        click.echo(render_result(error=e), nl=False)
        return

    setup_logging(settings.log_level, settings.log_file)
    LOG.debug("Loaded driver settings", extra={'settings': settings.to_dict()})
    LOG.debug(f"Invoked with {list(args)}", extra={'operation': args[0] if args else None})

    dispatcher = create_dispatcher(settings)
    click.echo(dispatcher.run_line(list(args)), nl=False)


def main():
    cli(args=sys.argv[1:], prog_name='flexcinder')


if __name__ == '__main__':
    main()
