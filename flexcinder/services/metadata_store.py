"""Sidecar metadata persistence

The sidecar file in the mount target directory is the only state shared
between driver invocations. No lock is taken: the orchestrator is expected
to serialize lifecycle operations per target directory.
"""

import json
import os
import tempfile
from abc import ABC, abstractmethod

from flexcinder.config import DriverSettings
from flexcinder.exceptions import MetadataIOError
from flexcinder.models import PersistedMountState
from flexcinder.utils.logger import get_logger

LOG = get_logger(__name__)


class MetadataStore(ABC):
    """Read/write access to persisted mount state, keyed by target dir"""

    @abstractmethod
    def write(self, target_dir: str, state: PersistedMountState) -> None:
        """Persist state for target_dir. Raises MetadataIOError."""
        pass

    @abstractmethod
    def read(self, target_dir: str) -> PersistedMountState:
        """Load state for target_dir. Raises MetadataIOError."""
        pass

    @abstractmethod
    def delete(self, target_dir: str) -> None:
        """Remove state for target_dir. Raises MetadataIOError."""
        pass


class FileMetadataStore(MetadataStore):
    """Stores mount state as a JSON file inside the mount target directory."""

    def __init__(self, file_name: str = DriverSettings.DEFAULT_METADATA_FILE_NAME):
        self.file_name = file_name

    def path(self, target_dir: str) -> str:
        return os.path.join(target_dir, self.file_name)

    def write(self, target_dir: str, state: PersistedMountState) -> None:
        """
        Atomically write the sidecar file.

        Data goes to a temporary file in the same directory which is synced
        and then renamed over the final name, so readers never see a
        partially written document.
        """
        path = self.path(target_dir)
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(
                prefix=f'.{self.file_name}.', suffix='.tmp', dir=target_dir
            )
            with os.fdopen(fd, 'w') as f:
                json.dump(state.to_dict(), f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
            tmp_path = None
            self._sync_dir(target_dir)
        except OSError as e:
            raise MetadataIOError(f"failed to write metadata file {path}: {e}")
        finally:
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    LOG.debug(f"Could not remove temporary file {tmp_path}")

        LOG.debug(f"Wrote metadata file {path}")

    @staticmethod
    def _sync_dir(target_dir: str):
        dir_fd = os.open(target_dir, os.O_RDONLY)
        try:
            os.fsync(dir_fd)
        finally:
            os.close(dir_fd)

    def read(self, target_dir: str) -> PersistedMountState:
        path = self.path(target_dir)
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except FileNotFoundError:
            raise MetadataIOError(f"metadata file {path} does not exist")
        except (OSError, ValueError) as e:
            raise MetadataIOError(f"failed to read metadata file {path}: {e}")

        try:
            return PersistedMountState.from_dict(data)
        except ValueError as e:
            raise MetadataIOError(f"invalid metadata file {path}: {e}")

    def delete(self, target_dir: str) -> None:
        path = self.path(target_dir)
        try:
            os.remove(path)
        except FileNotFoundError:
            LOG.warning(f"Metadata file {path} already removed")
        except OSError as e:
            raise MetadataIOError(f"failed to remove metadata file {path}: {e}")
