"""
Single-slot, file-backed store for the saved match.
"""
import logging
import os
import pathlib
import platform
import tempfile
from typing import Optional

from .codec import SnapshotDecodeError

logger = logging.getLogger(__name__)

SAVE_FILE_NAME = "last_game_state.json"
SAVE_FILE_ENV = "SPLITSWEEPER_SAVE_FILE"


# Returns the path of the save file. Uses SPLITSWEEPER_SAVE_FILE when set,
# otherwise the per-user data directory for the current operating system.
def default_save_path() -> pathlib.Path:
    override = os.getenv(SAVE_FILE_ENV)
    if override:
        return pathlib.Path(override).expanduser()

    home = pathlib.Path.home()
    system = platform.system()

    if system == "Darwin":
        data_dir = home / "Library/Application Support/splitsweeper"
    elif system == "Windows":
        app_data = os.getenv("AppData")
        if app_data is None:
            raise RuntimeError("AppData environment variable not set")
        data_dir = pathlib.Path(app_data) / "splitsweeper"
    else:
        xdg_data_home = os.getenv("XDG_DATA_HOME")
        if xdg_data_home:
            data_dir = pathlib.Path(xdg_data_home) / "splitsweeper"
        else:
            data_dir = home / ".local/share/splitsweeper"

    return data_dir / SAVE_FILE_NAME


class SaveSlot:
    """
    One fixed location holding at most one saved match.

    Each write replaces the previous blob.
    """

    def __init__(self, path: Optional[pathlib.Path] = None) -> None:
        self.path = pathlib.Path(path) if path else default_save_path()

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> Optional[str]:
        """
        Read the saved blob.

        Returns:
            The blob, or None when nothing is saved.

        Raises:
            OSError: If the file exists but cannot be read.
            SnapshotDecodeError: If the file is not UTF-8 text.
        """
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as error:
            raise SnapshotDecodeError(
                f"Saved match is not UTF-8 text: {error}"
            ) from error

    def write(self, blob: str) -> None:
        """
        Replace the saved blob atomically.

        Raises:
            OSError: If the directory or file cannot be written.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=".", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(blob)
            os.replace(tmp_name, self.path)
        except BaseException:
            pathlib.Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug(f"Wrote saved match to {self.path}")

    def delete(self) -> bool:
        """
        Remove the saved blob.

        Returns:
            True if a file was removed.
        """
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        return True
