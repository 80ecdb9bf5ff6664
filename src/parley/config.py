import logging
import os
from pathlib import Path

from rich.logging import RichHandler


def get_scripts_path() -> Path:
    return Path(os.environ["PARLEY_SCRIPTS"])


def walk_script_files(scripts_path: Path | None = None):
    if scripts_path is None:
        scripts_path = get_scripts_path()

    yield from sorted(Path(scripts_path).rglob("*.dlg"))


def get_log_level(verbose: bool = False) -> str:
    if verbose:
        return "DEBUG"
    return os.environ.get("PARLEY_LOG_LEVEL", "WARNING").upper()


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=get_log_level(verbose),
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )
