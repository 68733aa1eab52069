"""Journal snapshot I/O used by the CLI.

The metrics core never touches the filesystem; these helpers only feed it
and persist the summaries it produces.
"""

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path

from shared.types import JournalSnapshot

logger = logging.getLogger(__name__)


def safe_json_read(filepath: Path, default=None):
    """Read a JSON file, falling back to its ``.json.bak`` sibling.

    Args:
        filepath: Path to the JSON file.
        default: Returned when neither the file nor its backup parse.

    Returns:
        Parsed JSON data, or *default*.
    """
    for candidate in (filepath, filepath.with_suffix(".json.bak")):
        try:
            with open(candidate, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, FileNotFoundError, OSError):
            continue
        if candidate != filepath:
            logger.warning("Recovered %s from backup %s", filepath, candidate)
        return data
    return default


def load_journal_snapshot(filepath: Path) -> JournalSnapshot:
    """Load a ``{"trades": [...], "portfolios": [...]}`` snapshot.

    Missing or unreadable files yield an empty snapshot so the dashboard can
    still render its "no data" state.
    """
    data = safe_json_read(filepath, default={})
    if isinstance(data, list):
        # bare list of trades
        data = {"trades": data}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring malformed journal snapshot {filepath}")
        data = {}

    snapshot: JournalSnapshot = {
        "trades": [t for t in data.get("trades") or [] if isinstance(t, dict)],
        "portfolios": [p for p in data.get("portfolios") or [] if isinstance(p, dict)],
    }
    if data.get("activePortfolioIds"):
        snapshot["activePortfolioIds"] = [str(pid) for pid in data["activePortfolioIds"]]

    logger.info(
        f"Loaded {len(snapshot['trades'])} trades and "
        f"{len(snapshot['portfolios'])} portfolios from {filepath}"
    )
    return snapshot


def atomic_json_write(filepath: Path, data, *, mkdir: bool = True):
    """Write JSON through a temp file + rename so readers never see a partial file.

    The previous file, if any, is copied to ``.json.bak`` for
    :func:`safe_json_read`.
    """
    if mkdir:
        filepath.parent.mkdir(parents=True, exist_ok=True)

    if filepath.exists():
        try:
            shutil.copy2(filepath, filepath.with_suffix(".json.bak"))
        except OSError as e:
            logger.warning(f"Could not back up {filepath}: {e}")

    fd, tmp_path = tempfile.mkstemp(dir=filepath.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False, default=str)
        os.replace(tmp_path, filepath)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
