"""
SubSweep - Open Source Subdomain Enumeration Tool
Author: ha-2
GitHub: https://github.com/ha-2
License: CC BY-NC 4.0
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol, Union

from subsweep.errors import PersistenceError
from subsweep.schemas import ScanResult

logger = logging.getLogger(__name__)


class HistoryStore(Protocol):
    """Anything that can keep a record of finished scans"""

    def record(self, domain: str, result: ScanResult) -> None:
        ...


class JsonlHistoryStore:
    """Append one JSON line per scan to a local file"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def record(self, domain: str, result: ScanResult) -> None:
        entry = {
            "domain": domain,
            "scanned_at": datetime.now(timezone.utc).isoformat(),
            "count": result.count,
            "records": result.records,
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry) + "\n")
        except OSError as e:
            raise PersistenceError(f"Failed to write scan history to {self.path}: {e}") from e
        logger.debug(f"Recorded scan of {domain} in {self.path}")
