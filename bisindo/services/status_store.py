import logging
from dataclasses import dataclass, field
from typing import List

logger = logging.getLogger("bisindo")

@dataclass
class StatusStore:
    """Recent pipeline log lines, served by GET /status and mirrored to `logging`."""
    max_lines: int = 200
    logs: List[str] = field(default_factory=list)

    def log(self, msg: str, level: int = logging.INFO):
        logger.log(level, msg)
        self.logs.append(msg)
        if len(self.logs) > self.max_lines:
            self.logs = self.logs[-self.max_lines:]

    def warn(self, msg: str):
        self.log(msg, logging.WARNING)
