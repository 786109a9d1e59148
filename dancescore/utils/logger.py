"""
Logger Module for DANCESCORE.

Structured per-session event log. Entries are kept in memory, echoed
to the standard `dancescore` logger and written to a JSON file on
save_session_log().
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional
from enum import Enum
import json
import logging
import time
from pathlib import Path

from ..core.config import settings


class LogLevel(Enum):
    """Log levels."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogCategory(Enum):
    """Log categories."""
    POSE = "pose"
    SCORE = "score"
    INTERVAL = "interval"
    CALIBRATION = "calibration"
    SYSTEM = "system"


@dataclass
class LogEntry:
    """Log entry."""
    timestamp: float
    level: LogLevel
    category: LogCategory
    message: str
    data: Optional[Dict] = None

    def to_dict(self) -> dict:
        return {
            'timestamp': self.timestamp,
            'level': self.level.value,
            'category': self.category.value,
            'message': self.message,
            'data': self.data,
        }


@dataclass
class SessionLogger:
    """
    Logger for scoring sessions.
    """

    session_id: str
    log_dir: str = settings.LOG_DIR
    echo: bool = True
    entries: List[LogEntry] = field(default_factory=list)

    def __post_init__(self):
        self.log_dir = Path(self.log_dir)
        self._logger = logging.getLogger("dancescore.session")

    def log(self, level: LogLevel, category: LogCategory, message: str, data: Optional[Dict] = None):
        """
        Log a message.

        Args:
            level: Log level
            category: Log category
            message: Log message
            data: Optional data
        """
        entry = LogEntry(
            timestamp=time.time(),
            level=level,
            category=category,
            message=message,
            data=data
        )
        self.entries.append(entry)
        if self.echo:
            getattr(self._logger, level.value)(f"[{self.session_id}][{category.value}] {message}")

    def info(self, category: LogCategory, message: str, data: Optional[Dict] = None):
        """Log info message."""
        self.log(LogLevel.INFO, category, message, data)

    def warning(self, category: LogCategory, message: str, data: Optional[Dict] = None):
        """Log warning message."""
        self.log(LogLevel.WARNING, category, message, data)

    def error(self, category: LogCategory, message: str, data: Optional[Dict] = None):
        """Log error message."""
        self.log(LogLevel.ERROR, category, message, data)

    def log_scoring_frame(
        self,
        live_timestamp: float,
        original_timestamp: Optional[float],
        scores: Optional[Dict[str, float]] = None,
        weak_joints: Optional[List[str]] = None
    ):
        """Log one scored live frame at debug level."""
        data = {
            'live_timestamp': live_timestamp,
            'original_timestamp': original_timestamp,
        }
        if scores:
            data['scores'] = scores
        if weak_joints:
            data['weak_joints'] = weak_joints
        self.log(LogLevel.DEBUG, LogCategory.SCORE, f"Scored frame at {live_timestamp:.0f}ms", data)

    def log_interval_scores(self, interval_scores: List[Dict[str, float]]):
        for index, scores in enumerate(interval_scores):
            total = scores.get('total')
            if total is None:
                self.warning(LogCategory.INTERVAL, f"Interval {index}: no scored frames")
            else:
                self.info(LogCategory.INTERVAL, f"Interval {index}: {total:.1f}/100", scores)

    def log_calibration(self, result: Dict):
        """Log a calibration / offset estimation result."""
        self.info(LogCategory.CALIBRATION, f"Calibration offset {result.get('offset_ms')}ms", result)

    def save_session_log(self) -> Path:
        """Save session log to file and return its path."""
        self.log_dir.mkdir(parents=True, exist_ok=True)
        log_file = self.log_dir / f"session_{self.session_id}_{int(time.time())}.json"

        log_data = {
            'session_id': self.session_id,
            'timestamp': time.time(),
            'entries': [entry.to_dict() for entry in self.entries]
        }

        with open(log_file, 'w', encoding='utf-8') as f:
            json.dump(log_data, f, indent=2, ensure_ascii=False)
        return log_file


def create_session_logger(session_id: str, log_dir: str = settings.LOG_DIR) -> SessionLogger:
    """
    Create a session logger.

    Args:
        session_id: Session ID
        log_dir: Log directory

    Returns:
        SessionLogger instance
    """
    return SessionLogger(session_id, log_dir)
