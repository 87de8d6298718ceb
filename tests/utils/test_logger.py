from typing import Any, List
from workhorse.modules.logging.base import BaseLogger


class _TestLogger(BaseLogger):
    """Test logger that captures all logs."""
    def __init__(self):
        self.logs: List[str] = []
        self.records: List[dict] = []

    def _capture(self, level: str, message: str, fields: dict) -> None:
        self.logs.append(f"{level}: {message}")
        self.records.append({"level": level, "message": message, **fields})

    def log_request(self, method: str, path: str, status: int, duration_ms: float, request_id: str = "") -> None:
        self.logs.append(f"REQUEST: {method} {path} {status}")
        self.records.append({
            "level": "INFO",
            "message": "request",
            "method": method,
            "path": path,
            "status": status,
            "duration_ms": duration_ms,
            "request_id": request_id,
        })

    def log_info(self, message: str, **fields: Any) -> None:
        self._capture("INFO", message, fields)

    def log_error(self, message: str, **fields: Any) -> None:
        self._capture("ERROR", message, fields)

    def log_warning(self, message: str, **fields: Any) -> None:
        self._capture("WARNING", message, fields)

    def log_debug(self, message: str, **fields: Any) -> None:
        self._capture("DEBUG", message, fields)

    def flush(self) -> None:
        pass

    def get_logs(self) -> List[str]:
        """Get all captured logs."""
        return self.logs


def create_test_logger() -> _TestLogger:
    """Create a test logger instance."""
    return _TestLogger()
