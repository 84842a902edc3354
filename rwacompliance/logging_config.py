"""
Logging configuration for RWA Compliance.

Provides structured JSON logging for audit trails and debugging.
"""

import json
import logging
import sys
import time
from typing import Any, Optional


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs one JSON object per record so audit output can be shipped
    to a log aggregation system unchanged.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, 'extra_fields'):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


class AuditLogger:
    """
    Specialized logger for compliance audit output.

    Successful mutations log at INFO, refused operations at WARNING and
    individual verdicts at DEBUG.
    """

    def __init__(self, name: str = "rwacompliance.audit"):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, event_type: str, **kwargs) -> None:
        if not self._logger.isEnabledFor(level):
            return
        message = kwargs.pop("message", "")
        record = self._logger.makeRecord(
            self._logger.name,
            level,
            "",
            0,
            f"{event_type}: {message}",
            (),
            None
        )
        record.extra_fields = {"event_type": event_type, **kwargs}
        self._logger.handle(record)

    def audit_event(self, event_type: str, key: Any, sequence: int, entry_hash: str) -> None:
        """Log an appended audit trail entry. Only the affected key is logged."""
        self._log(
            logging.INFO,
            event_type,
            key=str(key),
            sequence=sequence,
            entry_hash=entry_hash,
            message=f"{event_type} for {key}"
        )

    def unauthorized_attempt(self, caller: Optional[str], operation: str, role: str) -> None:
        self._log(
            logging.WARNING,
            "UNAUTHORIZED",
            caller=caller,
            operation=operation,
            required_role=role,
            message=f"{caller} attempted {operation} without {role} rights"
        )

    def compliance_decision(self, holder: str, asset_id: Any, eligible: bool) -> None:
        self._log(
            logging.DEBUG,
            "COMPLIANCE_DECISION",
            holder=holder,
            asset_id=asset_id,
            eligible=eligible,
            message=f"{holder} {'eligible' if eligible else 'not eligible'} for asset {asset_id}"
        )

    def transfer_denied(
        self,
        recipient: str,
        asset_id: Any,
        failed_checks: Optional[list] = None
    ) -> None:
        self._log(
            logging.WARNING,
            "TRANSFER_DENIED",
            recipient=recipient,
            asset_id=asset_id,
            failed_checks=failed_checks,
            message=f"Transfer of asset {asset_id} to {recipient} denied"
        )

    def security_event(
        self,
        event: str,
        severity: str = "medium",
        **details
    ) -> None:
        """Log a security-relevant event."""
        level = {
            "low": logging.INFO,
            "medium": logging.WARNING,
            "high": logging.ERROR,
            "critical": logging.CRITICAL
        }.get(severity, logging.WARNING)

        self._log(
            level,
            "SECURITY_EVENT",
            security_event=event,
            severity=severity,
            **details,
            message=f"Security event: {event}"
        )


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
    log_file: Optional[str] = None
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON formatting (recommended for production)
        log_file: Optional file path for log output
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if json_format:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


# Global audit logger instance
audit_log = AuditLogger()
