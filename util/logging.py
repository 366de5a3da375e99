"""
Structured operation logging shared by the API server, the client and the TUI.
Every line reads "Operation: <op>, Status: <status>, Details: {...}".
"""

import logging
from typing import Any, Dict, List

# Payload keys that may carry free-form classroom text
TEXT_FIELDS = ['text', 'body', 'payload', '_viewText']


class StructuredLogger:
    """Structured logger for stream, subscription and translation operations."""

    def __init__(self, name: str = "baybridge"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        if status in ("failed", "error", "rejected"):
            self.logger.warning(message)
        else:
            self.logger.info(message)

    def log_stream_append(self, stream: str, record_type: str, mode: str, status: str = "success", details: Dict[str, Any] = None):
        """Log a record append (stub acknowledgment, upstream write or stub ingest)."""
        log_details = {"stream": stream, "type": record_type, "mode": mode}
        if details:
            log_details.update(details)

        self.log_operation("stream.append", status, log_details)

    def log_stream_subscription(self, stream: str, event: str, mode: str, details: Dict[str, Any] = None, status: str = "success"):
        """Log subscription lifecycle events (opened, batch, closed)."""
        log_details = {"stream": stream, "mode": mode}
        if details:
            log_details.update(details)

        self.log_operation(f"stream.subscription.{event}", status, log_details)

    def log_translation(self, target_locale: str, status: str, text: str = None, reason: str = None):
        """Log a translation request outcome."""
        log_details = {"target_locale": target_locale}
        if text is not None:
            log_details["text"] = text[:50] + "..." if len(text) > 50 else text
        if reason:
            log_details["reason"] = reason

        self.log_operation("translate", status, log_details)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()


def sanitize_payload(payload: Any, max_text: int = 100, text_fields: List[str] = None) -> Any:
    """Truncate long free-form text so notes never flood the server log."""
    if text_fields is None:
        text_fields = TEXT_FIELDS

    if isinstance(payload, dict):
        sanitized = {}
        for k, v in payload.items():
            if k in text_fields and isinstance(v, str) and len(v) > max_text:
                sanitized[k] = v[:max_text] + "..."
            else:
                sanitized[k] = sanitize_payload(v, max_text, text_fields)
        return sanitized
    elif isinstance(payload, str):
        return payload[:max_text] + "..." if len(payload) > max_text else payload
    elif isinstance(payload, list):
        return [sanitize_payload(item, max_text, text_fields) for item in payload]
    else:
        return payload
