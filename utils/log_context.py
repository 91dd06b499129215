import logging
import time
import uuid
from typing import Optional


class LogContext:
    """
    Context manager that logs the start, end and duration of an operation.

    Args:
        operation_name: Label used in the log messages
        logger: Logger to write to; defaults to this module's logger
        request_id: Correlation id; a short random one is generated if omitted
        **kwargs: Extra fields attached to every record through ``extra=``
    """
    def __init__(self, operation_name: str, logger: Optional[logging.Logger] = None, **kwargs):
        self.operation_name = operation_name
        self.logger = logger or logging.getLogger(__name__)
        self.request_id = kwargs.pop('request_id', None) or str(uuid.uuid4())[:8]
        self.extra = kwargs
        self.start_time = None
        self.duration = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.info(f"Starting {self.operation_name}", extra={"request_id": self.request_id, **self.extra})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self.start_time
        extra = {"request_id": self.request_id, "duration": self.duration, **self.extra}
        if exc_type:
            self.logger.error(
                f"Failed {self.operation_name} in {self.duration:.2f}s: {exc_val}",
                extra=extra,
                exc_info=(exc_type, exc_val, exc_tb)
            )
        else:
            self.logger.info(f"Completed {self.operation_name} in {self.duration:.2f}s", extra=extra)
        return False
