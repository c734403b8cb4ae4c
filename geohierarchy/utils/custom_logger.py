import inspect
import logging
from opentelemetry import trace


class CustomLogger:
    """python logger that adds the calling function and the active trace to every record"""

    def __init__(self, name, level=logging.INFO):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

    def get_trace_context(self):
        """Get current trace and span context for log correlation"""
        current_span = trace.get_current_span()
        if current_span and current_span.is_recording():
            span_context = current_span.get_span_context()
            return {
                "trace_id": f"{span_context.trace_id:032x}",
                "span_id": f"{span_context.span_id:016x}",
            }
        return {"trace_id": "-", "span_id": "-"}

    def _extra(self):
        # two frames up: the caller of info / error / ...
        caller_name = inspect.stack()[2].function
        return {"caller_name": caller_name, **self.get_trace_context()}

    def info(self, *args):
        """call logger.info with the caller_name and the trace context"""
        self.logger.info(*args, extra=self._extra())

    def error(self, *args):
        """call logger.error with the caller_name and the trace context"""
        self.logger.error(*args, extra=self._extra())

    def debug(self, *args):
        """call logger.debug with the caller_name and the trace context"""
        self.logger.debug(*args, extra=self._extra())

    def exception(self, *args):
        """call logger.exception with the caller_name and the trace context"""
        self.logger.exception(*args, extra=self._extra())

    def warning(self, *args):
        """call logger.warning with the caller_name and the trace context"""
        self.logger.warning(*args, extra=self._extra())
