"""Shared helpers."""

from .tracing import TraceContext, get_current_trace_ids

__all__ = ["TraceContext", "get_current_trace_ids"]
