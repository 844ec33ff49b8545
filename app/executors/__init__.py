"""Executor layer package for task execution boundaries."""

from .errors import ExecutorFailure, ExecutorTimeoutError, ExecutorUpstreamError
from .http_source import HttpSourceHandler, handler_build_proxy_url
from .interfaces import ExecutorPort, ModeHandlerPort
from .registry import FAILURE_CODE, SUCCESS_CODE, ModeDispatchExecutor

__all__ = [
    "ExecutorFailure",
    "ExecutorPort",
    "ExecutorTimeoutError",
    "ExecutorUpstreamError",
    "FAILURE_CODE",
    "HttpSourceHandler",
    "ModeDispatchExecutor",
    "ModeHandlerPort",
    "SUCCESS_CODE",
    "handler_build_proxy_url",
]
