import logging

import pytest

from pystorecore import ErrorHandler, StoreOptions

from todo_example import todo_app_reducer


@pytest.fixture
def todo_app():
    return todo_app_reducer()


@pytest.fixture
def silent_options():
    """錯誤報告器既不記錄日誌也不通知任何處理函數的 Store 配置。"""
    return StoreOptions(error_handler=ErrorHandler(log_to_console=False))


@pytest.fixture
def reported_errors():
    """Store 配置，以及收集所有被報告錯誤的列表。"""
    errors = []
    handler = ErrorHandler(log_to_console=False)
    handler.register_handler(errors.append)
    return StoreOptions(error_handler=handler), errors


@pytest.fixture(autouse=True)
def _debug_logging(caplog):
    caplog.set_level(logging.DEBUG, logger="pystorecore")
