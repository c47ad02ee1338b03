"""
Structlog 日志配置模块
"""
import logging
import json
from typing import Any, List, Optional

import structlog
from structlog.processors import TimeStamper, add_log_level, JSONRenderer
from structlog.dev import ConsoleRenderer
from structlog.contextvars import merge_contextvars
from structlog.stdlib import ProcessorFormatter

from core.config import settings


def _json_dumps(obj, default=None, **kwargs):
    # structlog 会传入 default/sort_keys 等参数
    return json.dumps(obj, ensure_ascii=False, default=default, **kwargs)


def get_renderer(debug: bool) -> Any:
    """DEBUG 下使用彩色控制台输出，其余环境输出 JSON。"""
    if debug:
        return ConsoleRenderer(colors=True)
    return JSONRenderer(serializer=_json_dumps)


def resolve_level(debug: bool, level: Optional[str] = None) -> int:
    """解析日志级别：显式 LOG_LEVEL 优先，其次根据 DEBUG。"""
    if level:
        value = logging.getLevelName(level.strip().upper())
        if isinstance(value, int):
            return value
    return logging.DEBUG if debug else logging.INFO


def configure_logging(debug: Optional[bool] = None, level: Optional[str] = None) -> None:
    """配置 structlog，并把标准库 logging（包括 tos SDK 日志）纳入同一处理链。"""
    debug = settings.DEBUG if debug is None else debug
    level = level or settings.LOG_LEVEL

    shared_pre_chain: List[Any] = [
        merge_contextvars,
        add_log_level,
        TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[
            *shared_pre_chain,
            ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = ProcessorFormatter(
        foreign_pre_chain=shared_pre_chain,
        processors=[
            ProcessorFormatter.remove_processors_meta,
            get_renderer(debug),
        ],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(resolve_level(debug, level))


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """获取 structlog logger 实例。"""
    return structlog.get_logger(name)


# 初始化配置
configure_logging()
