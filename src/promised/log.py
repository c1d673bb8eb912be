"""日志辅助

工具包默认使用标准库 logging；调用方也可以注入任何带 debug 方法的对象。
"""

import logging
from typing import Any

logger = logging.getLogger("promised")


def trace(log: Any, message: str, *args: Any) -> None:
    """向注入的 logger 输出调试信息

    没有 debug 方法的 logger 等同于关闭跟踪，logger 自身抛出的异常被忽略。
    """
    debug = getattr(log, "debug", None)
    if debug is None:
        return
    try:
        debug(message, *args)
    except Exception:
        pass
