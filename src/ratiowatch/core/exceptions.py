"""
RatioWatch 自定义异常

提供层次化的异常类，用于区分数据获取失败的不同阶段。
"""

from typing import Optional


class RatioWatchError(Exception):
    """RatioWatch 基础异常类"""

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code
        super().__init__(self.message)


class FetchError(RatioWatchError):
    """数据获取失败 (一个周期内任一端点失败即放弃本次报告)"""

    def __init__(
        self,
        message: str,
        url: str = "",
        code: str = "FETCH_ERROR"
    ):
        super().__init__(message, code=code)
        self.url = url


class NetworkError(FetchError):
    """连接 / 传输失败 (含非 200 响应)"""

    def __init__(self, message: str, url: str = "", status: Optional[int] = None):
        super().__init__(message, url=url, code="NETWORK_ERROR")
        self.status = status


class DecodeError(FetchError):
    """响应体不是合法的 UTF-8 / JSON"""

    def __init__(self, message: str, url: str = ""):
        super().__init__(message, url=url, code="DECODE_ERROR")


class ParseError(FetchError):
    """JSON 合法但结构与期望的记录不匹配"""

    def __init__(self, message: str, url: str = "", field: str = ""):
        super().__init__(message, url=url, code="PARSE_ERROR")
        self.field = field


class NoDataError(FetchError):
    """端点返回空数组"""

    def __init__(self, message: str, url: str = ""):
        super().__init__(message, url=url, code="NO_DATA")


class ConfigError(RatioWatchError):
    """配置错误"""

    def __init__(self, message: str, field: str = ""):
        super().__init__(message, code="CONFIG_ERROR")
        self.field = field
