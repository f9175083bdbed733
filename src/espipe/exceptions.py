"""espipe 异常定义模块."""


class EspipeError(Exception):
    """espipe 基础异常类."""

    pass
