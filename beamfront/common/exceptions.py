# 异常定义模块 (Exception Definitions Module)
# 本模块定义语音增强前端中使用的所有自定义异常

from typing import Optional, Tuple


class FrontendError(Exception):
    """
    前端基础异常类 (Base Frontend Exception Class)

    所有前端自定义异常的基类
    """

    def __init__(self, message: str, error_code: Optional[int] = None):
        """
        初始化异常

        Args:
            message: 错误信息
            error_code: 错误码（可选）
        """
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.error_code is not None:
            return f'[Error {self.error_code}] {self.message}'
        return self.message


class ConfigError(FrontendError):
    """配置异常 (Configuration Error)"""
    pass


class TransformError(FrontendError):
    """时频变换异常 (Transform Error)"""
    pass


class WindowError(TransformError):
    """窗函数异常 (Window Error)"""
    pass


class BeamformingError(FrontendError):
    """波束形成异常 (Beamforming Error)"""
    pass


class ShapeError(FrontendError):
    """维度不匹配异常 (Shape Mismatch Error)"""

    def __init__(self, message: str, expected: Optional[Tuple] = None,
                 actual: Optional[Tuple] = None):
        """
        初始化维度异常

        Args:
            message: 错误信息
            expected: 期望的形状（可选）
            actual: 实际的形状（可选）
        """
        self.expected = expected
        self.actual = actual
        if expected is not None or actual is not None:
            message = f'{message} (expected {expected}, got {actual})'
        super().__init__(message)


# ==================== 导出所有异常 ====================

__all__ = [
    'FrontendError',
    'ConfigError',
    'TransformError',
    'WindowError',
    'BeamformingError',
    'ShapeError',
]
