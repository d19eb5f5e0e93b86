# common - 公共模块
"""
公共模块提供系统级别的通用功能，包括：
- 类型定义：窗函数类型
- 常数：整型量程、数值下限
- 信号工具：窗函数生成、FFT长度计算
- 数学工具：Hermitian对称化、对角加载
- 配置管理：系统配置加载和管理
- 日志系统：统一的日志记录接口
- 异常定义：系统自定义异常类
"""

from beamfront.common.types import (
    WindowType,
)

from beamfront.common.constants import (
    INT16_MAX,
    EPSILON,
    FLOAT_EPSILON,
)

__all__ = [
    # 类型
    "WindowType",

    # 常数
    "INT16_MAX",
    "EPSILON",
    "FLOAT_EPSILON",
]
