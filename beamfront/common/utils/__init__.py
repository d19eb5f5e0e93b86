# utils - 工具函数模块
"""
工具函数模块提供各种实用的数学和信号处理工具函数。

包括：
- math_utils: 复数矩阵工具
- signal_utils: 信号处理工具
"""

from beamfront.common.utils.math_utils import (
    # Hermitian矩阵
    hermitian_symmetrize,
    is_hermitian,

    # 块矩阵
    split_blocks,
    stack_blocks,

    # 数值稳定
    diagonal_load,
    unit_norm_rows,
)

from beamfront.common.utils.signal_utils import (
    # 窗函数
    generate_window,

    # 帧参数
    next_power_of_2,
    num_frames,
    num_samples,

    # 幅度
    peak_normalize,
)

__all__ = [
    # math_utils
    "hermitian_symmetrize",
    "is_hermitian",
    "split_blocks",
    "stack_blocks",
    "diagonal_load",
    "unit_norm_rows",

    # signal_utils
    "generate_window",
    "next_power_of_2",
    "num_frames",
    "num_samples",
    "peak_normalize",
]
