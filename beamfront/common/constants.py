# 常数模块 (Constants Module)
# 本模块定义前端处理中使用的数值常量

import numpy as np


class AudioConstants:
    """
    音频常数类 (Audio Constants Class)

    包含采样表示相关的常量
    """

    # 16位有符号整数最大值，用作默认输出量程
    INT16_MAX = float(np.iinfo(np.int16).max)

    # 默认帧参数 (采样点数)
    DEFAULT_FRAME_LENGTH = 1024
    DEFAULT_FRAME_SHIFT = 256


class NumericConstants:
    """
    数值常数类 (Numeric Constants Class)

    包含数值稳定性相关的下限值
    """

    # 通用除零保护下限
    EPSILON = np.finfo(np.float32).eps

    # 对数谱下限（机器精度）
    FLOAT_EPSILON = np.finfo(np.float64).eps

    # 最小正规数，仅用于精确为零的分母保护
    TINY = np.finfo(np.float64).tiny

    # 对角加载默认参数
    DIAGONAL_LOADING = 1e-3
    LOADING_FLOOR = 1e-10
    MAX_CONDITION = 1e8


# ==================== 便捷别名 ====================

INT16_MAX = AudioConstants.INT16_MAX
EPSILON = NumericConstants.EPSILON
FLOAT_EPSILON = NumericConstants.FLOAT_EPSILON
TINY = NumericConstants.TINY


__all__ = [
    'AudioConstants',
    'NumericConstants',
    'INT16_MAX',
    'EPSILON',
    'FLOAT_EPSILON',
    'TINY',
]
