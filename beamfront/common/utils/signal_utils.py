# 信号工具函数模块 (Signal Utilities Module)

import numpy as np

from beamfront.common.exceptions import ConfigError


def next_power_of_2(n: int) -> int:
    """计算大于等于n的最小2的幂次"""
    return 1 << (int(n) - 1).bit_length()


def generate_window(window_type: str, n: int) -> np.ndarray:
    """
    生成分析窗

    a = 2*pi / (n - 1):
        hamming:     0.54 - 0.46 cos(a i)
        hanning:     0.50 - 0.50 cos(a i)
        blackman:    0.42 - 0.50 cos(a i) + 0.08 cos(2 a i)
        rectangular: 1
    """
    window_type = window_type.lower()

    if window_type == 'rectangular':
        return np.ones(n)
    elif window_type == 'hamming':
        return np.hamming(n)
    elif window_type == 'hanning':
        return np.hanning(n)
    elif window_type == 'blackman':
        return np.blackman(n)
    else:
        raise ConfigError(f'未知的窗函数类型: {window_type}')


def num_frames(num_samples: int, frame_length: int, frame_shift: int) -> int:
    """计算帧数（与Kaldi一致，向零截断）"""
    return int((num_samples - frame_length) / frame_shift) + 1


def num_samples(num_frames: int, frame_length: int, frame_shift: int) -> int:
    """计算重叠相加后的采样点数"""
    return int((num_frames - 1) * frame_shift + frame_length)


def peak_normalize(samples: np.ndarray, target: float) -> float:
    """
    原地缩放使峰值幅度等于target

    Returns:
        实际使用的缩放因子；全零信号返回0且不做修改
    """
    peak = np.max(np.abs(samples)) if samples.size else 0.0
    if peak <= 0:
        return 0.0
    scale = target / peak
    samples *= scale
    return scale


__all__ = [
    'next_power_of_2', 'generate_window',
    'num_frames', 'num_samples', 'peak_normalize',
]
