# real_fft.py - 实数FFT执行上下文
"""
实数FFT执行上下文

每个 WindowedTransform 实例独占一个 RealFFT，负责正/逆变换以及
紧凑打包格式与复数半谱之间的转换。

打包格式 (N 为FFT长度, F = N/2 + 1):
    [r0, r(N/2), r1, i1, r2, i2, ..., r(N/2-1), i(N/2-1)]
第0个频点与Nyquist频点的虚部恒为零，因此只保存实部。
"""

import numpy as np
from scipy import fft as sp_fft

from beamfront.common.exceptions import ConfigError, ShapeError


def pack_spectrum(spectrum: np.ndarray) -> np.ndarray:
    """
    复数半谱 -> 紧凑实数格式

    Args:
        spectrum: [..., F] 复数

    Returns:
        [..., 2*(F-1)] 实数
    """
    num_bins = spectrum.shape[-1]
    packed = np.zeros(spectrum.shape[:-1] + (2 * (num_bins - 1),), dtype=np.float64)
    packed[..., 0] = spectrum[..., 0].real
    packed[..., 1] = spectrum[..., num_bins - 1].real
    packed[..., 2::2] = spectrum[..., 1:num_bins - 1].real
    packed[..., 3::2] = spectrum[..., 1:num_bins - 1].imag
    return packed


def unpack_spectrum(packed: np.ndarray) -> np.ndarray:
    """
    紧凑实数格式 -> 复数半谱

    Args:
        packed: [..., N] 实数, N为偶数

    Returns:
        [..., N/2 + 1] 复数
    """
    size = packed.shape[-1]
    if size < 2 or size % 2 != 0:
        raise ShapeError('打包频谱的长度必须为不小于2的偶数', actual=packed.shape)
    num_bins = size // 2 + 1
    spectrum = np.zeros(packed.shape[:-1] + (num_bins,), dtype=np.complex128)
    spectrum[..., 0] = packed[..., 0]
    spectrum[..., num_bins - 1] = packed[..., 1]
    spectrum[..., 1:num_bins - 1] = packed[..., 2::2] + 1j * packed[..., 3::2]
    return spectrum


class RealFFT:
    """
    实数FFT执行上下文

    固定长度，创建后只读；非线程共享。
    """

    def __init__(self, size: int):
        """
        Args:
            size: FFT长度（2的幂次，至少为2）
        """
        if size < 2 or size & (size - 1):
            raise ConfigError(f'FFT长度必须为不小于2的2的幂次, 得到: {size}')
        self.size = size
        self.num_bins = size // 2 + 1

    def forward(self, frames: np.ndarray) -> np.ndarray:
        """
        正变换

        Args:
            frames: [..., size] 实数帧

        Returns:
            [..., size] 打包频谱
        """
        if frames.shape[-1] != self.size:
            raise ShapeError('FFT输入长度不匹配', expected=self.size, actual=frames.shape[-1])
        return pack_spectrum(sp_fft.rfft(frames, n=self.size, axis=-1))

    def inverse(self, packed: np.ndarray) -> np.ndarray:
        """
        逆变换（不归一化，结果为 size * irfft）

        Args:
            packed: [..., size] 打包频谱

        Returns:
            [..., size] 实数帧
        """
        if packed.shape[-1] != self.size:
            raise ShapeError('IFFT输入长度不匹配', expected=self.size, actual=packed.shape[-1])
        return sp_fft.irfft(unpack_spectrum(packed), n=self.size, axis=-1) * self.size


__all__ = ['RealFFT', 'pack_spectrum', 'unpack_spectrum']
