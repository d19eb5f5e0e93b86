# reshaper.py - 通道布局适配
"""
通道布局适配器

只做布局变换，不改变数值:
- channel_views:    按通道拆分堆叠矩阵（视图）
- to_frame_major:   [(C*T) x K] -> [T x (C*K)]
- to_channel_major: [T x (C*K)] -> [(C*T) x K]
- trim:             [T x (C*K)] -> [(F*T) x C]，并截断到前 F 个频点
- untrim:           trim 的逆操作
- to_observation:   打包频谱 [(C*T) x N] -> 复数观测 [C x T x F]
"""

import numpy as np
from typing import List

from beamfront.common.exceptions import ShapeError
from beamfront.backend.transform.real_fft import unpack_spectrum


class ChannelReshaper:
    """通道布局适配器"""

    def __init__(self, num_channels: int, num_bins: int):
        """
        Args:
            num_channels: 通道数
            num_bins: 目标频点数
        """
        if num_channels <= 0 or num_bins <= 0:
            raise ShapeError(
                f"通道数与频点数必须为正数: channels={num_channels}, bins={num_bins}"
            )
        self.num_channels = num_channels
        self.num_bins = num_bins

    def _check_rows(self, stacked: np.ndarray) -> int:
        if stacked.ndim != 2 or stacked.shape[0] % self.num_channels != 0:
            raise ShapeError(
                f"行数必须是通道数({self.num_channels})的整数倍", actual=stacked.shape
            )
        return stacked.shape[0] // self.num_channels

    def _check_cols(self, stacked: np.ndarray) -> int:
        if stacked.ndim != 2 or stacked.shape[1] % self.num_channels != 0:
            raise ShapeError(
                f"列数必须是通道数({self.num_channels})的整数倍", actual=stacked.shape
            )
        return stacked.shape[1] // self.num_channels

    def channel_views(self, stacked: np.ndarray) -> List[np.ndarray]:
        """按通道分块的堆叠矩阵 -> 每个通道一个 [T x K] 视图"""
        num_frames = self._check_rows(stacked)
        return [stacked[c * num_frames:(c + 1) * num_frames] for c in range(self.num_channels)]

    def to_frame_major(self, stacked: np.ndarray) -> np.ndarray:
        """[(C*T) x K] -> [T x (C*K)]"""
        num_frames = self._check_rows(stacked)
        width = stacked.shape[1]
        cube = stacked.reshape(self.num_channels, num_frames, width)
        return cube.transpose(1, 0, 2).reshape(num_frames, self.num_channels * width)

    def to_channel_major(self, stacked: np.ndarray) -> np.ndarray:
        """[T x (C*K)] -> [(C*T) x K]"""
        width = self._check_cols(stacked)
        num_frames = stacked.shape[0]
        cube = stacked.reshape(num_frames, self.num_channels, width)
        return cube.transpose(1, 0, 2).reshape(self.num_channels * num_frames, width)

    def trim(self, stft: np.ndarray) -> np.ndarray:
        """
        帧主序 -> 频点主序的通道向量

        Args:
            stft: [T x (C*K)]，K >= num_bins

        Returns:
            [(F*T) x C]，第 f*T + t 行为 (t, f) 处的通道向量
        """
        width = self._check_cols(stft)
        if width < self.num_bins:
            raise ShapeError(
                f"每通道列数({width})少于目标频点数({self.num_bins})", actual=stft.shape
            )
        num_frames = stft.shape[0]
        # T x C x F
        cube = stft.reshape(num_frames, self.num_channels, width)[:, :, :self.num_bins]
        # F x T x C
        return cube.transpose(2, 0, 1).reshape(self.num_bins * num_frames, self.num_channels)

    def untrim(self, stacked: np.ndarray, num_frames: int) -> np.ndarray:
        """[(F*T) x C] -> [T x (C*F)]"""
        if stacked.ndim != 2 or stacked.shape != (self.num_bins * num_frames, self.num_channels):
            raise ShapeError('频点主序矩阵形状不匹配',
                             expected=(self.num_bins * num_frames, self.num_channels),
                             actual=stacked.shape)
        cube = stacked.reshape(self.num_bins, num_frames, self.num_channels)
        return cube.transpose(1, 2, 0).reshape(num_frames, self.num_channels * self.num_bins)

    def to_observation(self, stft: np.ndarray) -> np.ndarray:
        """
        打包频谱 -> 复数观测，截断到前 num_bins 个频点

        Args:
            stft: [(C*T) x N] 通道主序打包频谱

        Returns:
            [C x T x F] 复数
        """
        num_frames = self._check_rows(stft)
        spectrum = unpack_spectrum(stft)
        if spectrum.shape[-1] < self.num_bins:
            raise ShapeError(
                f"频谱频点数({spectrum.shape[-1]})少于目标频点数({self.num_bins})",
                actual=stft.shape
            )
        cube = spectrum.reshape(self.num_channels, num_frames, spectrum.shape[-1])
        return cube[:, :, :self.num_bins]


__all__ = ['ChannelReshaper']
