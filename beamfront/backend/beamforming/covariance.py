# covariance.py - 空间协方差估计
"""
掩码加权的空间协方差估计

对每个频点 f:
    R(f) = sum_t m(t,f) x(t,f) x(t,f)^H / sum_t m(t,f)
无掩码时 m(t,f) = 1。
"""

import numpy as np
from typing import Optional, Tuple

from beamfront.common.config import BeamformerConfig
from beamfront.common.exceptions import ShapeError
from beamfront.common.logger import get_logger
from beamfront.common.utils import hermitian_symmetrize, stack_blocks
from beamfront.backend.beamforming.reshaper import ChannelReshaper


class CovarianceEstimator:
    """
    空间协方差估计器

    输出格式: [(num_bins * num_channels) x num_channels]，第 f 块为频点 f 的协方差
    """

    def __init__(self, config: Optional[BeamformerConfig] = None):
        self._logger = get_logger()
        self._config = config or BeamformerConfig()

    @staticmethod
    def _observe(stft: np.ndarray, num_channels: int) -> np.ndarray:
        """打包频谱 [(C*T) x N] -> 复数观测 [C x T x F]"""
        return ChannelReshaper(num_channels, stft.shape[-1] // 2 + 1).to_observation(stft)

    def estimate_from_spectra(self, obs: np.ndarray,
                              mask: Optional[np.ndarray] = None) -> np.ndarray:
        """
        Args:
            obs: [C x T x F] 复数观测
            mask: [T x F] 实数掩码（可选）

        Returns:
            [F x C x C] 协方差
        """
        if obs.ndim != 3:
            raise ShapeError('观测必须为 [通道 x 帧 x 频点] 的三维数组', actual=obs.shape)
        _, num_frames, num_bins = obs.shape

        if mask is None:
            weight = np.ones((num_frames, num_bins))
            denominator = np.full(num_bins, float(num_frames))
        else:
            weight = np.asarray(mask, dtype=np.float64)
            if weight.shape != (num_frames, num_bins):
                raise ShapeError('掩码形状与频谱不匹配',
                                 expected=(num_frames, num_bins), actual=weight.shape)
            denominator = weight.sum(axis=0)
            floor = self._config.mask_floor
            empty_bins = np.abs(denominator) < floor
            if np.any(empty_bins):
                self._logger.debug(f"{int(empty_bins.sum())}个频点的掩码权重和过小，使用下限{floor}")
            denominator = np.where(empty_bins, floor, denominator)

        # F x C x C
        covar = np.einsum('tf,ctf,dtf->fcd', weight, obs, obs.conj())
        covar /= denominator[:, None, None]
        return hermitian_symmetrize(covar)

    def estimate(self, stft: np.ndarray, num_channels: int,
                 mask: Optional[np.ndarray] = None) -> np.ndarray:
        """
        由打包频谱估计空间协方差

        Args:
            stft: [(C*T) x N] 打包频谱
            num_channels: 通道数
            mask: [T x F] 掩码（可选）

        Returns:
            [(F*C) x C] 复数协方差
        """
        obs = self._observe(stft, num_channels)
        return stack_blocks(self.estimate_from_spectra(obs, mask))

    def estimate_pair(self, stft: np.ndarray, num_channels: int,
                      mask: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        同时估计目标与噪声协方差（噪声掩码为 1 - mask）

        Returns:
            (目标协方差, 噪声协方差)，均为 [(F*C) x C]
        """
        obs = self._observe(stft, num_channels)
        mask = np.asarray(mask, dtype=np.float64)
        target = self.estimate_from_spectra(obs, mask)
        noise = self.estimate_from_spectra(obs, 1.0 - mask)
        return stack_blocks(target), stack_blocks(noise)


__all__ = ['CovarianceEstimator']
