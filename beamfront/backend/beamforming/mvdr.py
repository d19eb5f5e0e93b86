# mvdr.py - MVDR权重求解
"""
MVDR (Minimum Variance Distortionless Response) 权重求解

    w(f) = R(f)^(-1) v(f) / (v(f)^H R(f)^(-1) v(f))

在保持目标方向单位增益的约束下最小化输出噪声功率。
协方差病态或奇异时先做对角加载再求解，不抛出异常。
"""

import numpy as np
from typing import Optional

from beamfront.common.config import BeamformerConfig
from beamfront.common.constants import TINY
from beamfront.common.exceptions import BeamformingError, ShapeError
from beamfront.common.logger import get_logger
from beamfront.common.utils import diagonal_load, split_blocks


class MvdrWeightSolver:
    """
    MVDR 权重求解器

    Attributes:
        last_loaded_bins: 上一次求解中做了对角加载的频点索引
    """

    def __init__(self, config: Optional[BeamformerConfig] = None):
        """
        Args:
            config: 波束形成配置（对角加载因子、条件数阈值等）
        """
        self._logger = get_logger()
        self._config = config or BeamformerConfig()
        self.last_loaded_bins = np.zeros(0, dtype=int)

    def _needs_loading(self, covar: np.ndarray) -> bool:
        cond = np.linalg.cond(covar)
        return not np.isfinite(cond) or cond > self._config.max_condition

    def _solve_bin(self, covar: np.ndarray, steering: np.ndarray) -> np.ndarray:
        # R^(-1) v
        try:
            numerator = np.linalg.solve(covar, steering)
        except np.linalg.LinAlgError:
            numerator = np.linalg.pinv(covar) @ steering
        # v^H R^(-1) v 随 1/||R|| 缩放，只保护精确为零的情形
        denominator = np.vdot(steering, numerator)
        if np.abs(denominator) < TINY:
            return np.zeros_like(numerator)
        return numerator / denominator

    def solve(self, covariance: np.ndarray, steering: np.ndarray) -> np.ndarray:
        """
        计算MVDR权重

        Args:
            covariance: [(F*C) x C] 噪声（干扰）协方差
            steering: [F x C] 目标导向向量

        Returns:
            [F x C] 复数权重
        """
        blocks = split_blocks(covariance)
        num_bins, num_channels, _ = blocks.shape
        if steering.shape != (num_bins, num_channels):
            raise ShapeError('导向向量与协方差形状不匹配',
                             expected=(num_bins, num_channels), actual=steering.shape)
        if not (np.all(np.isfinite(blocks)) and np.all(np.isfinite(steering))):
            raise BeamformingError("协方差或导向向量包含非有限值")

        weights = np.zeros((num_bins, num_channels), dtype=np.complex128)
        loaded = []
        for f in range(num_bins):
            covar = blocks[f]
            if self._needs_loading(covar):
                covar = diagonal_load(covar, self._config.diagonal_loading,
                                      self._config.loading_floor)
                loaded.append(f)
            weights[f] = self._solve_bin(covar, steering[f])

        self.last_loaded_bins = np.array(loaded, dtype=int)
        if loaded:
            self._logger.debug(f"{len(loaded)}/{num_bins}个频点协方差病态，已做对角加载")
        return weights


__all__ = ['MvdrWeightSolver']
