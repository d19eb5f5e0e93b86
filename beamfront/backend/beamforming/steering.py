# steering.py - 导向向量估计
"""
基于主特征向量的导向向量估计

点源模型下目标协方差近似秩一，其最大特征值对应的特征向量
即为该频点的相对传递函数方向。
"""

import numpy as np

from beamfront.common.constants import EPSILON
from beamfront.common.utils import split_blocks, unit_norm_rows


class SteeringVectorEstimator:
    """导向向量估计器"""

    def estimate(self, covariance: np.ndarray) -> np.ndarray:
        """
        Args:
            covariance: [(F*C) x C] Hermitian 协方差

        Returns:
            [F x C] 单位范数导向向量
        """
        blocks = split_blocks(covariance)
        # eigh 按升序返回特征值，列为单位范数特征向量
        _, eigenvecs = np.linalg.eigh(blocks)
        steering = unit_norm_rows(eigenvecs[:, :, -1])
        return self._align_phase(steering)

    @staticmethod
    def _align_phase(steering: np.ndarray) -> np.ndarray:
        # 以第一个非零分量为参考，使其为非负实数
        magnitude = np.abs(steering)
        ref = np.argmax(magnitude > EPSILON, axis=-1)
        ref_value = steering[np.arange(steering.shape[0]), ref]
        ref_abs = np.abs(ref_value)
        phase = np.where(ref_abs > 0, np.conj(ref_value) / np.maximum(ref_abs, EPSILON), 1.0)
        return steering * phase[:, None]


__all__ = ['SteeringVectorEstimator']
