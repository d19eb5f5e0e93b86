# enhancer.py - 掩码MVDR增强流水线
"""
本模块串联整个增强流程。

处理流程：
1. STFT 分析
2. 空间协方差估计（有掩码时分别估计目标/噪声）
3. 导向向量估计（目标协方差主特征向量）
4. MVDR 权重求解（噪声协方差）
5. 波束形成
6. 重叠相加重建
"""

import time
import numpy as np
from typing import Dict, Optional
from dataclasses import dataclass, field

from beamfront.common.config import FrontendConfig
from beamfront.common.exceptions import ShapeError
from beamfront.common.logger import get_logger
from beamfront.backend.transform import WindowedTransform
from beamfront.backend.beamforming import (
    CovarianceEstimator, SteeringVectorEstimator, MvdrWeightSolver, Beamformer
)


@dataclass
class EnhancementResult:
    """
    增强结果

    Attributes:
        stft: 多通道打包频谱 [(C*T) x N]
        target_covariance: 目标协方差 [(F*C) x C]
        noise_covariance: 噪声协方差 [(F*C) x C]
        steering_vector: 导向向量 [F x C]
        weights: MVDR权重 [F x C]
        enhanced_stft: 增强后打包频谱 [T x N]
        waveform: 增强波形 [1 x S]
        timings: 各阶段耗时 [秒]
    """
    stft: np.ndarray
    target_covariance: np.ndarray
    noise_covariance: np.ndarray
    steering_vector: np.ndarray
    weights: np.ndarray
    enhanced_stft: np.ndarray
    waveform: np.ndarray
    timings: Dict[str, float] = field(default_factory=dict)


class MvdrEnhancer:
    """
    掩码MVDR增强器

    每个实例独占一个 WindowedTransform；并行处理多条语音时每个工作者各建一个实例。
    """

    def __init__(self, config: Optional[FrontendConfig] = None):
        """
        初始化增强器

        Args:
            config: 前端配置
        """
        self._logger = get_logger()
        self._config = config or FrontendConfig()
        self._config.validate()

        self.transform = WindowedTransform(self._config.stft)
        self.covariance_estimator = CovarianceEstimator(self._config.beamformer)
        self.steering_estimator = SteeringVectorEstimator()
        self.weight_solver = MvdrWeightSolver(self._config.beamformer)
        self.beamformer = Beamformer()

        self._logger.info(
            f"增强器初始化: frame_length={self._config.stft.frame_length}, "
            f"frame_shift={self._config.stft.frame_shift}, "
            f"window={self._config.stft.window}, "
            f"diagonal_loading={self._config.beamformer.diagonal_loading}"
        )

    @property
    def config(self) -> FrontendConfig:
        return self._config

    def enhance(self, wave: np.ndarray, mask: Optional[np.ndarray] = None,
                range: Optional[float] = None) -> EnhancementResult:
        """
        增强一条多通道语音

        Args:
            wave: [num_channels x num_samples]
            mask: 目标掩码 [num_frames x num_bins]（可选）
            range: 输出量程，None 时使用配置中的 output_range

        Returns:
            EnhancementResult
        """
        wave = np.atleast_2d(wave)
        num_channels = wave.shape[0]
        timings = {}

        start = time.perf_counter()
        stft = self.transform.forward(wave)
        timings['stft'] = time.perf_counter() - start

        start = time.perf_counter()
        if mask is None:
            target_covar = self.covariance_estimator.estimate(stft, num_channels)
            noise_covar = target_covar
        else:
            num_frames = stft.shape[0] // num_channels
            if np.shape(mask) != (num_frames, self.transform.num_bins):
                raise ShapeError('掩码形状与频谱不匹配',
                                 expected=(num_frames, self.transform.num_bins),
                                 actual=np.shape(mask))
            target_covar, noise_covar = self.covariance_estimator.estimate_pair(
                stft, num_channels, mask
            )
        timings['covariance'] = time.perf_counter() - start

        start = time.perf_counter()
        steering = self.steering_estimator.estimate(target_covar)
        weights = self.weight_solver.solve(noise_covar, steering)
        timings['weights'] = time.perf_counter() - start

        start = time.perf_counter()
        enhanced = self.beamformer.run(stft, weights)
        waveform = self.transform.inverse(
            enhanced, self._config.output_range if range is None else range
        )
        timings['synthesis'] = time.perf_counter() - start

        self._logger.debug(
            "阶段耗时: " + ", ".join(f"{k}={v * 1e3:.2f}ms" for k, v in timings.items())
        )
        self._logger.info(
            f"增强完成: channels={num_channels}, frames={enhanced.shape[0]}, "
            f"samples={waveform.shape[1]}, loaded_bins={len(self.weight_solver.last_loaded_bins)}"
        )

        return EnhancementResult(
            stft=stft,
            target_covariance=target_covar,
            noise_covariance=noise_covar,
            steering_vector=steering,
            weights=weights,
            enhanced_stft=enhanced,
            waveform=waveform,
            timings=timings,
        )


__all__ = ['MvdrEnhancer', 'EnhancementResult']
