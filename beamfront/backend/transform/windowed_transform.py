# windowed_transform.py - 加窗短时傅里叶变换
"""
本模块实现多通道加窗短时傅里叶分析与重叠相加综合。

处理流程：
1. 分帧（帧移 frame_shift, 帧长 frame_length）
2. 加窗（分析窗缓存于实例）
3. 补零至 2 的幂次并做实数FFT，结果按紧凑格式打包
4. 逆变换时逐帧 IFFT、加窗、重叠相加，最后按量程缩放

注意: 综合窗直接使用分析窗，未做正交化处理，
重建幅度依靠最终的量程缩放来控制。
"""

import numpy as np
from typing import Optional, Tuple

from beamfront.common.config import StftConfig
from beamfront.common.constants import INT16_MAX, FLOAT_EPSILON
from beamfront.common.exceptions import ShapeError, WindowError
from beamfront.common.logger import get_logger
from beamfront.common.utils import (
    generate_window, num_frames, num_samples, peak_normalize
)
from beamfront.backend.transform.real_fft import RealFFT


class WindowedTransform:
    """
    加窗短时傅里叶变换器

    输入波形: [num_channels x num_samples]
    输出频谱: [(num_channels * num_frames) x padding_length]，按通道分块
    """

    def __init__(self, config: Optional[StftConfig] = None,
                 window: Optional[np.ndarray] = None):
        """
        初始化变换器

        Args:
            config: 变换配置
            window: 自定义分析窗（可选，默认按配置生成）
        """
        self._logger = get_logger()
        self._config = None
        self._window = None
        self._fft = None
        self.reconfigure(config or StftConfig(), window=window)

    def reconfigure(self, config: StftConfig,
                    window: Optional[np.ndarray] = None) -> None:
        """更新配置，重新缓存分析窗并重建FFT上下文"""
        config.validate()
        self._config = config
        self._cache_window(window)
        self._fft = RealFFT(config.padding_length())

        self._logger.debug(
            f"STFT配置: frame_length={config.frame_length}, "
            f"frame_shift={config.frame_shift}, window={config.window}, "
            f"padding={config.padding_length()}"
        )

    def _cache_window(self, window: Optional[np.ndarray]) -> None:
        if window is None:
            window = generate_window(self._config.window, self._config.frame_length)
        window = np.array(window, dtype=np.float64)
        window.setflags(write=False)
        self._window = window

    # ==================== 属性 ====================

    @property
    def config(self) -> StftConfig:
        return self._config

    @property
    def window(self) -> np.ndarray:
        return self._window

    @property
    def padding_length(self) -> int:
        return self._fft.size

    @property
    def num_bins(self) -> int:
        return self._fft.num_bins

    def num_frames(self, num_samples_: int) -> int:
        return num_frames(num_samples_, self._config.frame_length, self._config.frame_shift)

    def num_samples(self, num_frames_: int) -> int:
        return num_samples(num_frames_, self._config.frame_length, self._config.frame_shift)

    def _check_window(self) -> None:
        if self._window.shape[0] != self._config.frame_length:
            raise WindowError(
                f"分析窗长度({self._window.shape[0]})与帧长"
                f"({self._config.frame_length})不一致"
            )

    # ==================== 分析 ====================

    def forward(self, wave: np.ndarray) -> np.ndarray:
        """
        多通道短时傅里叶变换

        Args:
            wave: [num_channels x num_samples]，一维输入视为单通道

        Returns:
            打包频谱 [(num_channels * num_frames) x padding_length]
        """
        self._check_window()

        # 拷贝一份，缩放不影响调用方的数据
        samples = np.array(np.atleast_2d(wave), dtype=np.float64)
        if samples.ndim != 2:
            raise ShapeError('波形必须为 [通道 x 采样点] 的二维矩阵', actual=samples.shape)

        num_channels, total_samples = samples.shape
        frame_length = self._config.frame_length
        frame_shift = self._config.frame_shift
        frames_count = self.num_frames(total_samples)
        if frames_count < 1:
            raise ShapeError(
                f"采样点数({total_samples})不足以构成一帧(frame_length={frame_length})"
            )

        if self._config.normalize_input:
            samples /= INT16_MAX

        if self._config.enable_scale:
            for c in range(num_channels):
                if peak_normalize(samples[c], INT16_MAX) == 0.0:
                    self._logger.warning(f"通道{c}能量为零，跳过幅度缩放")

        frames = np.zeros((num_channels, frames_count, self.padding_length))
        for t in range(frames_count):
            beg = t * frame_shift
            end = min(beg + frame_length, total_samples)
            frames[:, t, :end - beg] = samples[:, beg:end]
        frames[:, :, :frame_length] *= self._window

        stft = self._fft.forward(frames)

        self._logger.debug(
            f"STFT完成: channels={num_channels}, frames={frames_count}, "
            f"bins={self.num_bins}"
        )
        return stft.reshape(num_channels * frames_count, self.padding_length)

    def compute_spectrogram(self, stft: np.ndarray) -> np.ndarray:
        """
        计算幅度谱（或功率谱、对数谱）

        Args:
            stft: 打包频谱 [num_rows x window_size]

        Returns:
            [num_rows x (window_size/2 + 1)]
        """
        num_bins = (stft.shape[1] >> 1) + 1

        spectra = np.empty((stft.shape[0], num_bins))
        spectra[:, 0] = stft[:, 0] ** 2
        spectra[:, num_bins - 1] = stft[:, 1] ** 2
        spectra[:, 1:num_bins - 1] = stft[:, 2::2] ** 2 + stft[:, 3::2] ** 2

        if not self._config.apply_pow:
            spectra = np.sqrt(spectra)
        if self._config.apply_log:
            # 避免 log(0)
            spectra = np.log(np.maximum(spectra, FLOAT_EPSILON))
        return spectra

    def compute_phase_angle(self, stft: np.ndarray) -> np.ndarray:
        """
        计算相位谱

        Args:
            stft: 打包频谱 [num_rows x window_size]

        Returns:
            [num_rows x (window_size/2 + 1)]，单位弧度
        """
        num_bins = (stft.shape[1] >> 1) + 1

        angle = np.empty((stft.shape[0], num_bins))
        angle[:, 0] = np.arctan2(0.0, stft[:, 0])
        angle[:, num_bins - 1] = np.arctan2(0.0, stft[:, 1])
        angle[:, 1:num_bins - 1] = np.arctan2(stft[:, 3::2], stft[:, 2::2])
        return angle

    def polar(self, spectra: np.ndarray, angle: np.ndarray) -> np.ndarray:
        """
        由幅度谱和相位谱恢复打包频谱

        Args:
            spectra: 幅度谱 [num_rows x num_bins]（按配置可为功率谱/对数谱）
            angle: 相位谱 [num_rows x num_bins]

        Returns:
            打包频谱 [num_rows x 2*(num_bins-1)]
        """
        if spectra.shape != angle.shape:
            raise ShapeError('幅度谱与相位谱形状不一致',
                             expected=spectra.shape, actual=angle.shape)

        num_rows, num_bins = spectra.shape
        magnitude = np.array(spectra, dtype=np.float64)
        if self._config.apply_log:
            magnitude = np.exp(magnitude)
        if self._config.apply_pow:
            magnitude = np.sqrt(magnitude)

        stft = np.empty((num_rows, (num_bins - 1) * 2))
        stft[:, 0] = magnitude[:, 0]
        stft[:, 1] = -magnitude[:, num_bins - 1]
        theta = angle[:, 1:num_bins - 1]
        stft[:, 2::2] = np.cos(theta) * magnitude[:, 1:num_bins - 1]
        stft[:, 3::2] = np.sin(theta) * magnitude[:, 1:num_bins - 1]
        return stft

    def compute(self, wave: np.ndarray, spectra: bool = True,
                angle: bool = True) -> Tuple[np.ndarray, Optional[np.ndarray], Optional[np.ndarray]]:
        """
        一次计算打包频谱及其派生的幅度谱、相位谱

        Returns:
            (stft, spectra或None, angle或None)
        """
        stft = self.forward(wave)
        spectrogram = self.compute_spectrogram(stft) if spectra else None
        phase = self.compute_phase_angle(stft) if angle else None
        return stft, spectrogram, phase

    # ==================== 综合 ====================

    def inverse(self, stft: np.ndarray, range: float = 0) -> np.ndarray:
        """
        重叠相加重建波形

        Args:
            stft: 打包频谱 [num_frames x padding_length]
            range: 输出峰值量程；0 使用 int16 最大值，负数不缩放

        Returns:
            波形 [1 x num_samples]
        """
        self._check_window()
        if stft.ndim != 2 or stft.shape[1] != self.padding_length:
            raise ShapeError('逆变换输入宽度与FFT长度不一致',
                             expected=self.padding_length, actual=stft.shape)

        frame_length = self._config.frame_length
        frame_shift = self._config.frame_shift
        frames_count = stft.shape[0]

        wave = np.zeros((1, self.num_samples(frames_count)))
        samples = wave[0]

        segments = self._fft.inverse(stft) / frame_length
        segments = segments[:, :frame_length] * self._window
        # 形参 range 遮蔽了内置 range，这里用 enumerate 遍历帧
        for t, segment in enumerate(segments):
            samples[t * frame_shift:t * frame_shift + frame_length] += segment

        # 默认缩放到 int16 量程，避免写盘时截断
        if range == 0:
            range = INT16_MAX
        if range >= 0:
            scale = peak_normalize(samples, range)
            if scale == 0.0:
                self._logger.warning("重建波形能量为零，跳过量程缩放")
            else:
                self._logger.debug(f"Rescale samples({range}/{range / scale:.4f})")
        return wave


__all__ = ['WindowedTransform']
