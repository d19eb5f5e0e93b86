# beamformer.py - 频域加权合成
"""
频域波束形成

    y(t,f) = sum_c conj(w(f,c)) x(t,f,c)
"""

import numpy as np

from beamfront.common.exceptions import ShapeError
from beamfront.backend.transform.real_fft import pack_spectrum
from beamfront.backend.beamforming.reshaper import ChannelReshaper


class Beamformer:
    """频域波束形成器"""

    def beamform(self, obs: np.ndarray, weights: np.ndarray) -> np.ndarray:
        """
        Args:
            obs: [C x T x F] 复数观测
            weights: [F x C] 复数权重

        Returns:
            [T x F] 单通道增强频谱
        """
        if obs.ndim != 3 or weights.shape != (obs.shape[2], obs.shape[0]):
            raise ShapeError('权重与观测不匹配',
                             expected=(obs.shape[-1], obs.shape[0]), actual=weights.shape)
        return np.einsum('fc,ctf->tf', weights.conj(), obs)

    def run(self, stft: np.ndarray, weights: np.ndarray) -> np.ndarray:
        """
        对打包频谱做波束形成

        Args:
            stft: [(C*T) x N] 打包频谱
            weights: [F x C] 复数权重，C 由权重列数决定

        Returns:
            [T x N] 打包的增强频谱；第0和Nyquist频点只保留实部
        """
        obs = ChannelReshaper(weights.shape[1], stft.shape[-1] // 2 + 1).to_observation(stft)
        return pack_spectrum(self.beamform(obs, weights))


__all__ = ['Beamformer']
