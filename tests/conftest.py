# pytest配置文件

import pytest
import numpy as np
import sys
sys.path.insert(0, '.')


@pytest.fixture
def rng():
    """固定种子的随机数生成器"""
    return np.random.default_rng(20180212)


@pytest.fixture
def stft_config():
    """示例STFT配置"""
    from beamfront.common.config import StftConfig
    return StftConfig(frame_shift=32, frame_length=64, window='hanning')


@pytest.fixture
def transform(stft_config):
    """STFT变换器实例"""
    from beamfront.backend.transform import WindowedTransform
    return WindowedTransform(stft_config)


@pytest.fixture
def multichannel_wave(rng):
    """三通道随机波形"""
    return rng.standard_normal((3, 640))
