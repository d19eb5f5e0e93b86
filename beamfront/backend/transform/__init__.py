# transform - 时频变换模块
from beamfront.backend.transform.real_fft import (
    RealFFT,
    pack_spectrum,
    unpack_spectrum,
)
from beamfront.backend.transform.windowed_transform import WindowedTransform

__all__ = [
    "RealFFT",
    "pack_spectrum",
    "unpack_spectrum",
    "WindowedTransform",
]
