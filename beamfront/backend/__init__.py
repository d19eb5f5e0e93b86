# backend - 后端模块
from beamfront.backend.transform import *
from beamfront.backend.beamforming import *
from beamfront.backend.core import *

__all__ = []
