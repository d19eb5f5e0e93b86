# 类型定义模块
from enum import Enum


class WindowType(Enum):
    HAMMING = 'hamming'
    HANNING = 'hanning'
    BLACKMAN = 'blackman'
    RECTANGULAR = 'rectangular'

    @classmethod
    def names(cls) -> list:
        return [member.value for member in cls]


__all__ = ['WindowType']
