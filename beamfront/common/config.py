# 配置管理模块

from pathlib import Path
from typing import Dict, Optional
from dataclasses import dataclass, field

import toml

from beamfront.common.constants import AudioConstants, NumericConstants
from beamfront.common.exceptions import ConfigError
from beamfront.common.types import WindowType
from beamfront.common.utils.signal_utils import next_power_of_2


@dataclass
class StftConfig:
    """短时傅里叶变换配置"""
    frame_shift: int = AudioConstants.DEFAULT_FRAME_SHIFT
    frame_length: int = AudioConstants.DEFAULT_FRAME_LENGTH
    window: str = 'hamming'
    # 将采样点缩放到 [-1, 1]，与 MATLAB/librosa 一致
    normalize_input: bool = False
    # 令每个通道的无穷范数等于 int16 最大值
    enable_scale: bool = False
    # 使用功率谱而非幅度谱
    apply_pow: bool = False
    apply_log: bool = False

    def padding_length(self) -> int:
        return next_power_of_2(self.frame_length)

    def validate(self) -> None:
        if self.frame_length <= 0:
            raise ConfigError(f'frame_length必须为正数, 得到: {self.frame_length}')
        if self.frame_shift <= 0:
            raise ConfigError(f'frame_shift必须为正数, 得到: {self.frame_shift}')
        if self.window not in WindowType.names():
            raise ConfigError(
                f'未知的窗函数类型: {self.window} (可选: {", ".join(WindowType.names())})'
            )


@dataclass
class BeamformerConfig:
    """波束形成配置"""
    diagonal_loading: float = NumericConstants.DIAGONAL_LOADING
    loading_floor: float = NumericConstants.LOADING_FLOOR
    max_condition: float = NumericConstants.MAX_CONDITION
    mask_floor: float = 1e-6

    def validate(self) -> None:
        if self.diagonal_loading <= 0:
            raise ConfigError(f'diagonal_loading必须为正数, 得到: {self.diagonal_loading}')
        if self.loading_floor <= 0:
            raise ConfigError(f'loading_floor必须为正数, 得到: {self.loading_floor}')
        if self.max_condition <= 1.0:
            raise ConfigError(f'max_condition必须大于1, 得到: {self.max_condition}')
        if self.mask_floor <= 0:
            raise ConfigError(f'mask_floor必须为正数, 得到: {self.mask_floor}')


@dataclass
class SystemConfig:
    """系统配置"""
    version: str = '1.0'
    enable_logging: bool = True
    log_level: str = 'INFO'
    log_path: str = './logs'


@dataclass
class FrontendConfig:
    """前端总配置"""
    stft: StftConfig = field(default_factory=StftConfig)
    beamformer: BeamformerConfig = field(default_factory=BeamformerConfig)
    system: SystemConfig = field(default_factory=SystemConfig)
    # 输出波形峰值量程: 0 表示 int16 最大值, 负数表示不做缩放
    output_range: float = 0.0

    def validate(self) -> None:
        self.stft.validate()
        self.beamformer.validate()


class ConfigManager:
    """配置管理器"""

    def __init__(self, config_dir: str = './configs'):
        self.config_dir = Path(config_dir)
        self._config: Optional[FrontendConfig] = None

    def load_config(self, filename: str = 'frontend_config.toml') -> FrontendConfig:
        config_path = self.config_dir / filename

        if not config_path.exists():
            self._config = FrontendConfig()
            return self._config

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = toml.load(f)
        except toml.TomlDecodeError as e:
            raise ConfigError(f'配置文件解析失败: {config_path}: {e}') from e

        self._config = self._parse_config(data)
        self._config.validate()
        return self._config

    def _parse_config(self, data: Dict) -> FrontendConfig:
        def get_section(section: str, default: Dict = None) -> Dict:
            return data.get(section, default or {})

        defaults = StftConfig()
        stft = get_section('stft', {})
        stft_config = StftConfig(
            frame_shift=int(stft.get('frame_shift', defaults.frame_shift)),
            frame_length=int(stft.get('frame_length', defaults.frame_length)),
            window=stft.get('window', defaults.window),
            normalize_input=stft.get('normalize_input', False),
            enable_scale=stft.get('enable_scale', False),
            apply_pow=stft.get('apply_pow', False),
            apply_log=stft.get('apply_log', False),
        )

        beam = get_section('beamformer', {})
        beam_config = BeamformerConfig(
            diagonal_loading=beam.get('diagonal_loading', NumericConstants.DIAGONAL_LOADING),
            loading_floor=beam.get('loading_floor', NumericConstants.LOADING_FLOOR),
            max_condition=beam.get('max_condition', NumericConstants.MAX_CONDITION),
            mask_floor=beam.get('mask_floor', 1e-6),
        )

        system = get_section('system', {})
        system_config = SystemConfig(
            version=system.get('version', '1.0'),
            enable_logging=system.get('enable_logging', True),
            log_level=system.get('log_level', 'INFO'),
            log_path=system.get('log_path', './logs'),
        )

        return FrontendConfig(
            stft=stft_config,
            beamformer=beam_config,
            system=system_config,
            output_range=float(get_section('output', {}).get('range', 0.0)),
        )

    def get_config(self) -> FrontendConfig:
        if self._config is None:
            self.load_config()
        return self._config


_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_dir: str = './configs') -> ConfigManager:
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager(config_dir)
    return _config_manager


__all__ = [
    'StftConfig', 'BeamformerConfig', 'SystemConfig', 'FrontendConfig',
    'ConfigManager', 'get_config_manager',
]
