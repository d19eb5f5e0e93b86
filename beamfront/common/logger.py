# 日志系统模块

import sys
from pathlib import Path
from typing import Optional
from loguru import logger as loguru_logger


class FrontendLogger:
    """前端日志管理器"""

    def __init__(
        self,
        log_path: str = './logs',
        log_level: str = 'INFO',
        enable_console: bool = True,
        enable_file: bool = True,
        rotation: str = '100 MB',
        retention: str = '30 days'
    ):
        """初始化日志系统"""
        self.log_path = Path(log_path)
        self.log_level = log_level

        # 移除默认处理器
        loguru_logger.remove()

        # 添加控制台处理器
        if enable_console:
            loguru_logger.add(
                sys.stderr,
                format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
                level=log_level,
                colorize=True
            )

        # 添加文件处理器
        if enable_file:
            self.log_path.mkdir(parents=True, exist_ok=True)

            # 所有日志
            loguru_logger.add(
                self.log_path / 'beamfront_{time:YYYY-MM-DD}.log',
                format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}",
                level=log_level,
                rotation=rotation,
                retention=retention,
                encoding='utf-8'
            )

            # 错误日志
            loguru_logger.add(
                self.log_path / 'beamfront_error_{time:YYYY-MM-DD}.log',
                format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}",
                level='ERROR',
                rotation=rotation,
                retention=retention,
                encoding='utf-8'
            )

        self._logger = loguru_logger

    def get_logger(self):
        """获取logger实例"""
        return self._logger

    def debug(self, message: str, *args, **kwargs) -> None:
        """调试日志"""
        self._logger.opt(depth=1).debug(message, *args, **kwargs)

    def info(self, message: str, *args, **kwargs) -> None:
        """信息日志"""
        self._logger.opt(depth=1).info(message, *args, **kwargs)

    def warning(self, message: str, *args, **kwargs) -> None:
        """警告日志"""
        self._logger.opt(depth=1).warning(message, *args, **kwargs)

    def error(self, message: str, *args, **kwargs) -> None:
        """错误日志"""
        self._logger.opt(depth=1).error(message, *args, **kwargs)


# 全局日志实例
_frontend_logger: Optional[FrontendLogger] = None


def get_logger(
    log_path: str = './logs',
    log_level: str = 'INFO',
    enable_console: bool = True,
    enable_file: bool = False
) -> FrontendLogger:
    """获取全局日志实例"""
    global _frontend_logger
    if _frontend_logger is None:
        _frontend_logger = FrontendLogger(
            log_path=log_path,
            log_level=log_level,
            enable_console=enable_console,
            enable_file=enable_file
        )
    return _frontend_logger


def init_logger(
    log_path: str = './logs',
    log_level: str = 'INFO',
    enable_console: bool = True,
    enable_file: bool = True
) -> FrontendLogger:
    """初始化全局日志系统"""
    global _frontend_logger
    _frontend_logger = FrontendLogger(
        log_path=log_path,
        log_level=log_level,
        enable_console=enable_console,
        enable_file=enable_file
    )
    return _frontend_logger


def configure_logging(system) -> FrontendLogger:
    """
    按系统配置初始化日志

    Args:
        system: SystemConfig；enable_logging 为 False 时只输出到控制台
    """
    return init_logger(
        log_path=system.log_path,
        log_level=system.log_level,
        enable_console=True,
        enable_file=system.enable_logging
    )


# 便捷函数
def debug(message: str, *args, **kwargs) -> None:
    """调试日志"""
    if _frontend_logger is not None:
        _frontend_logger.debug(message, *args, **kwargs)


def info(message: str, *args, **kwargs) -> None:
    """信息日志"""
    if _frontend_logger is not None:
        _frontend_logger.info(message, *args, **kwargs)


def warning(message: str, *args, **kwargs) -> None:
    """警告日志"""
    if _frontend_logger is not None:
        _frontend_logger.warning(message, *args, **kwargs)


def error(message: str, *args, **kwargs) -> None:
    """错误日志"""
    if _frontend_logger is not None:
        _frontend_logger.error(message, *args, **kwargs)


__all__ = [
    'FrontendLogger',
    'get_logger',
    'init_logger',
    'configure_logging',
    'debug',
    'info',
    'warning',
    'error',
]
