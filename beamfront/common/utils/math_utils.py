# 数学工具函数模块 (Math Utilities Module)
# 本模块提供复数矩阵相关的计算函数

import numpy as np

from beamfront.common.exceptions import ShapeError


# ==================== Hermitian矩阵 ====================

def hermitian_symmetrize(mat: np.ndarray) -> np.ndarray:
    """对最后两维做Hermitian对称化: 0.5 * (A + A^H)"""
    return 0.5 * (mat + np.conj(np.swapaxes(mat, -1, -2)))


def is_hermitian(mat: np.ndarray, atol: float = 1e-8) -> bool:
    """判断矩阵（或矩阵批）是否为Hermitian矩阵"""
    if mat.shape[-1] != mat.shape[-2]:
        return False
    return bool(np.allclose(mat, np.conj(np.swapaxes(mat, -1, -2)), atol=atol))


# ==================== 堆叠块矩阵 ====================

def split_blocks(stacked: np.ndarray) -> np.ndarray:
    """
    将堆叠的方阵块拆分为批

    Args:
        stacked: [(F*C) x C]

    Returns:
        [F x C x C]
    """
    if stacked.ndim != 2:
        raise ShapeError('堆叠协方差必须为二维矩阵', actual=stacked.shape)
    rows, cols = stacked.shape
    if cols == 0 or rows % cols != 0:
        raise ShapeError('堆叠协方差的行数必须是列数的整数倍', actual=stacked.shape)
    return stacked.reshape(rows // cols, cols, cols)


def stack_blocks(blocks: np.ndarray) -> np.ndarray:
    """[F x C x C] -> [(F*C) x C]"""
    num_bins, num_channels, _ = blocks.shape
    return blocks.reshape(num_bins * num_channels, num_channels)


# ==================== 对角加载 ====================

def diagonal_load(mat: np.ndarray, factor: float, floor: float = 0.0) -> np.ndarray:
    """
    对角加载: A + factor * max(trace(A)/N, floor) * I

    Args:
        mat: 方阵
        factor: 加载因子
        floor: 加载量下限（用于零矩阵等迹为零的情况）
    """
    n = mat.shape[-1]
    level = max(float(np.real(np.trace(mat))) / n, floor)
    return mat + factor * level * np.eye(n, dtype=mat.dtype)


def unit_norm_rows(mat: np.ndarray, eps: float = 0.0) -> np.ndarray:
    """将每一行归一化为单位欧氏范数"""
    norm = np.linalg.norm(mat, axis=-1, keepdims=True)
    return mat / np.maximum(norm, eps) if eps > 0 else mat / norm


__all__ = [
    'hermitian_symmetrize', 'is_hermitian',
    'split_blocks', 'stack_blocks',
    'diagonal_load', 'unit_norm_rows',
]
