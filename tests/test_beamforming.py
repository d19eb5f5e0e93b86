# 波束形成模块测试

import pytest
import numpy as np
import sys
sys.path.insert(0, '.')

from beamfront.common.config import BeamformerConfig
from beamfront.common.exceptions import ShapeError
from beamfront.common.utils import is_hermitian, split_blocks, stack_blocks
from beamfront.backend.beamforming import (
    CovarianceEstimator, SteeringVectorEstimator, MvdrWeightSolver,
    Beamformer, ChannelReshaper
)
from beamfront.backend.transform import unpack_spectrum


def random_hermitian(rng, size: int) -> np.ndarray:
    """生成随机正定Hermitian矩阵"""
    b = rng.standard_normal((size, size)) + 1j * rng.standard_normal((size, size))
    return b @ b.conj().T + np.eye(size)


@pytest.fixture
def stft(transform, multichannel_wave):
    return transform.forward(multichannel_wave)


@pytest.fixture
def num_frames(transform, multichannel_wave):
    return transform.num_frames(multichannel_wave.shape[1])


class TestCovarianceEstimator:
    """空间协方差估计测试"""

    def test_output_layout(self, stft, transform):
        """测试输出形状"""
        covar = CovarianceEstimator().estimate(stft, 3)
        assert covar.shape == (transform.num_bins * 3, 3)
        assert covar.dtype == np.complex128

    def test_hermitian_with_random_mask(self, stft, num_frames, transform, rng):
        """测试任意掩码下协方差均为Hermitian矩阵"""
        estimator = CovarianceEstimator()
        for _ in range(5):
            mask = rng.standard_normal((num_frames, transform.num_bins))
            blocks = split_blocks(estimator.estimate(stft, 3, mask))
            for block in blocks:
                assert is_hermitian(block, atol=1e-10)

    def test_unmasked_average(self, stft, num_frames):
        """测试无掩码时为按帧平均"""
        covar = split_blocks(CovarianceEstimator().estimate(stft, 3))
        obs = unpack_spectrum(stft).reshape(3, num_frames, -1)
        f = 5
        x = obs[:, :, f]
        np.testing.assert_allclose(covar[f], x @ x.conj().T / num_frames, atol=1e-10)

    def test_masked_weighting(self, stft, num_frames, transform, rng):
        """测试掩码加权与归一化"""
        mask = rng.uniform(size=(num_frames, transform.num_bins))
        covar = split_blocks(CovarianceEstimator().estimate(stft, 3, mask))
        obs = unpack_spectrum(stft).reshape(3, num_frames, -1)
        f = 7
        x = obs[:, :, f]
        expected = (x * mask[:, f]) @ x.conj().T / mask[:, f].sum()
        np.testing.assert_allclose(covar[f], expected, atol=1e-10)

    def test_zero_mask_bin(self, stft, num_frames, transform):
        """测试某频点掩码全零时协方差为零矩阵"""
        mask = np.ones((num_frames, transform.num_bins))
        mask[:, 4] = 0.0
        covar = split_blocks(CovarianceEstimator().estimate(stft, 3, mask))
        np.testing.assert_array_equal(covar[4], np.zeros((3, 3)))
        assert np.all(np.isfinite(covar))

    def test_estimate_pair(self, stft, num_frames, transform, rng):
        """测试目标/噪声协方差对"""
        estimator = CovarianceEstimator()
        mask = rng.uniform(size=(num_frames, transform.num_bins))
        target, noise = estimator.estimate_pair(stft, 3, mask)
        np.testing.assert_allclose(target, estimator.estimate(stft, 3, mask))
        np.testing.assert_allclose(noise, estimator.estimate(stft, 3, 1.0 - mask))

    def test_mask_shape_mismatch(self, stft, num_frames, transform):
        """测试掩码形状不匹配"""
        with pytest.raises(ShapeError):
            CovarianceEstimator().estimate(stft, 3, np.ones((num_frames + 1, transform.num_bins)))

    def test_channel_mismatch(self, stft):
        """测试行数不能被通道数整除"""
        with pytest.raises(ShapeError):
            CovarianceEstimator().estimate(stft, 4)


class TestSteeringVectorEstimator:
    """导向向量估计测试"""

    def test_unit_norm(self, rng):
        """测试导向向量单位范数"""
        blocks = np.stack([random_hermitian(rng, 4) for _ in range(6)])
        steering = SteeringVectorEstimator().estimate(stack_blocks(blocks))
        assert steering.shape == (6, 4)
        np.testing.assert_allclose(np.linalg.norm(steering, axis=1), np.ones(6), atol=1e-10)

    def test_dominant_eigenvector(self, rng):
        """测试为最大特征值方向"""
        blocks = np.stack([random_hermitian(rng, 3) for _ in range(4)])
        steering = SteeringVectorEstimator().estimate(stack_blocks(blocks))
        for f in range(4):
            eigenvals = np.linalg.eigvalsh(blocks[f])
            rayleigh = np.real(np.vdot(steering[f], blocks[f] @ steering[f]))
            assert rayleigh == pytest.approx(eigenvals[-1], rel=1e-8)

    def test_rank_one_recovery(self, rng):
        """测试秩一协方差恢复方向（允许全局相位）"""
        c = rng.standard_normal(3) + 1j * rng.standard_normal(3)
        c /= np.linalg.norm(c)
        blocks = np.stack([s * np.outer(c, c.conj()) for s in (1.0, 2.5, 0.3)])
        steering = SteeringVectorEstimator().estimate(stack_blocks(blocks))
        for f in range(3):
            assert np.abs(np.vdot(steering[f], c)) == pytest.approx(1.0, abs=1e-8)
            # 参考通道相位对齐为非负实数
            assert steering[f, 0].imag == pytest.approx(0.0, abs=1e-10)
            assert steering[f, 0].real >= 0

    def test_zero_covariance(self):
        """测试零协方差不抛异常"""
        steering = SteeringVectorEstimator().estimate(np.zeros((6, 3), dtype=np.complex128))
        np.testing.assert_allclose(np.linalg.norm(steering, axis=1), np.ones(2))

    def test_malformed_block(self):
        """测试协方差块形状非法"""
        with pytest.raises(ShapeError):
            SteeringVectorEstimator().estimate(np.zeros((7, 3), dtype=np.complex128))


class TestMvdrWeightSolver:
    """MVDR权重求解测试"""

    def test_distortionless(self, rng):
        """测试目标方向单位增益 w^H v = 1"""
        blocks = np.stack([random_hermitian(rng, 4) for _ in range(5)])
        steering = rng.standard_normal((5, 4)) + 1j * rng.standard_normal((5, 4))
        steering /= np.linalg.norm(steering, axis=1, keepdims=True)

        weights = MvdrWeightSolver().solve(stack_blocks(blocks), steering)
        assert weights.shape == (5, 4)
        for f in range(5):
            assert np.vdot(weights[f], steering[f]) == pytest.approx(1.0 + 0j, abs=1e-8)

    @pytest.mark.parametrize('scale', [1e-6, 1e8, 1e12])
    def test_distortionless_any_scale(self, rng, scale):
        """测试单位增益与权重不随协方差幅度变化"""
        blocks = np.stack([random_hermitian(rng, 4) for _ in range(5)])
        steering = rng.standard_normal((5, 4)) + 1j * rng.standard_normal((5, 4))
        steering /= np.linalg.norm(steering, axis=1, keepdims=True)

        solver = MvdrWeightSolver()
        reference = solver.solve(stack_blocks(blocks), steering)
        weights = solver.solve(stack_blocks(scale * blocks), steering)
        assert len(solver.last_loaded_bins) == 0
        np.testing.assert_allclose(weights, reference, rtol=1e-8, atol=1e-12)
        gains = np.einsum('fc,fc->f', weights.conj(), steering)
        np.testing.assert_allclose(gains, np.ones(5), atol=1e-8)

    def test_zero_steering(self, rng):
        """测试零导向向量得到零权重"""
        covar = random_hermitian(rng, 3)
        weights = MvdrWeightSolver().solve(covar, np.zeros((1, 3), dtype=np.complex128))
        np.testing.assert_array_equal(weights, 0)

    def test_closed_form(self, rng):
        """测试与闭式解一致"""
        covar = random_hermitian(rng, 3)
        v = rng.standard_normal(3) + 1j * rng.standard_normal(3)
        weights = MvdrWeightSolver().solve(covar, v[None, :])
        inv_v = np.linalg.inv(covar) @ v
        np.testing.assert_allclose(weights[0], inv_v / np.vdot(v, inv_v), atol=1e-10)

    def test_minimum_variance(self, rng):
        """测试输出功率不高于延迟求和"""
        covar = random_hermitian(rng, 4)
        v = np.ones(4, dtype=np.complex128) / 2.0
        w = MvdrWeightSolver().solve(covar, v[None, :])[0]
        ds = v / np.vdot(v, v)
        assert np.real(np.vdot(w, covar @ w)) <= np.real(np.vdot(ds, covar @ ds)) + 1e-10

    def test_singular_covariance_loading(self, rng):
        """测试奇异协方差做对角加载而非失败"""
        c = rng.standard_normal(3) + 1j * rng.standard_normal(3)
        blocks = np.stack([
            np.zeros((3, 3), dtype=np.complex128),
            np.outer(c, c.conj()),
            random_hermitian(rng, 3),
        ])
        steering = np.tile(np.array([1.0, 1.0, 1.0], dtype=np.complex128) / np.sqrt(3), (3, 1))

        solver = MvdrWeightSolver()
        weights = solver.solve(stack_blocks(blocks), steering)
        assert np.all(np.isfinite(weights))
        np.testing.assert_array_equal(solver.last_loaded_bins, [0, 1])
        for f in range(3):
            assert np.vdot(weights[f], steering[f]) == pytest.approx(1.0 + 0j, abs=1e-6)

    def test_loading_constant(self, rng):
        """测试条件数阈值可配置"""
        blocks = np.stack([np.diag([1.0, 1e-3]).astype(np.complex128)])
        steering = np.array([[1.0, 0.0]], dtype=np.complex128)
        solver = MvdrWeightSolver(BeamformerConfig(max_condition=10.0))
        solver.solve(stack_blocks(blocks), steering)
        np.testing.assert_array_equal(solver.last_loaded_bins, [0])

    def test_non_finite_input(self, rng):
        """测试非有限输入直接报错"""
        from beamfront.common.exceptions import BeamformingError

        blocks = np.stack([random_hermitian(rng, 3) for _ in range(2)])
        blocks[1, 0, 0] = np.nan
        with pytest.raises(BeamformingError):
            MvdrWeightSolver().solve(stack_blocks(blocks), np.ones((2, 3), dtype=np.complex128))

    def test_shape_mismatch(self, rng):
        """测试导向向量与协方差不匹配"""
        blocks = np.stack([random_hermitian(rng, 3) for _ in range(2)])
        with pytest.raises(ShapeError):
            MvdrWeightSolver().solve(stack_blocks(blocks), np.ones((3, 3), dtype=np.complex128))


class TestBeamformer:
    """频域加权合成测试"""

    def test_inner_product(self, rng):
        """测试 y = sum_c conj(w) x"""
        obs = rng.standard_normal((3, 4, 5)) + 1j * rng.standard_normal((3, 4, 5))
        weights = rng.standard_normal((5, 3)) + 1j * rng.standard_normal((5, 3))
        enhanced = Beamformer().beamform(obs, weights)
        assert enhanced.shape == (4, 5)
        for t in range(4):
            for f in range(5):
                expected = np.sum(np.conj(weights[f]) * obs[:, t, f])
                assert enhanced[t, f] == pytest.approx(expected)

    def test_packed_output(self, stft, num_frames, transform):
        """测试选择单通道权重时输出等于该通道频谱"""
        weights = np.zeros((transform.num_bins, 3), dtype=np.complex128)
        weights[:, 2] = 1.0
        enhanced = Beamformer().run(stft, weights)
        assert enhanced.shape == (num_frames, transform.padding_length)
        np.testing.assert_allclose(enhanced, stft[2 * num_frames:], atol=1e-12)

    def test_round_trip_through_inverse(self, stft, transform):
        """测试输出可直接送入逆变换"""
        weights = np.full((transform.num_bins, 3), 1.0 / 3, dtype=np.complex128)
        wave = transform.inverse(Beamformer().run(stft, weights))
        assert wave.shape[0] == 1

    def test_weight_mismatch(self, rng):
        """测试权重形状不匹配"""
        obs = rng.standard_normal((3, 4, 5)) + 0j
        with pytest.raises(ShapeError):
            Beamformer().beamform(obs, np.ones((4, 3)))


class TestChannelReshaper:
    """通道布局适配测试"""

    def test_channel_views(self, rng):
        """测试通道视图不拷贝"""
        stacked = rng.standard_normal((3 * 4, 6))
        views = ChannelReshaper(3, 4).channel_views(stacked)
        assert len(views) == 3
        np.testing.assert_array_equal(views[1], stacked[4:8])
        assert np.shares_memory(views[2], stacked)

    def test_frame_major_round_trip(self, rng):
        """测试通道主序与帧主序互转"""
        reshaper = ChannelReshaper(3, 6)
        stacked = rng.standard_normal((3 * 5, 6))
        frame_major = reshaper.to_frame_major(stacked)
        assert frame_major.shape == (5, 18)
        np.testing.assert_array_equal(frame_major[2, 6:12], stacked[5 + 2])
        np.testing.assert_array_equal(reshaper.to_channel_major(frame_major), stacked)

    def test_trim(self, rng):
        """测试截断到目标频点并转为频点主序"""
        num_frames, num_channels, width, num_bins = 4, 2, 6, 5
        stft = rng.standard_normal((num_frames, num_channels * width)) + 0j
        trimmed = ChannelReshaper(num_channels, num_bins).trim(stft)
        assert trimmed.shape == (num_bins * num_frames, num_channels)
        for f in range(num_bins):
            for t in range(num_frames):
                for c in range(num_channels):
                    assert trimmed[f * num_frames + t, c] == stft[t, c * width + f]

    def test_untrim(self, rng):
        """测试trim的逆操作"""
        reshaper = ChannelReshaper(3, 4)
        stft = rng.standard_normal((5, 12))
        np.testing.assert_array_equal(reshaper.untrim(reshaper.trim(stft), 5), stft)

    def test_to_observation(self, stft, num_frames, transform):
        """测试打包频谱转为 [C x T x F] 复数观测"""
        obs = ChannelReshaper(3, transform.num_bins).to_observation(stft)
        assert obs.shape == (3, num_frames, transform.num_bins)
        spectrum = unpack_spectrum(stft)
        np.testing.assert_array_equal(obs[1, 2], spectrum[num_frames + 2])

        truncated = ChannelReshaper(3, 5).to_observation(stft)
        np.testing.assert_array_equal(truncated, obs[:, :, :5])
        with pytest.raises(ShapeError):
            ChannelReshaper(3, transform.num_bins + 1).to_observation(stft)
        with pytest.raises(ShapeError):
            ChannelReshaper(4, transform.num_bins).to_observation(stft)

    def test_invalid_layout(self, rng):
        """测试非法布局"""
        reshaper = ChannelReshaper(3, 8)
        with pytest.raises(ShapeError):
            reshaper.to_frame_major(rng.standard_normal((10, 4)))
        with pytest.raises(ShapeError):
            reshaper.trim(rng.standard_normal((4, 12)))
        with pytest.raises(ShapeError):
            ChannelReshaper(0, 4)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
