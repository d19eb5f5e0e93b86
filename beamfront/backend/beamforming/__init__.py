# beamforming - 波束形成模块
from beamfront.backend.beamforming.covariance import CovarianceEstimator
from beamfront.backend.beamforming.steering import SteeringVectorEstimator
from beamfront.backend.beamforming.mvdr import MvdrWeightSolver
from beamfront.backend.beamforming.beamformer import Beamformer
from beamfront.backend.beamforming.reshaper import ChannelReshaper

__all__ = [
    "CovarianceEstimator",
    "SteeringVectorEstimator",
    "MvdrWeightSolver",
    "Beamformer",
    "ChannelReshaper",
]
