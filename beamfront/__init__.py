# beamfront - 麦克风阵列语音增强前端
# 版本: 1.0
# 技术栈: Python 3.10+
"""
麦克风阵列语音增强前端

本模块实现了批处理式的多通道语音增强前端，包括：
- 时频变换：加窗短时傅里叶分析、重叠相加综合、幅度谱/相位谱提取
- 空间统计：掩码加权的空间协方差估计
- 波束形成：导向向量估计、MVDR权重求解、加权合成
- 布局适配：通道/帧/频点布局转换

作者: Beamfront Development Team
许可: MIT License
"""

__version__ = "1.0.0"
__author__ = "Beamfront Development Team"
