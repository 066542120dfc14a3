"""
Trend Statistics

YouTube 영상/채널 메트릭 배열에 대한 기술 통계, 상관관계, 추세, 성장률,
이상치 탐지 및 파생 점수를 계산하는 순수 통계 라이브러리입니다.
"""

from .exceptions import (
    StatisticsError,
    InvalidInputError,
    DimensionMismatchError,
    InsufficientDataError,
)
from .models.statistics import (
    Strength,
    CorrelationDirection,
    TrendDirection,
    Quartiles,
    DescriptiveMetrics,
    CorrelationResult,
    TimeSeriesPoint,
    TrendResult,
    MetricSetAnalysis,
)
from .utils.statistical_analysis import (
    calculate_metrics,
    calculate_correlation,
    analyze_trend,
    calculate_growth_rate,
    calculate_cagr,
    calculate_engagement_score,
    calculate_trending_velocity,
    detect_anomalies,
    calculate_market_share,
    calculate_engagement_rate,
    calculate_trending_score,
    to_time_series,
)
from .statistical_analysis import StatisticsEngine

__version__ = "1.0.0"

__all__ = [
    # Errors
    'StatisticsError',
    'InvalidInputError',
    'DimensionMismatchError',
    'InsufficientDataError',
    # Models
    'Strength',
    'CorrelationDirection',
    'TrendDirection',
    'Quartiles',
    'DescriptiveMetrics',
    'CorrelationResult',
    'TimeSeriesPoint',
    'TrendResult',
    'MetricSetAnalysis',
    # Functions
    'calculate_metrics',
    'calculate_correlation',
    'analyze_trend',
    'calculate_growth_rate',
    'calculate_cagr',
    'calculate_engagement_score',
    'calculate_trending_velocity',
    'detect_anomalies',
    'calculate_market_share',
    'calculate_engagement_rate',
    'calculate_trending_score',
    'to_time_series',
    # Engine
    'StatisticsEngine',
]
