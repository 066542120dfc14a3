"""
통계 분석 핵심 함수 단위 테스트

기술 통계, 상관관계, 추세, 성장률, 파생 점수, 이상치 탐지의
정확성과 경계 입력 처리를 검증합니다.
"""

import math
import pytest
import numpy as np
import sys
import os
import unittest
from scipy import stats

# 프로젝트 루트를 Python 경로에 추가
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from trend_stats.exceptions import InvalidInputError, DimensionMismatchError, InsufficientDataError
from trend_stats.models.statistics import (
    Strength,
    CorrelationDirection,
    TrendDirection,
    TimeSeriesPoint,
)
from trend_stats.utils.statistical_analysis import (
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


class TestCalculateMetrics(unittest.TestCase):
    """calculate_metrics 테스트 클래스"""

    def setUp(self):
        """각 테스트 메서드 실행 전 설정"""
        self.rng = np.random.default_rng(42)
        self.skewed_data = [1, 2, 3, 4, 5, 100]

    def test_single_value(self):
        """값이 하나인 데이터셋"""
        metrics = calculate_metrics([5])

        assert metrics.to_json() == {
            'mean': 5.0,
            'median': 5.0,
            'mode': 5.0,
            'standardDeviation': 0.0,
            'variance': 0.0,
            'min': 5.0,
            'max': 5.0,
            'range': 0.0,
            'quartiles': {'q1': 5.0, 'q2': 5.0, 'q3': 5.0},
            'outliers': []
        }

    def test_skewed_data_with_outlier(self):
        """IQR 방식으로 큰 값이 이상치로 표시되는지 테스트"""
        metrics = calculate_metrics(self.skewed_data)

        assert metrics.mean == pytest.approx(19.1667, abs=1e-4)
        assert metrics.median == 3.5
        assert metrics.quartiles.q1 == 2.0
        assert metrics.quartiles.q2 == 3.5
        assert metrics.quartiles.q3 == 5.0
        assert metrics.outliers == [100.0]
        assert metrics.min == 1.0
        assert metrics.max == 100.0
        assert metrics.range == 99.0

    def test_population_variance(self):
        """분산은 N으로 나눈 모분산"""
        data = self.rng.normal(1000, 150, 200)
        metrics = calculate_metrics(data)

        assert metrics.variance == pytest.approx(np.var(data))
        assert metrics.standard_deviation == pytest.approx(np.std(data))
        assert metrics.mean == pytest.approx(np.mean(data))

    def test_order_invariants(self):
        """min <= q1 <= q2 <= q3 <= max, q2 == median"""
        for size in (1, 2, 3, 4, 5, 10, 51, 200):
            data = self.rng.exponential(500, size)
            metrics = calculate_metrics(data)

            assert metrics.min <= metrics.quartiles.q1 <= metrics.quartiles.q2
            assert metrics.quartiles.q2 <= metrics.quartiles.q3 <= metrics.max
            assert metrics.min <= metrics.median <= metrics.max
            assert metrics.quartiles.q2 == metrics.median
            assert metrics.range == metrics.max - metrics.min
            assert metrics.variance >= 0

    def test_median_odd_and_even(self):
        """홀수/짝수 길이의 중앙값"""
        assert calculate_metrics([3, 1, 2]).median == 2.0
        assert calculate_metrics([4, 1, 3, 2]).median == 2.5

    def test_quartiles_exclude_median(self):
        """홀수 길이에서는 중앙 원소가 양쪽 절반에서 제외됨"""
        quartiles = calculate_metrics([1, 2, 3, 4, 5]).quartiles

        assert quartiles.q1 == 1.5
        assert quartiles.q2 == 3.0
        assert quartiles.q3 == 4.5

    def test_mode_tie_breaks_to_smallest(self):
        """최빈값 동률이면 가장 작은 값"""
        assert calculate_metrics([3, 3, 1, 1, 2]).mode == 1.0
        assert calculate_metrics([2, 2, 5]).mode == 2.0
        assert calculate_metrics(self.skewed_data).mode == 1.0

    def test_outliers_keep_input_order_and_duplicates(self):
        """이상치는 입력 순서를 유지하고 중복도 포함"""
        data = [100, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 100]
        assert calculate_metrics(data).outliers == [100.0, 100.0]

        data = [100, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, -100]
        assert calculate_metrics(data).outliers == [100.0, -100.0]

    def test_does_not_mutate_input(self):
        """입력 배열을 변경하지 않음"""
        data = [5, 3, 9, 1]
        calculate_metrics(data)
        assert data == [5, 3, 9, 1]

    def test_empty_dataset(self):
        """빈 데이터셋은 InvalidInputError"""
        with pytest.raises(InvalidInputError, match="Dataset cannot be empty"):
            calculate_metrics([])

    def test_non_finite_values(self):
        """NaN/무한대 값은 InvalidInputError"""
        with pytest.raises(InvalidInputError) as exc_info:
            calculate_metrics([1.0, float('nan'), 3.0])
        assert exc_info.value.details['non_finite_indices'] == [1]

        with pytest.raises(InvalidInputError):
            calculate_metrics([1.0, float('inf')])

    def test_non_numeric_values(self):
        """숫자가 아닌 값은 InvalidInputError"""
        with pytest.raises(InvalidInputError):
            calculate_metrics(['a', 'b'])

    def test_deterministic(self):
        """같은 입력이면 같은 결과"""
        data = self.rng.normal(0, 1, 100).tolist()
        assert calculate_metrics(data) == calculate_metrics(data)


class TestCalculateCorrelation:
    """calculate_correlation 테스트 클래스"""

    def setup_method(self):
        """테스트 설정"""
        rng = np.random.default_rng(7)
        self.views = rng.normal(10000, 2000, 50)
        self.likes = self.views * 0.04 + rng.normal(0, 50, 50)

    def test_perfect_positive(self):
        result = calculate_correlation([1, 2, 3], [2, 4, 6])

        assert result.correlation == 1.0
        assert result.strength == Strength.STRONG
        assert result.direction == CorrelationDirection.POSITIVE

    def test_perfect_negative(self):
        result = calculate_correlation([1, 2, 3], [6, 4, 2])

        assert result.correlation == -1.0
        assert result.strength == Strength.STRONG
        assert result.direction == CorrelationDirection.NEGATIVE

    def test_strength_thresholds(self):
        """|r| >= 0.7 strong, >= 0.3 moderate, 그 외 weak"""
        moderate = calculate_correlation([1, 2, 3, 4, 5], [3, 1, 2, 5, 4])
        weak = calculate_correlation([1, 2, 3, 4, 5], [2, 5, 1, 4, 3])

        assert moderate.correlation == pytest.approx(0.6)
        assert moderate.strength == Strength.MODERATE
        assert weak.correlation == pytest.approx(0.1)
        assert weak.strength == Strength.WEAK

    def test_no_variance_is_zero(self):
        """분산이 없으면 상관계수 0, 방향은 positive"""
        result = calculate_correlation([1, 2, 3], [5, 5, 5])

        assert result.correlation == 0.0
        assert result.strength == Strength.WEAK
        assert result.direction == CorrelationDirection.POSITIVE

    def test_symmetry(self):
        """calculate_correlation(x, y) == calculate_correlation(y, x)"""
        forward = calculate_correlation(self.views, self.likes)
        backward = calculate_correlation(self.likes, self.views)

        assert forward.correlation == backward.correlation
        assert calculate_correlation([1, 2, 3], [1, 2, 3]).correlation == 1.0

    def test_matches_scipy(self):
        """scipy.stats.pearsonr 결과와 일치"""
        expected, _ = stats.pearsonr(self.views, self.likes)
        result = calculate_correlation(self.views, self.likes)

        assert result.correlation == pytest.approx(expected, abs=1e-9)
        assert -1.0 <= result.correlation <= 1.0

    def test_large_values(self):
        """매우 큰 유한 값도 오버플로 없이 계산"""
        result = calculate_correlation([1e160, 2e160, 3e160], [1, 2, 3])

        assert result.correlation == pytest.approx(1.0)
        assert result.strength == Strength.STRONG

        scaled = calculate_correlation(self.views * 1e150, self.likes)
        assert scaled.correlation == pytest.approx(calculate_correlation(self.views, self.likes).correlation)

    def test_overflowing_values(self):
        """평균 계산 자체가 오버플로되면 InvalidInputError"""
        with np.errstate(over="ignore", invalid="ignore"):
            with pytest.raises(InvalidInputError):
                calculate_correlation([1.7e308, 1.7e308, 1.0], [1, 2, 3])

    def test_dimension_mismatch(self):
        """길이가 다르면 DimensionMismatchError"""
        with pytest.raises(DimensionMismatchError) as exc_info:
            calculate_correlation([1, 2], [1, 2, 3])

        assert exc_info.value.details == {"x_length": 2, "y_length": 3}


class TestAnalyzeTrend:
    """analyze_trend 테스트 클래스"""

    def test_perfect_increasing_trend(self):
        result = analyze_trend([{'x': 0, 'y': 1}, {'x': 1, 'y': 2}, {'x': 2, 'y': 3}])

        assert result.slope == 1.0
        assert result.intercept == 1.0
        assert result.direction == TrendDirection.INCREASING
        assert result.r_squared == 1.0
        assert result.strength == Strength.STRONG

    def test_decreasing_trend_from_tuples(self):
        result = analyze_trend([(0, 3), (1, 2), (2, 1)])

        assert result.slope == -1.0
        assert result.direction == TrendDirection.DECREASING

    def test_time_series_points(self):
        points = [TimeSeriesPoint(x=0, y=10), TimeSeriesPoint(x=1, y=12), TimeSeriesPoint(x=2, y=14)]
        assert analyze_trend(points).slope == 2.0

    def test_small_slope_is_stable(self):
        """|slope| < 0.01 이면 stable"""
        result = analyze_trend([(0, 0), (1, 0.005), (2, 0.01)])

        assert result.slope == pytest.approx(0.005)
        assert result.direction == TrendDirection.STABLE

    def test_weak_trend(self):
        result = analyze_trend(to_time_series([1, 3, 1, 3, 1, 3]))

        assert result.slope == pytest.approx(18 / 105)
        assert result.direction == TrendDirection.INCREASING
        assert result.r_squared == pytest.approx(9 / 105)
        assert result.strength == Strength.WEAK

    def test_constant_y_has_r_squared_one(self):
        """모든 y가 같으면 r_squared = 1.0 (NaN 대신)"""
        result = analyze_trend([(0, 4), (1, 4), (2, 4)])

        assert result.slope == 0.0
        assert result.r_squared == 1.0
        assert result.direction == TrendDirection.STABLE
        assert result.strength == Strength.STRONG

    def test_identical_x_has_zero_slope(self):
        """모든 x가 같으면 기울기 0의 수평 적합"""
        result = analyze_trend([(1, 2), (1, 4)])

        assert result.slope == 0.0
        assert result.intercept == 3.0
        assert result.r_squared == 0.0
        assert result.strength == Strength.WEAK

    def test_matches_scipy_linregress(self):
        """scipy.stats.linregress 결과와 일치"""
        rng = np.random.default_rng(3)
        x = np.arange(30, dtype=float)
        y = 2.5 * x + 10 + rng.normal(0, 4, 30)

        expected = stats.linregress(x, y)
        result = analyze_trend(list(zip(x, y)))

        assert result.slope == pytest.approx(expected.slope)
        assert result.intercept == pytest.approx(expected.intercept)
        assert result.r_squared == pytest.approx(expected.rvalue ** 2)

    def test_insufficient_data(self):
        """포인트가 2개 미만이면 InsufficientDataError"""
        with pytest.raises(InsufficientDataError) as exc_info:
            analyze_trend([{'x': 0, 'y': 1}])
        assert exc_info.value.details['required'] == 2
        assert exc_info.value.details['received'] == 1

        with pytest.raises(InsufficientDataError):
            analyze_trend([])

    def test_malformed_point(self):
        """x/y 가 없는 포인트는 InvalidInputError"""
        with pytest.raises(InvalidInputError) as exc_info:
            analyze_trend([{'x': 0, 'y': 1}, {'x': 1}])
        assert exc_info.value.details == {"index": 1}


class TestScores:
    """성장률 및 파생 점수 테스트"""

    def test_growth_rate(self):
        assert calculate_growth_rate(0, 0) == 0
        assert calculate_growth_rate(50, 0) == 100
        assert calculate_growth_rate(-5, 0) == 0
        assert calculate_growth_rate(150, 100) == 50
        assert calculate_growth_rate(50, 100) == -50

    def test_cagr(self):
        assert calculate_cagr(100, 121, 2) == pytest.approx(10.0)
        assert calculate_cagr(100, 50, 1) == pytest.approx(-50.0)
        assert calculate_cagr(0, 100, 2) == 0
        assert calculate_cagr(-10, 100, 2) == 0
        assert calculate_cagr(100, 200, 0) == 0

    def test_cagr_negative_ratio_is_nan(self):
        """종료값이 음수이면 실수 CAGR 이 없으므로 NaN"""
        assert math.isnan(calculate_cagr(100, -50, 2))
        assert math.isnan(calculate_cagr(100, -1, 0.5))

    def test_engagement_score(self):
        assert calculate_engagement_score(1000, 50, 10) == pytest.approx(7.0)
        assert calculate_engagement_score(1000, 50, 10, shares=5) == pytest.approx(8.5)
        assert calculate_engagement_score(1000, 50, 10, shares=0) == pytest.approx(7.0)
        # 조회수 0 은 1 로 취급
        assert calculate_engagement_score(0, 2, 1) == pytest.approx(400.0)

    def test_trending_velocity(self):
        assert calculate_trending_velocity(120, 100, 4) == 5.0
        assert calculate_trending_velocity(80, 100, 10) == -2.0
        assert calculate_trending_velocity(120, 100, 0) == 0

    def test_market_share(self):
        assert calculate_market_share(250, 1000) == 25.0
        assert calculate_market_share(250, 0) == 0

    def test_engagement_rate(self):
        assert calculate_engagement_rate(1000, 50, 10) == pytest.approx(6.0)
        assert calculate_engagement_rate(0, 50, 10) == 0

    def test_trending_score(self):
        assert calculate_trending_score(1000, 50, 10) == pytest.approx(250.0)


class TestDetectAnomalies:
    """detect_anomalies 테스트"""

    def test_single_spike(self):
        assert detect_anomalies([1, 1, 1, 1, 100], 2) == [4]

    def test_threshold_is_inclusive(self):
        """z-score 가 임계값과 같으면 이상치로 표시"""
        data = [10] * 9 + [100]

        assert detect_anomalies(data) == [9]
        assert detect_anomalies(data, threshold=3) == [9]
        assert detect_anomalies(data, threshold=3.5) == []
        # 경계 허용 오차는 부동소수점 수준으로만 적용
        assert detect_anomalies(data, threshold=3.00001) == []

    def test_zero_standard_deviation(self):
        """표준편차가 0이면 이상치 없음"""
        assert detect_anomalies([3, 3, 3]) == []
        assert detect_anomalies([7]) == []

    def test_returns_indices(self):
        data = [100, 10, 10, 10, 10, 10, 10, 10, 10, 10]
        assert detect_anomalies(data) == [0]

    def test_empty_dataset(self):
        with pytest.raises(InvalidInputError):
            detect_anomalies([])


def test_to_time_series():
    """순번 인덱스를 x 로 사용"""
    points = to_time_series([5, 7])

    assert points == [TimeSeriesPoint(x=0, y=5), TimeSeriesPoint(x=1, y=7)]
