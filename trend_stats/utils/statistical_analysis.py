"""
통계 분석 핵심 함수

영상/채널 메트릭 배열(조회수, 좋아요, 댓글, 참여율, 트렌딩 점수)을
기술 통계, 상관관계, 선형 추세, 성장률, 이상치 인덱스, 파생 점수로 변환합니다.
모든 함수는 입력만 읽고 새 결과를 반환하는 순수 함수입니다.
"""

import logging
import math
from typing import List, Optional, Sequence, Tuple, Union, Mapping

import numpy as np

from ..exceptions import InvalidInputError, DimensionMismatchError, InsufficientDataError
from ..models.statistics import (
    Strength,
    CorrelationDirection,
    TrendDirection,
    Quartiles,
    DescriptiveMetrics,
    CorrelationResult,
    TimeSeriesPoint,
    TrendResult,
)

logger = logging.getLogger(__name__)

# 상관/추세 강도 분류 임계값
STRONG_THRESHOLD = 0.7
MODERATE_THRESHOLD = 0.3

# |slope| 가 이 값보다 작으면 stable
STABLE_SLOPE_THRESHOLD = 0.01

IQR_MULTIPLIER = 1.5
DEFAULT_ANOMALY_THRESHOLD = 2.0
MIN_TREND_POINTS = 2

# 트렌딩 점수 가중치 (조회수, 좋아요, 댓글)
TRENDING_SCORE_WEIGHTS = (0.1, 2.0, 5.0)

PointLike = Union[TimeSeriesPoint, Tuple[float, float], Mapping[str, float]]


def _to_array(data: Sequence[float], name: str = "data") -> np.ndarray:
    """
    입력 시퀀스를 1차원 float 배열로 변환합니다.

    Args:
        data: 숫자 시퀀스 (list, tuple, numpy 배열, pandas Series)
        name: 에러 메시지에 사용할 입력 이름

    Returns:
        원본과 독립된 float64 배열

    Raises:
        InvalidInputError: 숫자가 아니거나 1차원이 아니거나 유한하지 않은 값이 있는 경우
    """
    try:
        values = np.array(data, dtype=float)
    except (TypeError, ValueError) as e:
        logger.warning(f"'{name}'을(를) 숫자 배열로 변환할 수 없습니다: {e}")
        raise InvalidInputError(f"'{name}' must be a sequence of numbers") from e

    if values.ndim != 1:
        raise InvalidInputError(
            f"'{name}' must be one-dimensional",
            details={"ndim": int(values.ndim)}
        )

    if not np.all(np.isfinite(values)):
        raise InvalidInputError(
            f"'{name}' contains NaN or infinite values",
            details={"non_finite_indices": np.flatnonzero(~np.isfinite(values)).tolist()}
        )

    return values


def calculate_metrics(data: Sequence[float]) -> DescriptiveMetrics:
    """
    데이터셋의 종합 기술 통계를 계산합니다.

    Args:
        data: 비어 있지 않은 숫자 시퀀스

    Returns:
        DescriptiveMetrics

    Raises:
        InvalidInputError: 데이터셋이 비어 있는 경우
    """
    values = _to_array(data)
    if values.size == 0:
        logger.warning("빈 데이터셋으로 기술 통계를 계산할 수 없습니다")
        raise InvalidInputError("Dataset cannot be empty")

    sorted_values = np.sort(values)

    mean = float(np.mean(values))
    median = _calculate_median(sorted_values)
    mode = _calculate_mode(values)
    min_value = float(sorted_values[0])
    max_value = float(sorted_values[-1])

    # 모분산 (N으로 나눔)
    variance = float(np.mean((values - mean) ** 2))
    standard_deviation = math.sqrt(variance)

    quartiles = _calculate_quartiles(sorted_values)
    outliers = _detect_outliers(values, quartiles)

    logger.debug(
        f"기술 통계: n={values.size}, mean={mean:.4f}, median={median:.4f}, "
        f"std={standard_deviation:.4f}, outliers={len(outliers)}"
    )

    return DescriptiveMetrics(
        mean=mean,
        median=median,
        mode=mode,
        standard_deviation=standard_deviation,
        variance=variance,
        min=min_value,
        max=max_value,
        range=max_value - min_value,
        quartiles=quartiles,
        outliers=outliers
    )


def calculate_correlation(x: Sequence[float], y: Sequence[float]) -> CorrelationResult:
    """
    두 데이터셋 간의 피어슨 상관계수를 계산합니다.

    곱의 합 공식을 사용하며, 분모가 0이면(어느 한쪽의 분산이 없으면) 상관계수는 0입니다.

    Raises:
        DimensionMismatchError: 두 데이터셋의 길이가 다른 경우
        InvalidInputError: 값이 유한하지 않거나 계산 중 오버플로가 발생한 경우
    """
    x_values = _to_array(x, "x")
    y_values = _to_array(y, "y")

    if x_values.size != y_values.size:
        logger.warning(f"상관관계 입력 길이 불일치: {x_values.size} != {y_values.size}")
        raise DimensionMismatchError(int(x_values.size), int(y_values.size))

    # r은 평행이동/양수배에 불변이므로 [-1, 1] 범위로 정규화한 뒤 곱의 합 계산
    x_values = _normalize_for_products(x_values)
    y_values = _normalize_for_products(y_values)

    n = x_values.size
    sum_x = np.sum(x_values)
    sum_y = np.sum(y_values)
    sum_xy = np.sum(x_values * y_values)
    sum_x2 = np.sum(x_values * x_values)
    sum_y2 = np.sum(y_values * y_values)

    numerator = n * sum_xy - sum_x * sum_y
    radicand = (n * sum_x2 - sum_x * sum_x) * (n * sum_y2 - sum_y * sum_y)

    if not (math.isfinite(numerator) and math.isfinite(radicand)):
        logger.warning("상관관계 계산 중 수치 오버플로 발생")
        raise InvalidInputError(
            "Values are too large to compute a correlation",
            details={"length": int(n)}
        )

    # 반올림 오차로 음수가 되는 경우도 분산 없음으로 취급
    if radicand <= 0:
        correlation = 0.0
    else:
        correlation = float(np.clip(numerator / math.sqrt(radicand), -1.0, 1.0))

    logger.debug(f"상관관계: n={n}, r={correlation:.4f}")

    return CorrelationResult(
        correlation=correlation,
        strength=_get_strength(abs(correlation)),
        direction=CorrelationDirection.POSITIVE if correlation >= 0 else CorrelationDirection.NEGATIVE
    )


def analyze_trend(data: Sequence[PointLike]) -> TrendResult:
    """
    시계열 데이터의 선형 추세를 최소제곱법으로 분석합니다.

    Args:
        data: TimeSeriesPoint, (x, y) 튜플 또는 {"x": ..., "y": ...} 딕셔너리의 시퀀스

    Returns:
        TrendResult

    Raises:
        InsufficientDataError: 포인트가 2개 미만인 경우
    """
    points = _coerce_points(data)
    if len(points) < MIN_TREND_POINTS:
        logger.warning(f"추세 분석에 필요한 데이터 부족: {len(points)}개")
        raise InsufficientDataError(required=MIN_TREND_POINTS, received=len(points))

    x = _to_array([point.x for point in points], "x")
    y = _to_array([point.y for point in points], "y")

    n = x.size
    sum_x = np.sum(x)
    sum_y = np.sum(y)
    sum_xy = np.sum(x * y)
    sum_x2 = np.sum(x * x)

    denominator = n * sum_x2 - sum_x * sum_x
    # 모든 x가 같으면 기울기를 정의할 수 없으므로 수평선으로 적합
    slope = float((n * sum_xy - sum_x * sum_y) / denominator) if denominator != 0 else 0.0
    intercept = float((sum_y - slope * sum_x) / n)

    if np.all(y == y[0]):
        # 모든 y가 같으면 수평 적합이 데이터를 완전히 설명
        r_squared = 1.0
    else:
        y_mean = sum_y / n
        ss_total = np.sum((y - y_mean) ** 2)
        ss_residual = np.sum((y - (slope * x + intercept)) ** 2)
        r_squared = float(1 - ss_residual / ss_total)

    logger.debug(f"추세 분석: n={n}, slope={slope:.4f}, r_squared={r_squared:.4f}")

    return TrendResult(
        slope=slope,
        intercept=intercept,
        direction=_get_trend_direction(slope),
        strength=_get_strength(abs(r_squared)),
        r_squared=r_squared
    )


def calculate_growth_rate(current: float, previous: float) -> float:
    """두 기간 사이의 성장률(%)"""
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100


def calculate_cagr(beginning_value: float, ending_value: float, years: float) -> float:
    """연평균 성장률(CAGR, %)"""
    if beginning_value <= 0 or years <= 0:
        return 0.0
    ratio = ending_value / beginning_value
    if ratio < 0:
        # 음수의 분수 거듭제곱은 실수 범위에서 정의되지 않음
        return math.nan
    return (math.pow(ratio, 1 / years) - 1) * 100


def calculate_engagement_score(views: float, likes: float, comments: float,
                               shares: Optional[float] = None) -> float:
    """
    여러 메트릭 기반 참여 점수를 계산합니다.

    댓글은 좋아요의 2배, 공유는 3배 가중치를 가집니다.
    조회수가 1 미만이면 1로 취급합니다.
    """
    denominator = max(views, 1)
    base_score = (likes + comments * 2) / denominator * 100
    share_bonus = (shares * 3) / denominator * 100 if shares else 0.0
    return base_score + share_bonus


def calculate_trending_velocity(current_score: float, previous_score: float,
                                time_diff_hours: float) -> float:
    """트렌딩 점수의 시간당 변화율"""
    if time_diff_hours == 0:
        return 0.0
    return (current_score - previous_score) / time_diff_hours


def detect_anomalies(data: Sequence[float], threshold: float = DEFAULT_ANOMALY_THRESHOLD) -> List[int]:
    """
    z-score 기반으로 이상치의 인덱스를 탐지합니다.

    |z| 가 임계값 이상인 값의 인덱스를 반환합니다. 표준편차가 0이면
    모든 z-score를 0으로 보고 아무것도 표시하지 않습니다.

    Raises:
        InvalidInputError: 데이터셋이 비어 있는 경우
    """
    values = _to_array(data)
    metrics = calculate_metrics(values)

    if metrics.standard_deviation == 0 or metrics.range == 0:
        logger.debug("표준편차가 0이므로 이상치 없음")
        return []

    z_scores = np.abs((values - metrics.mean) / metrics.standard_deviation)
    # 부동소수점 오차로 경계값(z == threshold)이 누락되지 않도록 isclose 포함
    flagged = (z_scores > threshold) | np.isclose(z_scores, threshold, rtol=1e-9, atol=0.0)
    anomalies = np.flatnonzero(flagged).tolist()

    logger.debug(f"이상치 탐지: threshold={threshold}, anomalies={anomalies}")
    return anomalies


def calculate_market_share(channel_views: float, total_market_views: float) -> float:
    """채널의 시장 점유율(%)"""
    if total_market_views == 0:
        return 0.0
    return channel_views / total_market_views * 100


def calculate_engagement_rate(views: float, likes: float, comments: float) -> float:
    """단일 영상의 참여율: (좋아요 + 댓글) / 조회수 * 100"""
    if views == 0:
        return 0.0
    return (likes + comments) / views * 100


def calculate_trending_score(views: float, likes: float, comments: float) -> float:
    """조회수/좋아요/댓글 가중 합으로 계산한 트렌딩 점수"""
    view_weight, like_weight, comment_weight = TRENDING_SCORE_WEIGHTS
    return views * view_weight + likes * like_weight + comments * comment_weight


def to_time_series(values: Sequence[float]) -> List[TimeSeriesPoint]:
    """값 시퀀스를 순번 인덱스를 x로 하는 시계열 포인트로 변환"""
    return [TimeSeriesPoint(x=index, y=value) for index, value in enumerate(_to_array(values).tolist())]


# Helper functions

def _calculate_median(sorted_values: np.ndarray) -> float:
    n = sorted_values.size
    if n % 2 == 0:
        return float((sorted_values[n // 2 - 1] + sorted_values[n // 2]) / 2)
    return float(sorted_values[n // 2])


def _calculate_mode(values: np.ndarray) -> float:
    """최빈값 (동률이면 가장 작은 값)"""
    unique_values, counts = np.unique(values, return_counts=True)
    return float(unique_values[np.argmax(counts)])


def _calculate_quartiles(sorted_values: np.ndarray) -> Quartiles:
    """
    중앙값 기준으로 정렬 데이터를 두 절반으로 나누고 각 절반의 중앙값을 구합니다.

    하위 절반은 [0, floor(N/2)), 상위 절반은 [ceil(N/2), N) 이며 q2는 전체 중앙값입니다.
    N=1 이면 두 절반이 비어 있으므로 q1 = q3 = 유일한 값입니다.
    """
    n = sorted_values.size
    q2 = _calculate_median(sorted_values)

    lower_half = sorted_values[:n // 2]
    upper_half = sorted_values[(n + 1) // 2:]

    q1 = _calculate_median(lower_half) if lower_half.size else q2
    q3 = _calculate_median(upper_half) if upper_half.size else q2

    return Quartiles(q1=q1, q2=q2, q3=q3)


def _detect_outliers(values: np.ndarray, quartiles: Quartiles) -> List[float]:
    """IQR 방식 이상치 (입력 순서와 중복 유지)"""
    iqr = quartiles.q3 - quartiles.q1
    lower_bound = quartiles.q1 - IQR_MULTIPLIER * iqr
    upper_bound = quartiles.q3 + IQR_MULTIPLIER * iqr

    return values[(values < lower_bound) | (values > upper_bound)].tolist()


def _normalize_for_products(values: np.ndarray) -> np.ndarray:
    """평균을 빼고 최대 절댓값으로 나눈 배열 (분산이 없으면 0 배열)"""
    if values.size == 0:
        return values
    centered = values - np.mean(values)
    spread = np.max(np.abs(centered))
    if spread == 0 or not np.isfinite(spread):
        return centered
    return centered / spread


def _coerce_points(data: Sequence[PointLike]) -> List[TimeSeriesPoint]:
    """여러 형태의 시계열 입력을 TimeSeriesPoint 리스트로 정규화"""
    if data is None:
        raise InvalidInputError("Time series data is required")

    points = []
    for index, item in enumerate(data):
        try:
            if isinstance(item, TimeSeriesPoint):
                points.append(item)
            elif isinstance(item, Mapping):
                points.append(TimeSeriesPoint(x=item["x"], y=item["y"]))
            else:
                x, y = item
                points.append(TimeSeriesPoint(x=x, y=y))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"시계열 포인트 {index} 변환 실패: {e}")
            raise InvalidInputError(
                f"Invalid time series point at index {index}",
                details={"index": index}
            ) from e
    return points


def _get_strength(absolute_value: float) -> Strength:
    if absolute_value >= STRONG_THRESHOLD:
        return Strength.STRONG
    if absolute_value >= MODERATE_THRESHOLD:
        return Strength.MODERATE
    return Strength.WEAK


def _get_trend_direction(slope: float) -> TrendDirection:
    if abs(slope) < STABLE_SLOPE_THRESHOLD:
        return TrendDirection.STABLE
    return TrendDirection.INCREASING if slope > 0 else TrendDirection.DECREASING
