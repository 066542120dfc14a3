"""
Statistics Result Models

이 모듈은 통계 엔진의 결과 레코드를 정의합니다.
모든 레코드는 불변(frozen)이며 호출마다 새로 생성됩니다.
JSON 직렬화 시 대시보드가 사용하는 camelCase 키를 사용합니다.
"""

from typing import List, Dict, Any
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel


class Strength(str, Enum):
    """상관관계 / 추세 강도"""
    WEAK = "weak"
    MODERATE = "moderate"
    STRONG = "strong"


class CorrelationDirection(str, Enum):
    """상관관계 방향"""
    POSITIVE = "positive"
    NEGATIVE = "negative"


class TrendDirection(str, Enum):
    """추세 방향"""
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class StatisticsRecord(BaseModel):
    """결과 레코드 공통 베이스"""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True
    )

    def to_json(self) -> Dict[str, Any]:
        """camelCase 키를 사용하는 JSON 호환 딕셔너리로 변환"""
        return self.model_dump(by_alias=True, mode="json")


class Quartiles(StatisticsRecord):
    """사분위수 (중앙값 기준 상/하위 절반의 중앙값)"""
    q1: float = Field(..., description="1사분위수")
    q2: float = Field(..., description="2사분위수 (전체 중앙값)")
    q3: float = Field(..., description="3사분위수")


class DescriptiveMetrics(StatisticsRecord):
    """단일 데이터셋 기술 통계"""
    mean: float = Field(..., description="산술 평균")
    median: float = Field(..., description="중앙값")
    mode: float = Field(..., description="최빈값")
    standard_deviation: float = Field(..., description="모표준편차")
    variance: float = Field(..., ge=0, description="모분산")
    min: float = Field(..., description="최솟값")
    max: float = Field(..., description="최댓값")
    range: float = Field(..., description="범위 (max - min)")
    quartiles: Quartiles = Field(..., description="사분위수")
    outliers: List[float] = Field(default_factory=list, description="IQR 기준 이상치 (입력 순서 유지)")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "mean": 19.1667,
                "median": 3.5,
                "mode": 1,
                "standardDeviation": 35.78,
                "variance": 1280.14,
                "min": 1,
                "max": 100,
                "range": 99,
                "quartiles": {"q1": 2, "q2": 3.5, "q3": 5},
                "outliers": [100]
            }
        }
    )


class CorrelationResult(StatisticsRecord):
    """피어슨 상관관계 분석 결과"""
    correlation: float = Field(..., ge=-1, le=1, description="상관계수")
    strength: Strength = Field(..., description="상관 강도")
    direction: CorrelationDirection = Field(..., description="상관 방향")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "correlation": 0.92,
                "strength": "strong",
                "direction": "positive"
            }
        }
    )


class TimeSeriesPoint(StatisticsRecord):
    """추세 분석 입력 포인트"""
    x: float = Field(..., description="순번 인덱스")
    y: float = Field(..., description="메트릭 값")


class TrendResult(StatisticsRecord):
    """선형 추세 분석 결과"""
    slope: float = Field(..., description="최소제곱 기울기")
    intercept: float = Field(..., description="최소제곱 절편")
    direction: TrendDirection = Field(..., description="추세 방향")
    strength: Strength = Field(..., description="추세 강도 (R² 기준)")
    r_squared: float = Field(..., description="결정계수")


class MetricSetAnalysis(StatisticsRecord):
    """여러 메트릭 시리즈에 대한 일괄 분석 결과"""
    metrics: Dict[str, DescriptiveMetrics] = Field(default_factory=dict, description="메트릭별 기술 통계")
    correlations: Dict[str, CorrelationResult] = Field(default_factory=dict, description="메트릭 쌍별 상관관계")
    trends: Dict[str, TrendResult] = Field(default_factory=dict, description="메트릭별 추세")
    growth: Dict[str, float] = Field(default_factory=dict, description="메트릭별 첫 값 대비 마지막 값 성장률")
    anomalies: Dict[str, List[int]] = Field(default_factory=dict, description="메트릭별 이상치 인덱스")
    skipped: List[str] = Field(default_factory=list, description="분석에서 제외된 메트릭")
