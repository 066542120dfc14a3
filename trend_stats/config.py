"""
통계 엔진 설정

기본 설정 딕셔너리와 환경 변수(.env 포함) 기반 오버라이드, 로깅 설정을 제공합니다.
"""

import os
import logging
from typing import Dict, Any, List, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

ENV_PREFIX = "TREND_STATS_"


def get_default_config() -> Dict[str, Any]:
    """기본 설정 반환"""
    return {
        # 상관관계를 계산할 메트릭 쌍
        'correlation_pairs': [
            ('views', 'likes'),
            ('views', 'comments'),
            ('likes', 'comments'),
        ],

        # 순번 인덱스 기준 선형 추세를 계산할 메트릭
        'trend_metrics': ['engagement'],

        # 첫 값 대비 마지막 값 성장률을 계산할 메트릭
        'growth_metrics': ['views'],

        # z-score 이상치 탐지 대상 메트릭과 임계값
        'anomaly_metrics': ['trending'],
        'anomaly_threshold': 2.0,

        # 이 값보다 짧은 시리즈는 분석에서 제외
        'min_sample_size': 1,
    }


def _split_list(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(',') if item.strip()]


def load_config_from_env(dotenv_path: Optional[str] = None) -> Dict[str, Any]:
    """
    환경 변수에서 설정 오버라이드를 읽습니다.

    .env 파일이 있으면 먼저 로드하며, 이미 설정된 환경 변수는 덮어쓰지 않습니다.

    Args:
        dotenv_path: .env 파일 경로 (None이면 현재 디렉토리부터 탐색)

    Returns:
        기본 설정에 환경 변수 값을 병합한 설정 딕셔너리

    Raises:
        ValueError: 숫자 설정 값을 변환할 수 없는 경우
    """
    load_dotenv(dotenv_path)
    config = get_default_config()

    threshold = os.getenv(f"{ENV_PREFIX}ANOMALY_THRESHOLD")
    if threshold:
        config['anomaly_threshold'] = float(threshold)

    min_sample_size = os.getenv(f"{ENV_PREFIX}MIN_SAMPLE_SIZE")
    if min_sample_size:
        config['min_sample_size'] = int(min_sample_size)

    for key in ('trend_metrics', 'growth_metrics', 'anomaly_metrics'):
        raw = os.getenv(f"{ENV_PREFIX}{key.upper()}")
        if raw is not None:
            config[key] = _split_list(raw)

    logger.debug(f"환경 변수 기반 설정 로드 완료: {config}")
    return config


def setup_logging(level: Optional[str] = None) -> None:
    """
    로깅 설정

    Args:
        level: 로그 레벨 이름 (None이면 LOG_LEVEL 환경 변수, 기본 INFO)
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT
    )
