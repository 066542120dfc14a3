"""
커스텀 예외 클래스 정의

통계 엔진에서 사용되는 입력 검증 예외들을 정의합니다.
모든 예외는 호출자의 계약 위반을 의미하며 재시도 대상이 아닙니다.
"""

from typing import Optional, Dict, Any


class StatisticsError(Exception):
    """
    통계 엔진 예외의 기본 클래스

    모든 커스텀 예외는 이 클래스를 상속받아야 합니다.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_json(self) -> Dict[str, Any]:
        """표준화된 에러 딕셔너리"""
        return {
            "message": self.message,
            "type": self.__class__.__name__,
            "details": self.details
        }


class InvalidInputError(StatisticsError):
    """통계를 정의할 수 없는 입력(빈 데이터셋 등)일 때 발생하는 예외"""

    def __init__(self, message: str = "Dataset cannot be empty", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=f"Invalid input: {message}", details=details)


class DimensionMismatchError(StatisticsError):
    """쌍으로 전달된 데이터셋의 길이가 다를 때 발생하는 예외"""

    def __init__(self, x_length: int, y_length: int):
        self.x_length = x_length
        self.y_length = y_length
        super().__init__(
            message=f"Datasets must have the same length (got {x_length} and {y_length})",
            details={"x_length": x_length, "y_length": y_length}
        )


class InsufficientDataError(StatisticsError):
    """분석에 필요한 최소 데이터 포인트보다 적을 때 발생하는 예외"""

    def __init__(self, required: int, received: int, analysis: str = "trend analysis"):
        self.required = required
        self.received = received
        super().__init__(
            message=f"At least {required} data points required for {analysis}, got {received}",
            details={"required": required, "received": received, "analysis": analysis}
        )
