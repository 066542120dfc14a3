"""
통계 결과 모델
"""
