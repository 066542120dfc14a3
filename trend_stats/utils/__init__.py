"""
통계 계산 유틸리티
"""
