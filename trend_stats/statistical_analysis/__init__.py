"""
Statistical Analysis Module

This module contains the batch statistics engine.
"""

from .engine import StatisticsEngine

__all__ = ['StatisticsEngine']
