"""
Statistics Engine

Runs the core statistics functions over a set of named metric series
(views, likes, comments, engagement, trending, ...) and bundles the results
the way the analytics dashboard consumes them.
"""

import logging
from typing import Dict, List, Any, Optional, Mapping, Sequence, Tuple, Union
import pandas as pd
import numpy as np

from ..config import get_default_config, load_config_from_env
from ..exceptions import InvalidInputError, StatisticsError
from ..models.statistics import (
    MetricSetAnalysis,
    DescriptiveMetrics,
    CorrelationResult,
    TrendResult,
)
from ..utils.statistical_analysis import (
    calculate_metrics,
    calculate_correlation,
    analyze_trend,
    calculate_growth_rate,
    detect_anomalies,
    to_time_series,
)

logger = logging.getLogger(__name__)

MetricInput = Union[pd.DataFrame, Mapping[str, Sequence[float]]]


class StatisticsEngine:
    """Batch statistics over named metric series"""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the statistics engine

        Args:
            config: Overrides merged on top of the default configuration
        """
        self.config = {**get_default_config(), **(config or {})}
        logger.info("StatisticsEngine initialized")

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "StatisticsEngine":
        """Build an engine from TREND_STATS_* environment variables"""
        return cls(config=load_config_from_env(dotenv_path))

    def analyze_metrics(self, metric_series: MetricInput) -> MetricSetAnalysis:
        """
        Analyze every metric series and the configured relations between them.

        Args:
            metric_series: DataFrame with one numeric column per metric, or a
                mapping of metric name to values. Series of different lengths
                are aligned by position.

        Returns:
            MetricSetAnalysis with descriptive metrics, correlations, trends,
            growth rates and anomaly row positions
        """
        frame, skipped = self._build_frame(metric_series)
        logger.info(f"Analyzing {len(frame.columns)} metric series")

        metrics: Dict[str, DescriptiveMetrics] = {}
        series: Dict[str, pd.Series] = {}
        min_sample_size = max(int(self.config['min_sample_size']), 1)

        for name in frame.columns:
            values = frame[name].dropna()
            if len(values) < min_sample_size:
                logger.warning(f"Metric '{name}' skipped: {len(values)} values < {min_sample_size}")
                skipped.append(name)
                continue
            try:
                metrics[name] = calculate_metrics(values.to_numpy())
            except StatisticsError as e:
                logger.error(f"Error analyzing metric '{name}': {e.message}")
                skipped.append(name)
                continue
            series[name] = values

        correlations = self._analyze_correlations(frame, series)
        trends = self._analyze_trends(series)

        growth: Dict[str, float] = {}
        for name in self.config['growth_metrics']:
            if name in series:
                rate = self.analyze_growth(series[name].to_numpy())
                if rate is not None:
                    growth[name] = rate

        anomalies: Dict[str, List[int]] = {}
        for name in self.config['anomaly_metrics']:
            if name not in series:
                continue
            positions = detect_anomalies(series[name].to_numpy(), self.config['anomaly_threshold'])
            # positions of the NaN-free series -> row positions of the input
            anomalies[name] = frame.index.get_indexer(series[name].index[positions]).tolist()

        logger.info(
            f"Metric analysis complete: {len(metrics)} metrics, {len(correlations)} correlations, "
            f"{len(trends)} trends, {len(skipped)} skipped"
        )

        return MetricSetAnalysis(
            metrics=metrics,
            correlations=correlations,
            trends=trends,
            growth=growth,
            anomalies=anomalies,
            skipped=skipped
        )

    def analyze_growth(self, values: Sequence[float]) -> Optional[float]:
        """Growth rate from the first to the last value, None for fewer than 2 values"""
        values = list(values)
        if len(values) < 2:
            return None
        return calculate_growth_rate(float(values[-1]), float(values[0]))

    def _analyze_correlations(self, frame: pd.DataFrame,
                              series: Dict[str, pd.Series]) -> Dict[str, CorrelationResult]:
        correlations = {}
        for first, second in self.config['correlation_pairs']:
            if first not in series or second not in series:
                continue
            # keep only rows where both metrics are present
            pair = frame[[first, second]].dropna()
            if pair.empty:
                continue
            key = self._pair_key(first, second)
            try:
                correlations[key] = calculate_correlation(pair[first].to_numpy(), pair[second].to_numpy())
            except StatisticsError as e:
                logger.error(f"Error analyzing correlation '{key}': {e.message}")
        return correlations

    def _analyze_trends(self, series: Dict[str, pd.Series]) -> Dict[str, TrendResult]:
        trends = {}
        for name in self.config['trend_metrics']:
            if name not in series or len(series[name]) < 2:
                continue
            try:
                trends[name] = analyze_trend(to_time_series(series[name].to_numpy()))
            except StatisticsError as e:
                logger.error(f"Error analyzing trend for '{name}': {e.message}")
        return trends

    def _build_frame(self, metric_series: MetricInput) -> Tuple[pd.DataFrame, List[str]]:
        """Normalize the input into a float DataFrame, returning non-numeric metric names separately"""
        skipped: List[str] = []

        if isinstance(metric_series, pd.DataFrame):
            numeric = metric_series.select_dtypes(include=[np.number])
            skipped.extend(str(name) for name in metric_series.columns if name not in numeric.columns)
            frame = numeric.astype(float).reset_index(drop=True)
            frame.columns = [str(name) for name in frame.columns]
            return frame, skipped

        if not isinstance(metric_series, Mapping):
            raise InvalidInputError(
                "Metric series must be a DataFrame or a mapping of name to values",
                details={"type": type(metric_series).__name__}
            )

        columns = {}
        for name, values in metric_series.items():
            try:
                columns[str(name)] = pd.Series(list(values), dtype=float)
            except (TypeError, ValueError) as e:
                logger.error(f"Metric '{name}' is not numeric: {e}")
                skipped.append(str(name))

        return pd.DataFrame(columns), skipped

    @staticmethod
    def _pair_key(first: str, second: str) -> str:
        return f"{first}_{second}"
