#!/usr/bin/env python3
"""
Scaling simulator service: ticks the decision engine with a load sampler
"""

import logging
from typing import Any, Dict

from healthscaler.config.settings import AutoscalerSettings
from healthscaler.core.autoscaler import AutoscaleDecisionEngine
from healthscaler.core.metrics import MetricsSink
from healthscaler.core.sampler import LoadSampler, RandomLoadSampler
from healthscaler.models.health import DecisionResult

logger = logging.getLogger(__name__)


class ScalingSimulator:
    """Pairs a decision engine with the sampler it is ticked with"""

    def __init__(self, engine: AutoscaleDecisionEngine, sampler: LoadSampler, interval: float = 20.0):
        self.engine = engine
        self.sampler = sampler
        self.interval = interval

    @classmethod
    def from_settings(cls, settings: AutoscalerSettings, sink: MetricsSink = None) -> "ScalingSimulator":
        engine = AutoscaleDecisionEngine.from_settings(settings, sink=sink)
        sampler = RandomLoadSampler(settings.load_min, settings.load_max, seed=settings.seed)
        logger.info(
            f"Simulating autoscaler: replicas {settings.initial_replicas} "
            f"in [{settings.min_replicas}, {settings.max_replicas}], "
            f"band [{settings.scale_down_threshold:g}%, {settings.scale_up_threshold:g}%]"
        )
        return cls(engine, sampler, interval=settings.interval)

    def run_cycle(self) -> DecisionResult:
        return self.engine.tick(self.sampler)

    def get_status(self) -> Dict[str, Any]:
        status = self.engine.get_status()
        status["interval"] = self.interval
        return status
