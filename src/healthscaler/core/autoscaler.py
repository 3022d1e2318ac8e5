#!/usr/bin/env python3
"""
Autoscale decision engine: a bounded replica counter driven by sampled load

The counter moves by one step per tick. Load above the scale-up threshold adds
a replica, load below the scale-down threshold removes one, and load inside the
band between them leaves the counter alone so a value hovering around a single
threshold cannot flip the decision on every tick.
"""

import logging
import math
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from healthscaler.config.settings import AutoscalerSettings
from healthscaler.models.health import DecisionResult, ScalingAction
from . import metrics as gauges
from .metrics import MetricsSink, NullMetricsSink
from .sampler import LoadSampler

logger = logging.getLogger(__name__)

MIN_REPLICAS = 2
MAX_REPLICAS = 10
INITIAL_REPLICAS = 3


@dataclass(frozen=True)
class ScalingPolicy:
    """Hysteresis thresholds, in percent"""
    scale_up_threshold: float = 75.0
    scale_down_threshold: float = 35.0
    step: int = 1

    def __post_init__(self):
        if not 0 <= self.scale_down_threshold < self.scale_up_threshold <= 100:
            raise ValueError(
                f"Invalid hysteresis band [{self.scale_down_threshold}, {self.scale_up_threshold}]"
            )
        if self.step < 1:
            raise ValueError("step must be >= 1")


def decide(load: float, current: int, min_replicas: int, max_replicas: int,
           policy: ScalingPolicy = ScalingPolicy()) -> Tuple[ScalingAction, int]:
    """
    Pure transition function of the replica counter

    Args:
        load: Sampled load in percent
        current: Replica count before the tick
        min_replicas: Lower bound
        max_replicas: Upper bound
        policy: Hysteresis thresholds

    Returns:
        (action, new replica count)
    """
    if load > policy.scale_up_threshold and current < max_replicas:
        return ScalingAction.SCALE_UP, min(current + policy.step, max_replicas)
    if load < policy.scale_down_threshold and current > min_replicas:
        return ScalingAction.SCALE_DOWN, max(current - policy.step, min_replicas)
    return ScalingAction.NO_OP, current


class AutoscalerState:
    """Replica counter and the lock that protects it"""

    def __init__(self, min_replicas: int = MIN_REPLICAS, max_replicas: int = MAX_REPLICAS,
                 initial_replicas: int = INITIAL_REPLICAS):
        if min_replicas > max_replicas:
            raise ValueError("min_replicas must be <= max_replicas")
        if not min_replicas <= initial_replicas <= max_replicas:
            raise ValueError(
                f"initial_replicas {initial_replicas} outside [{min_replicas}, {max_replicas}]"
            )
        self.min_replicas = min_replicas
        self.max_replicas = max_replicas
        self._current_replicas = initial_replicas
        self.lock = threading.Lock()

    @property
    def current_replicas(self) -> int:
        with self.lock:
            return self._current_replicas

    def _set(self, value: int):
        # Caller holds self.lock
        if not self.min_replicas <= value <= self.max_replicas:
            raise ValueError(f"Replica count {value} outside [{self.min_replicas}, {self.max_replicas}]")
        self._current_replicas = value


class AutoscaleDecisionEngine:
    """Applies the hysteresis policy to the replica counter once per tick"""

    def __init__(self, state: AutoscalerState, sink: MetricsSink = None,
                 policy: ScalingPolicy = None):
        """
        Args:
            state: Replica counter owned by this engine
            sink: Receives the sampled load and desired replica gauges
            policy: Hysteresis thresholds (defaults to 35/75)
        """
        self.state = state
        self.sink = sink or NullMetricsSink()
        self.policy = policy or ScalingPolicy()
        self.last_decision: Optional[DecisionResult] = None
        self.tick_count = 0

    @classmethod
    def from_settings(cls, settings: AutoscalerSettings, sink: MetricsSink = None) -> "AutoscaleDecisionEngine":
        state = AutoscalerState(
            min_replicas=settings.min_replicas,
            max_replicas=settings.max_replicas,
            initial_replicas=settings.initial_replicas
        )
        policy = ScalingPolicy(
            scale_up_threshold=settings.scale_up_threshold,
            scale_down_threshold=settings.scale_down_threshold
        )
        return cls(state, sink=sink, policy=policy)

    def tick(self, sampler: LoadSampler) -> DecisionResult:
        """
        Sample load and apply one transition under the state lock

        A sampler that raises or returns a value outside [0, 100] turns the
        tick into a no-op; this method never raises because of the sampler.
        """
        with self.state.lock:
            previous = self.state._current_replicas
            load = self._sample(sampler)

            if load is None:
                action, current = ScalingAction.NO_OP, previous
                reason = "load sample unavailable"
            else:
                action, current = decide(
                    load, previous, self.state.min_replicas, self.state.max_replicas, self.policy
                )
                self.state._set(current)
                reason = self._reason(action, load, previous)

            result = DecisionResult(
                action=action,
                load=load,
                previous_replicas=previous,
                current_replicas=current,
                reason=reason
            )
            self.last_decision = result
            self.tick_count += 1
            self._publish(result)

        if action == ScalingAction.SCALE_UP:
            logger.info(f"Simulated scale-up → {current} replicas (CPU {load:.1f}%)")
        elif action == ScalingAction.SCALE_DOWN:
            logger.info(f"Simulated scale-down → {current} replicas (CPU {load:.1f}%)")
        else:
            logger.debug(f"No scaling: {reason} ({current} replicas)")

        return result

    def _sample(self, sampler: LoadSampler) -> Optional[float]:
        try:
            load = float(sampler.sample())
        except Exception as e:
            logger.warning(f"Load sampler failed, skipping decision: {e}")
            return None
        if math.isnan(load) or not 0 <= load <= 100:
            logger.warning(f"Load sample {load} outside [0, 100], skipping decision")
            return None
        return load

    def _reason(self, action: ScalingAction, load: float, previous: int) -> str:
        up = self.policy.scale_up_threshold
        down = self.policy.scale_down_threshold
        if action == ScalingAction.SCALE_UP:
            return f"load {load:.1f}% > {up:g}%"
        if action == ScalingAction.SCALE_DOWN:
            return f"load {load:.1f}% < {down:g}%"
        if load > up:
            return f"load {load:.1f}% > {up:g}% but already at max_replicas ({previous})"
        if load < down:
            return f"load {load:.1f}% < {down:g}% but already at min_replicas ({previous})"
        return f"load {load:.1f}% within [{down:g}%, {up:g}%]"

    def _publish(self, result: DecisionResult):
        try:
            if result.load is not None:
                self.sink.set_gauge(gauges.CPU_UTILIZATION, result.load)
            self.sink.set_gauge(gauges.DESIRED_REPLICAS, result.current_replicas)
            self.sink.record_event(gauges.SCALING_DECISIONS, result.action.value)
        except Exception as e:
            logger.warning(f"Failed to publish scaling metrics: {e}")

    def get_status(self) -> Dict[str, Any]:
        """Current counter, bounds and last decision"""
        return {
            "current_replicas": self.state.current_replicas,
            "min_replicas": self.state.min_replicas,
            "max_replicas": self.state.max_replicas,
            "scale_up_threshold": self.policy.scale_up_threshold,
            "scale_down_threshold": self.policy.scale_down_threshold,
            "ticks": self.tick_count,
            "last_decision": self.last_decision.model_dump(mode="json") if self.last_decision else None
        }
