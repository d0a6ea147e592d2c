"""Monitoring layer - probes, fallback evaluation and scheduling."""

from cscanary.monitor.evaluator import FallbackEvaluator
from cscanary.monitor.probes import HttpProbe, PingProbe, Probe, build_probe
from cscanary.monitor.scheduler import MonitoredProtocol, Scheduler

__all__ = [
    "FallbackEvaluator",
    "HttpProbe",
    "MonitoredProtocol",
    "PingProbe",
    "Probe",
    "Scheduler",
    "build_probe",
]
