from metriccatcher.reporting.base import ScheduledReporter
from metriccatcher.reporting.file import FileReporter
from metriccatcher.reporting.ganglia import GangliaReporter
from metriccatcher.reporting.graphite import GraphiteReporter

__all__ = [
    "FileReporter",
    "GangliaReporter",
    "GraphiteReporter",
    "ScheduledReporter",
]
