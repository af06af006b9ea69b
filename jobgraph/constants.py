"""Shared constants for jobgraph."""

DEFAULT_DEPTH_MULTIPLIER = 2
DEFAULT_LOGGER_BUILDER = "jobgraph.logger_builder.LoggerBuilder"
QUEUE_PREFIX = "jobgraph"

STATUS_PENDING = "Pending"
STATUS_RUNNING = "Running"
STATUS_FINISHED = "Finished"
STATUS_FAILED = "Failed"
