"""Pattern telemetry and live race metrics."""
