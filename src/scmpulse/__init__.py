"""
scmpulse: checkout telemetry for build pipelines.

Sends a "checkout finished" event and a checkout counter to a telemetry
backend whenever a tracked build job completes its source checkout.
"""

__version__ = "0.1.0"
