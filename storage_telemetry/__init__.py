"""Storage load and SMART health telemetry service."""
