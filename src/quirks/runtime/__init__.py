"""Runtime services: telemetry and editor configuration."""
