from prometheus_client import CollectorRegistry

# Dedicated registry so the app's /metrics only exposes pg-human series.
REGISTRY = CollectorRegistry()
