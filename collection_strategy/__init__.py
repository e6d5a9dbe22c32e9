# ==============================================
# Collection Strategy Engine
# ==============================================
#
# Package Structure (4 Topics + Orchestrator):
#
# collection_strategy/
# ├── normalization/       # Topic 1: Clean raw debt records
# ├── classification/      # Topic 2: Policy table + strategy classifier
# ├── reporting/           # Topic 3: Counts, sums, rankings, alerts
# ├── storage/             # Topic 4: Sources and sinks (MySQL / MongoDB / HTTP)
# ├── persistence/         # Run reports kept for audit
# ├── config.py            # Configuration management
# ├── errors.py            # Exception hierarchy
# ├── strategy_pipeline.py # Core run: source -> classify -> sorted sink write
# ├── pipeline.py          # Config-driven facade around the core run
# └── cli.py               # Command line entry point
#
# ==============================================

__version__ = "1.0.0"
