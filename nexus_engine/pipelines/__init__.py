"""
pipelines/ — Staged analysis

Modules:
    stages.py        - Uninitialized / Diagnosed / Simulated / Architected states
    partners.py      - Pluggable partner sourcing for the architect stage
    orchestrator.py  - PipelineOrchestrator (diagnose → simulate → architect)
"""
