"""Run-scoped sync helpers for the Buddi ETL.

Modules:
    pagination — Page-walking state machine for the locations endpoint
    dedup      — Latest-observation map keyed by feature id
"""
