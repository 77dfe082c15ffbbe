"""
Core job engine.

The `JobManager` is the entry point for the front end. It admits jobs through
the `AdmissionGate` and hands them to the `JobRunner`, which drives each job's
fetch and packaging pipeline.
"""
