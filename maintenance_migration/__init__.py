"""
Maintenance Plan Migration Toolkit

Copies maintenance-plan records between two instances of a hosted
PostgREST/Supabase backend, one equipment model at a time.

Supports:
- Model resolution by exact name in both stores
- Interval matching by interval value
- Task migration with duplicate detection and batched inserts
- Part migration keyed on the resolved destination tasks
- Checkpointed, resumable runs with CSV reporting
"""

__version__ = "0.1.0"
