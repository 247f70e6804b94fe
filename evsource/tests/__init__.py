"""
Test suite for the aggregate engine.

Focus areas:
- Applier purity and illegal folds
- Per-state command dispatch and effects
- Enforced replies and persist-then-reply ordering
- Replay determinism and recovery
- Hash chain integrity of the file log
"""
