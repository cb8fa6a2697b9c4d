from nearpay.sync.engine import MergeResult, SyncEngine, SyncReport

__all__ = ["MergeResult", "SyncEngine", "SyncReport"]
