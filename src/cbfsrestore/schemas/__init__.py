from cbfsrestore.schemas.records import ArchiveRecord, OutcomeStatus, RestoreOutcome, RunSummary

__all__ = ["ArchiveRecord", "OutcomeStatus", "RestoreOutcome", "RunSummary"]
