class PatchAlignError(Exception):
    """Base application error."""


class ChangedFilesError(PatchAlignError):
    def __init__(self, source: str, reason: str):
        super().__init__(f"Invalid changed-files listing {source}: {reason}")
        self.source = source
        self.reason = reason
