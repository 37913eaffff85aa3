#!/usr/bin/env python3
# errors.py
"""
Exception hierarchy shared by the my2mo tools.

ConfigError aborts a whole run. Everything else describes one table or join
and is caught by the driver, which logs it and moves on to the next entry.
"""


class My2moError(Exception):
    """Base class. `entry` names the table/join, `stage` the step that failed."""

    stage = "config"

    def __init__(self, message, entry=None, stage=None):
        super().__init__(message)
        self.entry = entry
        if stage is not None:
            self.stage = stage


# ---------- Fatal: abort before (or instead of) importing ----------
class ConfigError(My2moError):
    pass


class MissingManifest(ConfigError):
    pass


class NoTablesDeclared(ConfigError):
    pass


class MalformedJoinManifest(ConfigError):
    pass


class JoinRequiresTabDelimited(ConfigError):
    pass


# ---------- Per-entry: logged, batch continues ----------
class SpecError(My2moError):
    stage = "spec"


class EmptyFieldList(SpecError):
    stage = "fields"


class UnreadableFieldList(SpecError):
    stage = "fields"


class UnknownJoinField(SpecError):
    pass


class UnknownSortField(SpecError):
    pass


class ImportIOError(My2moError):
    stage = "read"


class MissingDataFile(ImportIOError):
    pass


class MissingFieldFile(ImportIOError):
    stage = "fields"


class PipelineError(My2moError):
    stage = "load"


class JoinFailed(PipelineError):
    def __init__(self, message, entry=None, stage=None, cause=None):
        super().__init__(message, entry=entry, stage=stage)
        self.cause = cause


class ImportFailed(PipelineError):
    def __init__(self, message, entry=None, stage=None, exit_status=None):
        super().__init__(message, entry=entry, stage=stage)
        self.exit_status = exit_status
