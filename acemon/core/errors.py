"""
Error classes for clearer exception sources.
"""
from __future__ import annotations

class AcemonError(Exception):
    pass

class DataLoadError(AcemonError):
    def __init__(self, path: str, detail: str):
        super().__init__(f"Failed to load {path}: {detail}")
        self.path = path
        self.detail = detail

class ValidationError(AcemonError):
    pass

class RemoteConfigError(AcemonError):
    def __init__(self, url: str, detail: str):
        super().__init__(f"Remote config '{url}' unusable: {detail}")
        self.url = url
        self.detail = detail
