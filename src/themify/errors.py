from __future__ import annotations


class ThemifyError(Exception):
    pass


class EmptyCandidatesError(ThemifyError, ValueError):
    pass


class UnsupportedImageError(ThemifyError, ValueError):
    pass


class ExtractionError(ThemifyError, RuntimeError):
    pass


class ImageDiscoveryError(ThemifyError):
    pass


class StylesheetError(ThemifyError):
    pass
