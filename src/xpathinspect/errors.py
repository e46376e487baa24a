from __future__ import annotations


class InspectorError(Exception):
    pass


class NoCandidateFound(InspectorError):
    """The selected node has no path to the document root."""


class ProviderError(InspectorError):
    pass


class RequestInFlight(InspectorError):
    pass
