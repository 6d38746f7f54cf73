"""
modules/errors.py
-----------------
Failure taxonomy for the enrichment engine.

Raised inside the tool layer; caught at the tool entry points and in the
pipeline, where each one degrades a single field instead of aborting:

  ServiceUnavailableError     missing credentials / service disabled
                              → whole step for that service skipped
  NotFoundError               zero geocode / search results
                              → dependent field left absent
  QuotaExceededError          treated exactly like NotFoundError
  UpstreamError               timeout, non-2xx, malformed body
  MalformedUpstreamInputError activity without location, day without activities
                              → that activity / day skipped for the step
"""

from __future__ import annotations


class EnrichmentError(Exception):
    """Base class for every error the enrichment engine raises internally."""


class ServiceUnavailableError(EnrichmentError):
    pass


class NotFoundError(EnrichmentError):
    pass


class QuotaExceededError(NotFoundError):
    pass


class UpstreamError(EnrichmentError):
    pass


class MalformedUpstreamInputError(EnrichmentError):
    pass
