# services/fallback.py
"""
Two-tier resolution: ask the primary source, and on failure the fallback.

The policy is fixed: no retries, and any error from the primary sends the
call to the fallback. The one exception is a CertChainError other than
TransportError (a validation failure, a not-found answer, a remote write
that succeeded with an unusable body), which is an outcome rather than a
failure and propagates untouched.
"""
import logging
from typing import Callable, Generic, TypeVar

from certchain.errors import CertChainError, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TwoTierResolver(Generic[T]):
    def __init__(self, name: str, primary: Callable[[], T], fallback: Callable[[], T]):
        self.name = name
        self.primary = primary
        self.fallback = fallback

    def resolve(self) -> T:
        try:
            return self.primary()
        except TransportError as e:
            logger.warning(f"{self.name}: API request failed, using local fallback: {e}")
        except CertChainError:
            raise
        except Exception as e:
            logger.warning(f"{self.name}: API request raised {type(e).__name__}, using local fallback: {e}")
        return self.fallback()


def resolve(name: str, primary: Callable[[], T], fallback: Callable[[], T]) -> T:
    return TwoTierResolver(name, primary, fallback).resolve()
