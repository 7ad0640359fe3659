# noqa

from .base import BaseApiClient
from .coops import CoopsApi

__all__ = ["BaseApiClient", "CoopsApi"]
