"""Reference Resource Providers."""

from .pandas_provider import PandasResourceProvider

__all__ = ["PandasResourceProvider"]
