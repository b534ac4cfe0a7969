"""Template placeholder injection."""

from mailwright.injection.injector import InjectionResult, PlaceholderInjector
from mailwright.injection.values import build_placeholder_values

__all__ = ["InjectionResult", "PlaceholderInjector", "build_placeholder_values"]
