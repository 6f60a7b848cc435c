"""Feature module registry and its loaders."""

from .modules import FeatureModule, ModuleRegistry

__all__ = ["FeatureModule", "ModuleRegistry"]
