from .settings import CoverageSettings, get_settings, load_settings, reload_settings

__all__ = ["CoverageSettings", "get_settings", "load_settings", "reload_settings"]
