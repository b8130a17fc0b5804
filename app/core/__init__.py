from .config import QPayConfig, settings

__all__ = ["QPayConfig", "settings"]
