from .health_cache import SMART_CACHE_TTL_SECONDS, SmartHealthCache
from .smart_prober import SmartProber

__all__ = ["SMART_CACHE_TTL_SECONDS", "SmartHealthCache", "SmartProber"]
