from .cache import ttl_cache
from .config import settings
from .session import GameController, SessionStore
from .stats import load_failed_stats
from .vocabulary import VocabularyManager

vocab_manager = VocabularyManager(f"{settings.VOCAB_DIR}")
session_store = SessionStore()
cached_failed_stats = ttl_cache(settings.FAILED_STATS_TTL_SECONDS)(load_failed_stats)
controller = GameController(vocab_manager, failed_stats_loader=cached_failed_stats)
