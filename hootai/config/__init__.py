from hootai.config.settings import settings

__all__ = ["settings"]
