from autostart_router.config.store import ConfigStore, ConfigStoreError, RouterConfig

__all__ = ["ConfigStore", "ConfigStoreError", "RouterConfig"]
