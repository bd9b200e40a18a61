from .store import LinkFilter, UserLink, UserLinkStore, UserLinkStoreError, UserLinkStoreFactory

__all__ = ["LinkFilter", "UserLink", "UserLinkStore", "UserLinkStoreError", "UserLinkStoreFactory"]
