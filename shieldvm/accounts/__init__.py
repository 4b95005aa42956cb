from shieldvm.accounts.keys import PrivateKey, ViewKey, derive_view_key

__all__ = ["PrivateKey", "ViewKey", "derive_view_key"]
