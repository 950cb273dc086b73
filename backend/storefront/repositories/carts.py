# storefront/repositories/carts.py
"""
Cart Store: one document per user at carts/{owner_id}, always read and written
as a whole. No field-level updates and no version token; the last write wins.
"""
from typing import Any, Dict, Optional

from storefront.config import settings
from storefront.model.cart import Cart
from storefront.repositories.common import store_errors


class CartStore:

    def __init__(self, db):
        self.db = db
        self._col = settings.collection("carts")

    def get_by_owner(self, owner_id: str) -> Optional[Dict[str, Any]]:
        """
        Raw stored document, or None if the user has no cart yet.
        Lines are returned unvalidated so the engine can sanitize them.
        """
        with store_errors("cart read"):
            snap = self.db.collection(self._col).document(owner_id).get()
        if not snap.exists:
            return None
        return snap.to_dict() or {}

    def upsert(self, cart: Cart) -> Cart:
        """Full-document replace, creating the document if absent."""
        with store_errors("cart write"):
            self.db.collection(self._col).document(cart.owner_id).set(cart.to_document())
        return cart
