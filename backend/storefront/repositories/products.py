# storefront/repositories/products.py
"""
Catalog Lookup backed by the products/{id} collection.

Soft-deleted products (is_deleted=True) are invisible to every read here, so a
cart line pointing at one is treated the same as a line pointing at a hard
deleted document.
"""
from typing import Any, Dict, Iterable, List, Optional

from google.cloud.firestore_v1.base_query import FieldFilter

from storefront.config import settings
from storefront.model.product import Product
from storefront.repositories.common import store_errors, utcnow


def _visible(snap) -> bool:
    if not snap.exists:
        return False
    return not (snap.to_dict() or {}).get("is_deleted", False)


class ProductCatalog:

    def __init__(self, db):
        self.db = db
        self._col = settings.collection("products")

    def get_by_id(self, product_id: str) -> Optional[Product]:
        with store_errors("product read"):
            snap = self.db.collection(self._col).document(product_id).get()
        if not _visible(snap):
            return None
        return Product.from_document(snap.id, snap.to_dict() or {})

    def get_many(self, product_ids: Iterable[str]) -> Dict[str, Product]:
        """Batch lookup; unknown ids are simply absent from the result."""
        uniq = list(dict.fromkeys(pid for pid in product_ids if pid))
        if not uniq:
            return {}
        refs = [self.db.collection(self._col).document(pid) for pid in uniq]
        with store_errors("product batch read"):
            snaps = list(self.db.get_all(refs))
        return {
            s.id: Product.from_document(s.id, s.to_dict() or {})
            for s in snaps
            if _visible(s)
        }

    def list(self, category: Optional[str] = None) -> List[Product]:
        q = self.db.collection(self._col).where(filter=FieldFilter("is_deleted", "==", False))
        if category:
            q = q.where(filter=FieldFilter("category", "==", category))
        with store_errors("product list"):
            docs = list(q.stream())
        products = [Product.from_document(d.id, d.to_dict() or {}) for d in docs]
        # newest first; documents without created_at go last
        products.sort(key=lambda p: p.created_at.timestamp() if p.created_at else 0.0, reverse=True)
        return products

    def create(self, data: Dict[str, Any]) -> Product:
        ref = self.db.collection(self._col).document()
        doc = dict(data)
        doc.update(is_deleted=False, created_at=utcnow())
        with store_errors("product create"):
            ref.set(doc)
        return Product.from_document(ref.id, doc)

    def update(self, product_id: str, fields: Dict[str, Any]) -> Optional[Product]:
        ref = self.db.collection(self._col).document(product_id)
        with store_errors("product update"):
            snap = ref.get()
            if not _visible(snap):
                return None
            if fields:
                ref.update(dict(fields, updated_at=utcnow()))
            snap = ref.get()
        return Product.from_document(snap.id, snap.to_dict() or {})

    def delete(self, product_id: str, hard: bool = False) -> bool:
        """
        hard=True removes the document; otherwise it is flagged is_deleted.
        Cart lines that reference it are dropped the next time the cart is fetched.
        """
        ref = self.db.collection(self._col).document(product_id)
        with store_errors("product delete"):
            snap = ref.get()
            if not _visible(snap):
                return False
            if hard:
                ref.delete()
            else:
                ref.update({"is_deleted": True, "updated_at": utcnow()})
        return True
