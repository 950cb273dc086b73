# storefront/repositories/orders.py
from typing import Any, Dict, List, Optional

from google.cloud.firestore_v1.base_query import FieldFilter

from storefront.config import settings
from storefront.repositories.common import doc_to_dict, store_errors


class OrderStore:

    def __init__(self, db):
        self.db = db
        self._col = settings.collection("orders")

    def create(self, order_id: str, doc: Dict[str, Any]) -> Dict[str, Any]:
        with store_errors("order create"):
            self.db.collection(self._col).document(order_id).set(doc)
        return dict(doc, id=order_id)

    def get(self, order_id: str) -> Optional[Dict[str, Any]]:
        with store_errors("order read"):
            snap = self.db.collection(self._col).document(order_id).get()
        return doc_to_dict(snap) if snap.exists else None

    def list_for_user(self, uid: str) -> List[Dict[str, Any]]:
        q = self.db.collection(self._col).where(filter=FieldFilter("customer.id", "==", uid))
        with store_errors("order list"):
            rows = [doc_to_dict(d) for d in q.stream()]
        rows.sort(key=lambda r: r["created_at"].timestamp() if r.get("created_at") else 0.0, reverse=True)
        return rows

    def find_by_checkout(self, uid: str, checkout_id: str) -> Optional[Dict[str, Any]]:
        q = (
            self.db.collection(self._col)
            .where(filter=FieldFilter("customer.id", "==", uid))
            .where(filter=FieldFilter("checkout_id", "==", checkout_id))
            .limit(1)
        )
        with store_errors("order lookup"):
            docs = list(q.stream())
        return doc_to_dict(docs[0]) if docs else None
