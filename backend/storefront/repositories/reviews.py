# storefront/repositories/reviews.py
from typing import Any, Dict, List, Optional

from google.cloud.firestore_v1.base_query import FieldFilter

from storefront.config import settings
from storefront.repositories.common import doc_to_dict, store_errors, utcnow


class ReviewStore:

    def __init__(self, db):
        self.db = db
        self._col = settings.collection("reviews")

    def create(self, *, product_id: str, name: str, review: str, stars: int,
               user_id: Optional[str] = None) -> Dict[str, Any]:
        ref = self.db.collection(self._col).document()
        doc = {
            "product_id": product_id,
            "name": name,
            "review": review,
            "stars": int(stars),
            "user_id": user_id,
            "created_at": utcnow(),
        }
        with store_errors("review create"):
            ref.set(doc)
        return dict(doc, id=ref.id)

    def list_for_product(self, product_id: str) -> List[Dict[str, Any]]:
        """Oldest first, the order they were written."""
        q = self.db.collection(self._col).where(filter=FieldFilter("product_id", "==", product_id))
        with store_errors("review list"):
            rows = [doc_to_dict(d) for d in q.stream()]
        rows.sort(key=lambda r: r["created_at"].timestamp() if r.get("created_at") else 0.0)
        return rows
