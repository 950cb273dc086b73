# storefront/repositories/users.py
from typing import Any, Dict, Optional

from storefront.config import settings
from storefront.repositories.common import store_errors, utcnow


class UserStore:

    def __init__(self, db):
        self.db = db
        self._col = settings.collection("users")

    def get(self, uid: str) -> Optional[Dict[str, Any]]:
        with store_errors("user read"):
            snap = self.db.collection(self._col).document(uid).get()
        if not snap.exists:
            return None
        return dict(snap.to_dict() or {}, id=uid)

    def create(self, uid: str, profile: Dict[str, Any]) -> Dict[str, Any]:
        doc = dict(profile)
        doc.setdefault("created_at", utcnow())
        with store_errors("user create"):
            self.db.collection(self._col).document(uid).set(doc)
        return dict(doc, id=uid)


class ContactStore:

    def __init__(self, db):
        self.db = db
        self._col = settings.collection("contact_messages")

    def add(self, message: Dict[str, Any]) -> str:
        ref = self.db.collection(self._col).document()
        with store_errors("contact write"):
            ref.set(dict(message, created_at=utcnow()))
        return ref.id
