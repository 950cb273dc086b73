from fastapi import APIRouter, Depends

from storefront.core.security import get_current_user
from storefront.deps import get_contact_store
from storefront.repositories.users import ContactStore
from storefront.schemas.user import ContactIn, UserProfile

router = APIRouter(prefix="/users", tags=["Users"])
contact_router = APIRouter(prefix="/contact", tags=["Contact"])


@router.get("/me", response_model=UserProfile)
def get_my_profile(current_user: dict = Depends(get_current_user)):
    """
    Get the profile of the currently authenticated user.
    """
    # current_user is retrieved from Firestore in the security dependency
    return current_user


@contact_router.post("")
def submit_contact_form(body: ContactIn, contacts: ContactStore = Depends(get_contact_store)):
    contacts.add(body.model_dump())
    return {"message": "Message sent successfully."}
