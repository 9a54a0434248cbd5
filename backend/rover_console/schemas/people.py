from typing import Optional

from pydantic import BaseModel


class PersonCreate(BaseModel):
    name: str
    position: Optional[str] = None
    department: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    face_image: Optional[str] = None


class PersonUpdate(BaseModel):
    name: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    face_image: Optional[str] = None
