from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload
from typing import List, Optional
from app.db.models.user import User
from app.db.models.store import Store
from app.db.models.enums import UserRole

def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()

def get_user_by_login(db: Session, email_or_phone: str, role: UserRole) -> Optional[User]:
    return db.query(User).filter(
        or_(User.email == email_or_phone, User.phone == email_or_phone),
        User.role == role
    ).first()

def get_user_by_email_or_phone(db: Session, email: str, phone: str) -> Optional[User]:
    return db.query(User).filter(or_(User.email == email, User.phone == phone)).first()

def create_user(db: Session, email: str, phone: str, password_hash: str, role: UserRole = UserRole.CLIENT) -> User:
    db_user = User(email=email, phone=phone, password_hash=password_hash, role=role)
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user

def list_clients(db: Session, search: Optional[str] = None) -> List[User]:
    query = db.query(User).options(joinedload(User.store)).filter(User.role == UserRole.CLIENT)
    if search:
        pattern = f"%{search}%"
        query = query.outerjoin(Store).filter(or_(
            User.email.ilike(pattern),
            User.phone.like(pattern),
            Store.name.ilike(pattern),
        ))
    return query.order_by(User.created_at.desc()).all()

def update_user(db: Session, db_user: User, **fields) -> User:
    for field, value in fields.items():
        if value is not None:
            setattr(db_user, field, value)
    db.commit()
    db.refresh(db_user)
    return db_user

def delete_user(db: Session, user_id: str) -> bool:
    db_user = get_user(db, user_id)
    if not db_user:
        return False
    db.delete(db_user)
    db.commit()
    return True

def find_other_user(db: Session, user_id: str, email: Optional[str] = None, phone: Optional[str] = None) -> Optional[User]:
    """Another account already holding this email or phone."""
    conditions = []
    if email:
        conditions.append(User.email == email)
    if phone:
        conditions.append(User.phone == phone)
    if not conditions:
        return None
    return db.query(User).filter(or_(*conditions), User.id != user_id).first()
