# storedb/services/auth.py
import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storedb.models.person import Person, ROLE_USER
from storedb.schemas.person import PersonOut, PersonRegister
from storedb.services.security import LoginSession
from storedb.utils.audit import write_log
from storedb.utils.hashing import get_password_hash, verify_password
from storedb.utils.validation import validate

logger = logging.getLogger(__name__)


def email_exists(db: Session, email: str) -> bool:
    return db.query(func.count(Person.id)).filter(func.lower(Person.email) == email.strip().lower()).scalar() > 0


# Register a new USER account; False when the email is already taken
def register(db: Session, first_name, last_name, email, phone, password) -> bool:
    data = validate(PersonRegister, first_name=first_name, last_name=last_name,
                    email=email, phone=phone, password=password)

    if email_exists(db, data.email):
        logger.warning("Registration rejected, email already exists: %s", data.email)
        return False

    password_hash, salt = get_password_hash(data.password)
    person = Person(
        first_name=data.first_name, last_name=data.last_name, email=data.email,
        phone=data.phone, password_hash=password_hash, salt=salt, role=ROLE_USER,
    )
    db.add(person)
    try:
        db.commit()
    except IntegrityError:
        # Another process registered the same email in the meantime
        db.rollback()
        logger.warning("Registration rejected, email already exists: %s", data.email)
        return False

    db.refresh(person)
    write_log(person.id, "Register", f"New user registered with email {person.email}")
    return True


# Authenticate and bind the person to the session
def login(db: Session, session: LoginSession, email: str, password: str) -> bool:
    session.logout()
    email = (email or "").strip().lower()
    person = db.query(Person).filter(func.lower(Person.email) == email).first()
    if person is None:
        logger.warning("Failed login attempt for %s", email)
        return False

    if not person.password_hash:
        # First login of a client created without a password
        if not password:
            logger.warning("Failed login attempt for %s", email)
            return False
        person.password_hash, person.salt = get_password_hash(password)
        db.commit()
        db.refresh(person)
        logger.info("Password provisioned on first login for user ID: %s", person.id)
    elif not verify_password(password, person.password_hash, person.salt):
        logger.warning("Failed login attempt for %s", email)
        return False

    session.login(PersonOut.model_validate(person))
    write_log(person.id, "Login", "User logged in")
    return True


def logout(session: LoginSession) -> None:
    if session.is_authenticated:
        write_log(session.user_id, "Logout", "User logged out")
    session.logout()
