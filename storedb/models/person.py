# storedb/models/person.py
from sqlalchemy import Column, Integer, String
from storedb.database import Base

ROLE_ADMIN = "ADMIN"
ROLE_USER = "USER"

# A customer or staff account. Clients added by an admin start with an empty
# password and salt which are provisioned on their first login.
class Person(Base):
    __tablename__ = "Persons"

    id = Column("PersonID", Integer, primary_key=True, index=True)
    first_name = Column("FName", String(50), nullable=False)
    last_name = Column("LName", String(50), nullable=False)
    email = Column("Email", String(100), unique=True, nullable=False, index=True)
    phone = Column("Phone", String(20), nullable=False)

    password_hash = Column("password", String(255), nullable=False, default="")
    salt = Column("salt", String(64), nullable=False, default="")
    role = Column("role", String(10), nullable=False, default=ROLE_USER)

