from sqlalchemy import BigInteger, Integer
from sqlalchemy.orm import DeclarativeBase

# SQLite는 INTEGER PRIMARY KEY 일 때만 rowid 자동증가
PK = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    pass
