from datetime import datetime
from typing import List, Optional

from sqlalchemy import BigInteger, Integer, String, Text, Boolean, ForeignKey, DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# SQLite only autoincrements INTEGER primary keys
PK = BigInteger().with_variant(Integer, "sqlite")

class Base(DeclarativeBase): pass

class User(Base):
    __tablename__ = "users"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    username: Mapped[str] = mapped_column(String(100), unique=True)
    password: Mapped[str] = mapped_column(String(255), default="")
    role: Mapped[str] = mapped_column(String(40), default="student")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

class Quiz(Base):
    __tablename__ = "quizzes"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_by: Mapped[int | None] = mapped_column(PK, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    published: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    creator: Mapped[Optional["User"]] = relationship(lazy="joined")
    questions: Mapped[List["Question"]] = relationship(back_populates="quiz", cascade="all, delete-orphan",
                                                       order_by="Question.id")

class Question(Base):
    __tablename__ = "questions"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    quiz_id: Mapped[int] = mapped_column(PK, ForeignKey("quizzes.id", ondelete="CASCADE"))
    text: Mapped[str | None] = mapped_column(Text, nullable=True)
    qtype: Mapped[str] = mapped_column(String(10), default="single")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    quiz: Mapped["Quiz"] = relationship(back_populates="questions")
    options: Mapped[List["Option"]] = relationship(back_populates="question", cascade="all, delete-orphan",
                                                   order_by="Option.id")

class Option(Base):
    __tablename__ = "options"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    question_id: Mapped[int] = mapped_column(PK, ForeignKey("questions.id", ondelete="CASCADE"))
    text: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_correct: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    question: Mapped["Question"] = relationship(back_populates="options")

class Result(Base):
    __tablename__ = "results"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    quiz_id: Mapped[int | None] = mapped_column(PK, nullable=True)
    user_id: Mapped[int | None] = mapped_column(PK, nullable=True)
    score: Mapped[int] = mapped_column(Integer)
    total: Mapped[int | None] = mapped_column(Integer, nullable=True)
    taken_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
