from sqlalchemy import Column, Integer, String, ForeignKey, Uuid, Index
from app.database import Base


class Movie(Base):
    __tablename__ = "movies"

    id = Column(Uuid, primary_key=True)  # Assigned by the caller, never generated here
    slug = Column(String, nullable=False)
    title = Column(String, nullable=False)
    year_of_release = Column("yearofrelease", Integer, nullable=False)

    __table_args__ = (
        Index("movies_slug_idx", "slug", unique=True),
    )

    def __repr__(self):
        return f"<Movie(id={self.id}, slug={self.slug})>"


class Genre(Base):
    """One row per genre label attached to a movie"""
    __tablename__ = "genres"

    movie_id = Column("movieid", Uuid, ForeignKey("movies.id"), primary_key=True, index=True)
    name = Column(String, primary_key=True)

    def __repr__(self):
        return f"<Genre(movie_id={self.movie_id}, name={self.name})>"
