from sqlalchemy import Column, Integer, ForeignKey, Uuid
from app.database import Base


class Rating(Base):
    __tablename__ = "ratings"

    # One rating per user per movie
    user_id = Column("userid", Uuid, primary_key=True)
    movie_id = Column(
        "movieid",
        Uuid,
        ForeignKey("movies.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    rating = Column(Integer, nullable=False)  # 1-5 stars

    def __repr__(self):
        return f"<Rating(user_id={self.user_id}, movie_id={self.movie_id}, rating={self.rating})>"
