from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint
from .session import Base


class UserTraining(Base):
    __tablename__ = 'user_training'
    __table_args__ = (UniqueConstraint('user_id', 'module_id', name='uq_user_training_module'),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=False)
    module_id = Column(Integer, index=True, nullable=False)
    status = Column(String, nullable=False, default='not_started')  # not_started | in_progress | completed
    progress = Column(Integer, nullable=False, default=0)
    completed_at = Column(DateTime(timezone=True), nullable=True)
