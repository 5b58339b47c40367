"""
Read-only access to the collections the analytics engine aggregates.

Collections follow the naming of the Node services that own them
(skills, gamifications, roadmaps, tasks, quizzes, careers, users); users and
careers are referenced by ObjectId.
"""
import logging
from datetime import date, datetime
from functools import wraps
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo.errors import PyMongoError

from utils.db import get_db, to_object_id
from utils.error_handler import DatabaseError

logger = logging.getLogger(__name__)


def _store_call(f):
    """Turn driver and connection failures into DatabaseError."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (PyMongoError, RuntimeError) as e:
            logger.error(f"Analytics store call {f.__name__} failed: {e}")
            raise DatabaseError() from e
    return wrapper


def _as_datetime(value):
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return value


class AnalyticsStore:
    def __init__(self, db=None):
        self._db = db

    @property
    def db(self):
        if self._db is None:
            self._db = get_db()
        return self._db

    @_store_call
    def get_skill_records(self, user_id) -> List[Dict[str, Any]]:
        return list(self.db['skills'].find({'user': to_object_id(user_id)}))

    @_store_call
    def get_skill_record(self, user_id, career: Optional[str] = None) -> Optional[Dict[str, Any]]:
        query: Dict[str, Any] = {'user': to_object_id(user_id)}
        if career:
            query['career'] = career
        return self.db['skills'].find_one(query)

    @_store_call
    def get_gamification(self, user_id) -> Optional[Dict[str, Any]]:
        return self.db['gamifications'].find_one({'user': to_object_id(user_id)})

    @_store_call
    def get_user(self, user_id) -> Optional[Dict[str, Any]]:
        return self.db['users'].find_one(
            {'_id': to_object_id(user_id)},
            {'name': 1, 'careerInterests': 1},
        )

    @_store_call
    def get_career_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        if not name:
            return None
        return self.db['careers'].find_one({'name': name})

    @_store_call
    def get_roadmap(self, user_id, career_id=None) -> Optional[Dict[str, Any]]:
        """
        First roadmap of the user, optionally for one career.

        ``career_id`` may be a career ObjectId or a career name. The career
        name is joined onto the result as ``careerName``.
        """
        query: Dict[str, Any] = {'user': to_object_id(user_id)}

        if career_id:
            if isinstance(career_id, ObjectId) or ObjectId.is_valid(str(career_id)):
                query['career'] = to_object_id(str(career_id))
            else:
                career = self.db['careers'].find_one({'name': career_id}, {'_id': 1})
                if not career:
                    return None
                query['career'] = career['_id']

        roadmap = self.db['roadmaps'].find_one(query)
        if not roadmap:
            return None

        career = self.db['careers'].find_one({'_id': roadmap.get('career')}, {'name': 1})
        roadmap['careerName'] = career.get('name') if career else None
        return roadmap

    @_store_call
    def count_tasks(self, user_id, completed: Optional[bool] = None) -> int:
        query: Dict[str, Any] = {'user': to_object_id(user_id)}
        if completed is True:
            query['completedAt'] = {'$ne': None}
        elif completed is False:
            query['completedAt'] = None
        return self.db['tasks'].count_documents(query)

    @_store_call
    def list_tasks(self, user_id, completed_since=None) -> List[Dict[str, Any]]:
        """Completed tasks, optionally only those completed on or after ``completed_since``."""
        completed_filter: Dict[str, Any] = {'$ne': None}
        if completed_since is not None:
            completed_filter = {'$gte': _as_datetime(completed_since)}
        query = {'user': to_object_id(user_id), 'completedAt': completed_filter}
        return list(self.db['tasks'].find(query, {'completedAt': 1, 'roadmap': 1}))

    @_store_call
    def list_submitted_quizzes(self, user_id, updated_since=None) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {'user': to_object_id(user_id), 'status': 'submitted'}
        if updated_since is not None:
            query['updatedAt'] = {'$gte': _as_datetime(updated_since)}
        return list(self.db['quizzes'].find(
            query,
            {'status': 1, 'accuracy': 1, 'passed': 1, 'updatedAt': 1},
        ))
