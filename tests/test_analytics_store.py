from datetime import date, datetime
from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from utils.analytics_store import AnalyticsStore
from utils.error_handler import DatabaseError

USER_ID = '65a1f0c2e4b0a1b2c3d4e5f6'
CAREER_ID = ObjectId('65a1f0c2e4b0a1b2c3d4e5aa')


@pytest.fixture
def db():
    collections = {}

    def collection_for(name):
        return collections.setdefault(name, MagicMock(name=name))

    database = MagicMock()
    database.__getitem__.side_effect = collection_for
    return database


def test_skill_records_query_by_object_id(db):
    db['skills'].find.return_value = [{'skills': []}]

    records = AnalyticsStore(db).get_skill_records(USER_ID)

    assert records == [{'skills': []}]
    db['skills'].find.assert_called_once_with({'user': ObjectId(USER_ID)})


def test_plain_string_ids_are_left_alone(db):
    db['gamifications'].find_one.return_value = None

    AnalyticsStore(db).get_gamification('seed-user-1')

    db['gamifications'].find_one.assert_called_once_with({'user': 'seed-user-1'})


def test_roadmap_joins_career_name(db):
    db['roadmaps'].find_one.return_value = {'career': CAREER_ID, 'totalDays': 90}
    db['careers'].find_one.return_value = {'_id': CAREER_ID, 'name': 'Data Scientist'}

    roadmap = AnalyticsStore(db).get_roadmap(USER_ID)

    assert roadmap['careerName'] == 'Data Scientist'
    db['roadmaps'].find_one.assert_called_once_with({'user': ObjectId(USER_ID)})


def test_roadmap_by_career_name(db):
    db['careers'].find_one.side_effect = [{'_id': CAREER_ID}, {'name': 'Data Scientist'}]
    db['roadmaps'].find_one.return_value = {'career': CAREER_ID}

    AnalyticsStore(db).get_roadmap(USER_ID, 'Data Scientist')

    db['roadmaps'].find_one.assert_called_once_with({'user': ObjectId(USER_ID), 'career': CAREER_ID})


def test_roadmap_by_unknown_career_name(db):
    db['careers'].find_one.return_value = None

    assert AnalyticsStore(db).get_roadmap(USER_ID, 'Astronaut') is None
    db['roadmaps'].find_one.assert_not_called()


def test_roadmap_by_career_object_id(db):
    db['roadmaps'].find_one.return_value = None

    assert AnalyticsStore(db).get_roadmap(USER_ID, str(CAREER_ID)) is None
    db['roadmaps'].find_one.assert_called_once_with({'user': ObjectId(USER_ID), 'career': CAREER_ID})


def test_count_tasks_filters(db):
    store = AnalyticsStore(db)
    db['tasks'].count_documents.return_value = 4

    assert store.count_tasks(USER_ID) == 4
    store.count_tasks(USER_ID, completed=True)

    calls = [c.args[0] for c in db['tasks'].count_documents.call_args_list]
    assert calls == [
        {'user': ObjectId(USER_ID)},
        {'user': ObjectId(USER_ID), 'completedAt': {'$ne': None}},
    ]


def test_list_tasks_since_date(db):
    db['tasks'].find.return_value = []

    AnalyticsStore(db).list_tasks(USER_ID, completed_since=date(2023, 1, 20))

    query = db['tasks'].find.call_args.args[0]
    assert query['completedAt'] == {'$gte': datetime(2023, 1, 20)}


def test_submitted_quizzes_filter_status(db):
    db['quizzes'].find.return_value = []

    AnalyticsStore(db).list_submitted_quizzes(USER_ID)

    query = db['quizzes'].find.call_args.args[0]
    assert query == {'user': ObjectId(USER_ID), 'status': 'submitted'}


def test_career_lookup_without_name_skips_query(db):
    assert AnalyticsStore(db).get_career_by_name('') is None
    db['careers'].find_one.assert_not_called()


def test_driver_errors_become_database_error(db):
    db['skills'].find.side_effect = ServerSelectionTimeoutError('no servers')

    with pytest.raises(DatabaseError) as exc_info:
        AnalyticsStore(db).get_skill_records(USER_ID)

    assert exc_info.value.status_code == 500
    assert 'no servers' not in exc_info.value.message
