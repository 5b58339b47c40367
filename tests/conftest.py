from datetime import datetime, timezone

import pytest

from utils.clock import frozen_clock, to_day
from utils.jobs_service import JobSearchResult

NOW = datetime(2024, 1, 20, 15, 30, tzinfo=timezone.utc)


class FakeStore:
    """In-memory stand-in for AnalyticsStore holding a single user's documents."""

    def __init__(self, skills=None, gamification=None, roadmap=None, user=None,
                 careers=None, tasks=None, quizzes=None):
        self.skills = skills or []
        self.gamification = gamification
        self.roadmap = roadmap
        self.user = user
        self.careers = careers or []
        self.tasks = tasks or []
        self.quizzes = quizzes or []

    def get_skill_records(self, user_id):
        return list(self.skills)

    def get_skill_record(self, user_id, career=None):
        for record in self.skills:
            if career is None or record.get('career') == career:
                return record
        return None

    def get_gamification(self, user_id):
        return self.gamification

    def get_user(self, user_id):
        return self.user

    def get_career_by_name(self, name):
        for career in self.careers:
            if career['name'] == name:
                return career
        return None

    def get_roadmap(self, user_id, career_id=None):
        if self.roadmap is None:
            return None
        if career_id and career_id not in (self.roadmap.get('careerName'), str(self.roadmap.get('career'))):
            return None
        return self.roadmap

    def count_tasks(self, user_id, completed=None):
        if completed is None:
            return len(self.tasks)
        return sum(1 for task in self.tasks if (task.get('completedAt') is not None) == completed)

    def list_tasks(self, user_id, completed_since=None):
        return [
            task for task in self.tasks
            if task.get('completedAt') is not None
            and (completed_since is None or to_day(task['completedAt']) >= completed_since)
        ]

    def list_submitted_quizzes(self, user_id, updated_since=None):
        return [
            quiz for quiz in self.quizzes
            if quiz.get('status') == 'submitted'
            and (updated_since is None or to_day(quiz['updatedAt']) >= updated_since)
        ]


class FakeJobs:
    def __init__(self, result=None, error=None):
        self.result = result or JobSearchResult.ok(321, [{'title': 'Data Scientist'}])
        self.error = error
        self.calls = []

    def search_jobs(self, role):
        self.calls.append(role)
        if self.error:
            raise self.error
        return self.result


@pytest.fixture
def clock():
    return frozen_clock(NOW)


@pytest.fixture
def fake_jobs():
    return FakeJobs()


@pytest.fixture
def rich_store():
    """A user with skills, a roadmap, tasks, quizzes and an active streak."""
    return FakeStore(
        skills=[
            {
                'career': 'Data Scientist',
                'skills': [
                    {'name': 'python', 'selfRating': 50, 'validatedScore': 70, 'finalScore': 80,
                     'highestQuizLevelCleared': 'medium'},
                    {'name': 'sql', 'selfRating': 60, 'validatedScore': None, 'finalScore': None,
                     'highestQuizLevelCleared': None},
                ],
            },
            {
                'career': 'Data Analyst',
                'skills': [
                    {'name': 'python', 'selfRating': 40, 'validatedScore': 90, 'finalScore': None,
                     'highestQuizLevelCleared': 'easy'},
                ],
            },
        ],
        gamification={
            'xp': 2000, 'dailyXP': 100, 'streak': 6, 'longestStreak': 9,
            'totalCheckIns': 10, 'lastCheckIn': datetime(2024, 1, 19),
        },
        roadmap={'career': 'c1', 'careerName': 'Data Scientist', 'totalDays': 90, 'progressPercentage': 40},
        user={'careerInterests': ['Product Manager']},
        careers=[{'name': 'Data Scientist', 'averageSalaryRange': {'min': 60000, 'max': 140000}}],
        tasks=[
            {'completedAt': datetime(2024, 1, 18, 9, 0)},
            {'completedAt': datetime(2024, 1, 18, 21, 0)},
            {'completedAt': datetime(2022, 12, 1)},
            {'completedAt': None},
        ],
        quizzes=[
            {'status': 'submitted', 'accuracy': 80, 'passed': True, 'updatedAt': datetime(2024, 1, 15)},
            {'status': 'submitted', 'accuracy': 50, 'passed': False, 'updatedAt': datetime(2024, 1, 16)},
            {'status': 'generated', 'accuracy': None, 'passed': None, 'updatedAt': datetime(2024, 1, 17)},
        ],
    )
