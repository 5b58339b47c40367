"""
Analytics overview: combines skills, roadmap, tasks, quizzes, check-ins and
job-market data into the dashboard payload.

The assembler only reads. Store failures propagate as DatabaseError; a failed
job-market lookup degrades to mock numbers and never fails the request.
"""
import logging
from typing import Any, Dict, Optional

from utils.activity_collector import activity_window_start, collect_activity
from utils.analytics_store import AnalyticsStore
from utils.clock import Clock, system_clock
from utils.error_handler import ResourceNotFoundError
from utils.heatmap import build_heatmap
from utils.jobs_service import JobSearchResult, jobs_service
from utils.skill_aggregator import aggregate_skills
from utils.validators import sanitize_text_input
from utils import metric_formulas as formulas

logger = logging.getLogger(__name__)

NO_TARGET_ROLE = 'N/A'


def resolve_target_role(roadmap: Optional[Dict[str, Any]], user: Optional[Dict[str, Any]],
                        query_hints: Optional[Dict[str, Any]]) -> str:
    """
    Pick the role the dashboard is about.

    Priority: the roadmap's career, the user's first career interest, the
    careerId/career query hint, then "N/A".
    """
    interests = (user or {}).get('careerInterests') or []
    hints = query_hints or {}
    candidates = [
        (roadmap or {}).get('careerName'),
        interests[0] if interests else None,
        hints.get('careerId'),
        hints.get('career'),
    ]
    for candidate in candidates:
        role = sanitize_text_input(candidate) if candidate else ''
        if role:
            return role
    return NO_TARGET_ROLE


def quiz_stats(quizzes) -> Dict[str, Any]:
    submitted = [q for q in quizzes if q.get('status') == 'submitted']
    passed_count = sum(1 for q in submitted if q.get('passed'))
    accuracy_total = sum(formulas.first_defined(q.get('accuracy')) for q in submitted)
    return {
        'submitted_count': len(submitted),
        'passed_count': passed_count,
        'avg_accuracy': formulas.safe_ratio(accuracy_total, len(submitted)),
        'pass_rate': formulas.safe_ratio(passed_count, len(submitted), 100),
    }


class OverviewAssembler:
    """
    Builds analytics responses for one user at a time.

    Args:
        store: Object implementing the AnalyticsStore read methods
        jobs: Object with ``search_jobs(role) -> JobSearchResult``
        clock: Callable returning the current UTC datetime
    """

    def __init__(self, store=None, jobs=None, clock: Clock = system_clock):
        self.store = store or AnalyticsStore()
        self.jobs = jobs or jobs_service
        self.clock = clock

    def job_market(self, role: str) -> Dict[str, Any]:
        if role == NO_TARGET_ROLE:
            return {'role': role, 'totalJobs': 0, 'jobs': [], 'source': 'none'}

        try:
            result = self.jobs.search_jobs(role)
        except Exception as e:
            logger.error(f"Job search for '{role}' raised: {e}")
            result = JobSearchResult.degraded(role, f"search raised {type(e).__name__}")

        if result.is_degraded:
            logger.info(f"Using mock job data for '{role}' ({result.reason})")
        return result.to_dict(role)

    def compute_overview(self, user_id, query_hints: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Assemble the analytics overview for a user.

        Args:
            user_id: Id of the caller
            query_hints: Optional request hints (``careerId`` / ``career``)

        Returns:
            JSON-serializable dict with market value, percentile, readiness,
            heatmap, competencies, target role and job-market summary
        """
        gamification = self.store.get_gamification(user_id) or {}
        skills = aggregate_skills(self.store.get_skill_records(user_id))
        roadmap = self.store.get_roadmap(user_id)
        user = self.store.get_user(user_id)

        target_role = resolve_target_role(roadmap, user, query_hints)
        career = self.store.get_career_by_name(target_role) if target_role != NO_TARGET_ROLE else None
        salary_range = (career or {}).get('averageSalaryRange') or {}

        total_tasks = self.store.count_tasks(user_id)
        completed_tasks = self.store.count_tasks(user_id, completed=True)
        task_rate = formulas.safe_ratio(completed_tasks, total_tasks, 100)

        window_start = activity_window_start(self.clock)
        quizzes = self.store.list_submitted_quizzes(user_id)
        quizzes_stats = quiz_stats(quizzes)
        activity = collect_activity(
            self.store.list_tasks(user_id, completed_since=window_start),
            quizzes,
            gamification,
            window_start,
        )

        xp = formulas.first_defined(gamification.get('xp'))
        daily_xp = formulas.first_defined(gamification.get('dailyXP'))
        streak = formulas.first_defined(gamification.get('streak'))
        progress = formulas.first_defined((roadmap or {}).get('progressPercentage'))
        validation_coverage = formulas.safe_ratio(skills['validated_count'], skills['skill_count'], 100)

        return {
            'marketValue': formulas.market_value(
                salary_range.get('min'),
                salary_range.get('max'),
                skills['avg_skill_score'] / 100,
                progress,
                skills['highest_level_ordinal'],
                task_rate,
            ),
            'marketValueChange': formulas.market_value_change(daily_xp, xp, streak),
            'skillPercentile': formulas.skill_percentile(
                skills['avg_skill_score'], quizzes_stats['avg_accuracy'], task_rate),
            'skillPercentileChange': formulas.skill_percentile_change(quizzes_stats['passed_count']),
            'interviewReadiness': formulas.interview_readiness(
                quizzes_stats['pass_rate'], progress, validation_coverage,
                quizzes_stats['avg_accuracy'], streak),
            'interviewReadinessChange': formulas.interview_readiness_change(streak),
            'probability': formulas.probability(progress, xp, streak),
            'contributionLog': len(activity),
            'heatmap': build_heatmap(activity, self.clock),
            'xpSeries': formulas.xp_series(xp),
            'skillCompetencies': {
                name: formulas.round_half_up(score)
                for name, score in skills['per_skill_averages'].items()
            },
            'targetRole': target_role,
            'estimatedBreakthrough': formulas.estimated_breakthrough((roadmap or {}).get('totalDays')),
            'contributionDates': sorted(day.isoformat() for day in activity),
            'jobMarket': self.job_market(target_role),
        }

    def compute_probability(self, user_id, career_id) -> Dict[str, Any]:
        """Success probability for one of the user's roadmaps."""
        roadmap = self.store.get_roadmap(user_id, career_id)
        if not roadmap:
            raise ResourceNotFoundError(
                message="No roadmap found for this career",
                details={'careerId': str(career_id)}
            )

        gamification = self.store.get_gamification(user_id) or {}
        progress = formulas.first_defined(roadmap.get('progressPercentage'))
        xp = formulas.first_defined(gamification.get('xp'))
        streak = formulas.first_defined(gamification.get('streak'))

        return {
            'probability': formulas.probability(progress, xp, streak),
            'progress': progress,
            'xpFactor': formulas.round_half_up(formulas.xp_factor(xp)),
            'streakFactor': formulas.round_half_up(formulas.streak_factor(streak)),
            'monthsRemaining': formulas.months_remaining(progress, formulas.first_defined(roadmap.get('totalDays'))),
        }


def compute_overview(user_id, query_hints=None, store=None, jobs=None, clock: Clock = system_clock):
    """Convenience wrapper around OverviewAssembler.compute_overview."""
    return OverviewAssembler(store=store, jobs=jobs, clock=clock).compute_overview(user_id, query_hints)
