"""
Analytics Routes - dashboard overview, skill progress, career probability
and job-market lookups.

The caller is identified by the X-User-Id header, set by the auth gateway in
front of this service.
"""
from flask import Blueprint, current_app, request

from utils.db import serialize_document
from utils.error_handler import ValidationError, handle_errors, validate_required_fields
from utils.validators import sanitize_text_input, validate_analytics_query, validate_user_id

analytics_bp = Blueprint('analytics', __name__, url_prefix='/api/analytics')


def _assembler():
    return current_app.config['ANALYTICS_ASSEMBLER']


def _current_user_id():
    return validate_user_id(request.headers.get('X-User-Id'))


def _query_args():
    args = request.args.to_dict()
    is_valid, errors = validate_analytics_query(args)
    if not is_valid:
        raise ValidationError(message="Invalid query parameters", details={'errors': errors})
    return args


@analytics_bp.route('/overview', methods=['GET'])
@handle_errors
def get_overview():
    """Aggregated market value, percentile, readiness and contribution heatmap"""
    user_id = _current_user_id()
    return _assembler().compute_overview(user_id, _query_args())


@analytics_bp.route('/skills', methods=['GET'])
@handle_errors
def get_skill_progress():
    """Skill document for one career (or the user's first one)"""
    user_id = _current_user_id()
    career = sanitize_text_input(_query_args().get('careerId', ''))

    record = _assembler().store.get_skill_record(user_id, career or None)
    if not record:
        return {'msg': 'No skill data found', 'skills': []}

    return serialize_document(record)


@analytics_bp.route('/probability', methods=['GET'])
@handle_errors
def get_career_probability():
    """Probability of success on the roadmap for careerId"""
    user_id = _current_user_id()
    args = _query_args()
    validate_required_fields(args, ['careerId'])

    return _assembler().compute_probability(user_id, sanitize_text_input(args['careerId']))


@analytics_bp.route('/jobs', methods=['GET'])
@handle_errors
def get_job_market():
    """Open-postings summary for a role"""
    _current_user_id()
    args = _query_args()
    validate_required_fields(args, ['role'])

    return _assembler().job_market(sanitize_text_input(args['role']))
