from utils.skill_aggregator import aggregate_skills, skill_value


def test_skill_value_precedence():
    assert skill_value({'finalScore': 80, 'validatedScore': 70, 'selfRating': 50}) == 80
    assert skill_value({'finalScore': None, 'validatedScore': 70, 'selfRating': 50}) == 70
    assert skill_value({'finalScore': None, 'validatedScore': None, 'selfRating': 50}) == 50
    assert skill_value({'name': 'git'}) == 0
    # A final score of 0 is still authoritative
    assert skill_value({'finalScore': 0, 'selfRating': 90}) == 0


def test_empty_input_has_zero_aggregates():
    summary = aggregate_skills([])
    assert summary == {
        'avg_skill_score': 0,
        'skill_count': 0,
        'validated_count': 0,
        'highest_level_ordinal': 0,
        'per_skill_averages': {},
    }


def test_document_without_skills_is_ignored():
    summary = aggregate_skills([{'career': 'Data Analyst', 'skills': []}, {'career': 'Cloud Engineer'}])
    assert summary['skill_count'] == 0
    assert summary['avg_skill_score'] == 0


def test_aggregates_across_documents(rich_store):
    summary = aggregate_skills(rich_store.skills)

    assert summary['skill_count'] == 3
    assert summary['validated_count'] == 2
    assert summary['highest_level_ordinal'] == 2
    assert round(summary['avg_skill_score'], 2) == 76.67
    assert summary['per_skill_averages'] == {'python': 85, 'sql': 60}
    assert list(summary['per_skill_averages']) == ['python', 'sql']


def test_per_skill_averages_truncated_to_top_n():
    record = {'skills': [{'name': f'skill-{i}', 'selfRating': i * 10} for i in range(10)]}

    summary = aggregate_skills([record], top_n=8)

    assert len(summary['per_skill_averages']) == 8
    assert list(summary['per_skill_averages'])[0] == 'skill-9'
    assert 'skill-0' not in summary['per_skill_averages']
    assert 'skill-1' not in summary['per_skill_averages']
    # Truncation is display-only; the overall average still covers every entry
    assert summary['avg_skill_score'] == 45


def test_unknown_level_counts_as_none():
    summary = aggregate_skills([{'skills': [
        {'name': 'rust', 'selfRating': 10, 'highestQuizLevelCleared': 'expert'},
        {'name': 'go', 'selfRating': 10, 'highestQuizLevelCleared': 'ADVANCED'},
    ]}])
    assert summary['highest_level_ordinal'] == 3
