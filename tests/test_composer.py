import json

import pytest

from timetabler import ConfigError, generate_week, validate_week
from timetabler.composer import assignments_from_document, homerooms_from_document
from timetabler.hooks import Hooks
from timetabler.builder import build_group_b
from timetabler.models import Day, DayGroup, PolicyOptions, Role, SeatKind, TeacherConstraint
from timetabler.state import GenerationContext
from tests.utils import assert_invariants, failures, make_config, unavailable


def test_default_week(default_config):
    result = generate_week(default_config)

    assert_invariants(result, default_config)
    assert failures(result.warnings) == []
    # group A: 8 classes x 3 days x 2 periods, 3 exam slots x 2 classes per day
    a_rows = [a for a in result.assignments if a.group is DayGroup.A]
    assert len([a for a in a_rows if a.role is not Role.EXAM]) == 8 * 3 * 2
    assert len([a for a in a_rows if a.role is Role.EXAM]) == 6 * 3
    b_rows = [a for a in result.assignments if a.group is DayGroup.B]
    assert len([a for a in b_rows if a.role is not Role.EXAM]) == 6 * 2 * 3
    assert len([a for a in b_rows if a.role is Role.EXAM]) == 6 * 2


def test_three_classes_share_one_foreign_teacher(scenario_config):
    config = scenario_config(3)
    result = generate_week(config)

    assert_invariants(result, config)
    assert failures(result.warnings, "F") == []
    assert result.feasibility.r1_foreign_ok
    for day in (Day.TUE, Day.THU):
        periods = sorted(a.period for a in result.assignments
                         if a.day is day and a.role is Role.F)
        assert periods == [1, 2, 3]


def test_fourth_class_cannot_get_foreign_teacher(scenario_config):
    config = scenario_config(4)
    result = generate_week(config)

    assert_invariants(result, config)
    assert failures(result.warnings, "F") == [
        "[Tue 3] R1C4 R1 F assignment failed",
        "[Thu 3] R1C4 R1 F assignment failed",
    ]
    assert not result.feasibility.r1_foreign_ok
    assert result.metrics["unassignedCount"] >= 2


def test_generation_is_deterministic(default_config):
    docs = [generate_week(default_config).to_document() for _ in range(3)]
    for doc in docs:
        doc["metrics"].pop("generationTimeMs")
    assert docs[0] == docs[1] == docs[2]


def test_group_b_exam_conflicts_are_reported(default_config):
    result = generate_week(default_config)
    conflicts = [w for w in result.warnings if "no proctor available" in w]
    # two teachers own two group B classes each and every local teacher is a keeper
    assert len(conflicts) == 4
    assert {w.split("]")[0] for w in conflicts} == {"[EXAM Tue EXAM-R1R2", "[EXAM Thu EXAM-R1R2"}


def test_fairness_totals_match_assignments(default_config):
    result = generate_week(default_config)
    per_person = result.fairness.per_person

    for person, days in result.by_person.items():
        rows = [a for day_rows in days.values() for a in day_rows]
        teaching = [a for a in rows if a.role is not Role.EXAM]
        assert per_person[person]["total"] == len(teaching)
        assert per_person[person]["exams"] == len(rows) - len(teaching)
    assert set(result.fairness.deviation) == {"H", "K", "F", "total"}


def test_group_b_classes_repeat_their_daily_pattern(default_config):
    result = generate_week(default_config)
    assert result.consistency["B:R1C1"] == 1.0
    assert result.consistency["B:R2C3"] == 1.0
    assert 0 < result.metrics["consistencyScore"] <= 1.0


def test_round_statistics(scenario_config):
    result = generate_week(scenario_config(4))
    r1 = next(s for s in result.round_stats if s["group"] == "B" and s["round"] == 1)
    assert r1["classes"] == 4
    assert r1["roles"]["F"] == {"assigned": 6, "unassigned": 2}
    assert len(result.round_stats) == 6


def test_metrics(default_config):
    result = generate_week(default_config)
    m = result.metrics
    assert m["totalAssignments"] == len(result.assignments)
    assert m["assignedCount"] + m["unassignedCount"] + m["placeholderCount"] == m["totalAssignments"]
    assert m["examCount"] == 30
    assert m["teachersCount"] == 7
    assert m["classesCount"] == 14
    assert m["warningsCount"] == len(result.warnings)


def test_unavailability_is_never_violated():
    config = make_config(constraints={
        "김선생": TeacherConstraint(unavailable=unavailable("Tue|1", "Tue|2", "Mon|EXAM"), max_homerooms=2),
        "John": TeacherConstraint(unavailable=unavailable("Thu|3")),
    })
    result = generate_week(config)
    assert_invariants(result, config)
    for a in result.assignments:
        if a.seat.name == "김선생":
            assert (a.day, a.slot) not in {(Day.TUE, 1), (Day.TUE, 2)}
            assert not (a.day is Day.MON and a.role is Role.EXAM)


def test_homeroom_cap_falls_back_to_placeholders():
    config = make_config(local=["A"], foreign=["F1"], group_a={1: 2}, group_b={1: 1}, max_homerooms=1)
    result = generate_week(config)

    assert result.homerooms[DayGroup.A]["R1C2"].kind is SeatKind.SYNTHETIC
    assert any("homeroom placeholder H-R1C2" in w for w in result.warnings)
    assert result.metrics["placeholderCount"] > 0
    assert_invariants(result, config)


def test_document_is_json_safe_and_revalidates(default_config):
    result = generate_week(default_config)
    doc = json.loads(json.dumps(result.to_document()))

    assert doc["version"] == 1
    assert doc["validation"]["isValid"] is True
    assert set(doc["homerooms"]) == {"A", "B"}

    rows = assignments_from_document(doc)
    assert tuple(sorted(rows, key=lambda a: a.sort_key())) == result.assignments
    assert homerooms_from_document(doc) == result.homerooms
    assert validate_week(result, default_config).is_valid


def test_bad_config_raises_and_reports():
    reported = []
    hooks = Hooks(errors=[lambda exc, ctx: reported.append(ctx["stage"])])
    config = make_config(local=["A", "A"], group_b={1: -1, 2: 3})

    with pytest.raises(ConfigError) as info:
        generate_week(config, hooks)
    assert "local pool: duplicate teacher A" in info.value.problems
    assert any("class count must be a non-negative integer" in p for p in info.value.problems)
    assert reported == ["config"]


def test_empty_local_pool_degrades_to_placeholders():
    config = make_config(local=[])
    result = generate_week(config)

    rooms = result.homerooms[DayGroup.B]
    assert all(seat.kind is SeatKind.SYNTHETIC for seat in rooms.values())
    assert failures(result.warnings, "K")
    assert all(a.seat.kind is SeatKind.UNASSIGNED for a in result.assignments if a.role is Role.K)
    assert result.validation.is_valid


def test_empty_foreign_pool_degrades_to_warnings():
    config = make_config(foreign=[])
    result = generate_week(config)
    assert failures(result.warnings, "F")
    assert result.validation.is_valid


def test_metrics_hook_receives_every_metric(default_config):
    seen = {}
    hooks = Hooks(metrics=[lambda name, value, tags: seen.setdefault(name, tags)])
    result = generate_week(default_config, hooks)
    assert set(seen) == set(result.metrics)
    assert seen["totalAssignments"] == {"component": "generate_week"}


def test_policy_disallow_own_homeroom_as_k():
    config = make_config(options=PolicyOptions(disallow_own_h_as_k=True))
    result = generate_week(config)
    for group, rooms in result.homerooms.items():
        for a in result.assignments:
            if a.group is group and a.role is Role.K and a.seat.is_real:
                assert a.seat != rooms[a.class_id]


def test_k_is_filled_without_the_homeroom_union(default_config):
    config = make_config(options=PolicyOptions(include_h_in_k=False))
    result = generate_week(config)

    assert failures(result.warnings, "K") == []
    assert result.validation.is_valid
    # every homeroom teacher is already local, so the union changes nothing
    assert result.assignments == generate_week(default_config).assignments


def _tue_k(result, class_id, period):
    return next(a.seat.name for a in result.assignments
                if a.day is Day.TUE and a.class_id == class_id and a.period == period
                and a.role is Role.K)


def test_own_homeroom_teacher_may_take_k_without_the_preference():
    # R1C1: H(A)@1 K@2 F@3, R1C2: K@1 F@2 H(B)@3; A and B are tied for K@2
    config = make_config(local=["A", "B"], foreign=["F1"], group_a={}, group_b={1: 2},
                         options=PolicyOptions(prefer_other_h_for_k=False))
    result = generate_week(config)
    assert result.homerooms[DayGroup.B]["R1C1"].name == "A"
    assert _tue_k(result, "R1C1", 2) == "A"

    config = make_config(local=["A", "B"], foreign=["F1"], group_a={}, group_b={1: 2})
    assert _tue_k(generate_week(config), "R1C1", 2) == "B"


def test_group_b_continues_the_group_a_ledger():
    # group A leaves B with one K and C with none, so group B's K goes to C
    config = make_config(local=["A", "B", "C"], foreign=["F1"], group_a={1: 1}, group_b={2: 1},
                         pins_a={"R1C1": "C"})
    shared = generate_week(config)
    assert _tue_k(shared, "R2C1", 6) == "C"

    fresh = build_group_b(GenerationContext(config))
    assert _tue_k(fresh, "R2C1", 6) == "B"

    seeded = GenerationContext(config)
    seeded.ledger.absorb(shared.groups[DayGroup.A].assignments)
    assert build_group_b(seeded).assignments == shared.groups[DayGroup.B].assignments


def test_teacher_in_both_pools_never_fills_two_slots_of_one_class_a_day():
    config = make_config(local=["A", "B", "X"], foreign=["X"])
    result = generate_week(config)

    assert result.validation.is_valid
    seen = set()
    for a in result.assignments:
        if a.role in (Role.K, Role.F) and a.seat.is_real:
            key = (a.day, a.class_id, a.seat.name)
            assert key not in seen
            seen.add(key)


def test_weekly_capacity_can_pass_while_rotation_stacks_f_on_one_period():
    config = make_config(foreign=["F1"], group_a={1: 3}, group_b={1: 1})
    result = generate_week(config)

    item = result.feasibility.find(DayGroup.A, 1, Role.F)
    assert (item.demand, item.capacity) == (6, 6)
    assert result.feasibility.ok
    assert failures(result.warnings, "F") == ["[Wed 1] R1C3 R1 F assignment failed"]
