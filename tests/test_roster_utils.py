import pytest

from conftest import make_clan, make_registration
from routers.v2.rosters.roster_utils import (EmptyClanList, bucket_deficit,
                                             bucket_views, build_partition,
                                             move_down, move_player, move_up,
                                             render_message)


def member_names(partition):
    return [[m.player_name for m in bucket.members] for bucket in partition.buckets]


def test_build_with_one_clan_places_everyone_there(registrations):
    partition = build_partition([make_clan("Eclipse", 2, "Gold League")], registrations)

    assert member_names(partition) == [["Ann", "Bo", "Cid"]]
    message = render_message(partition)
    assert "1) Ann TH14\n2) Bo TH13\n3) Cid TH12\n" in message
    assert "Mancano ancora" not in message


def test_build_round_robin_across_two_clans(registrations):
    clans = [make_clan("Eclipse", 2, "Gold League"), make_clan("Nova", 2, "Crystal League")]
    partition = build_partition(clans, registrations)

    assert member_names(partition) == [["Ann", "Cid"], ["Bo"]]
    assert render_message(partition) == (
        "Gold League\n\n"
        "Eclipse 2 partecipanti\n\n"
        "1) Ann TH14\n"
        "2) Cid TH12\n"
        "\n---\n\n"
        "Crystal League\n\n"
        "Nova 2 partecipanti\n\n"
        "1) Bo TH13\n"
        "\nMancano ancora 1 player\n"
        "\n---\n\n"
    )


def test_build_requires_at_least_one_clan(registrations):
    with pytest.raises(EmptyClanList):
        build_partition([], registrations)


def test_build_ignores_capacity_when_placing():
    registrations = [make_registration(i, f"P{i}", "TH15") for i in range(5)]
    partition = build_partition([make_clan("Tiny", 1, "Bronze League III")], registrations)

    assert len(partition.buckets[0].members) == 5
    assert bucket_views(partition)[0].over_capacity is True


def test_build_covers_every_registration_exactly_once():
    registrations = [make_registration(i, f"P{i}", "TH13") for i in range(11)]
    clans = [make_clan(f"C{i}", 4, "Master League I") for i in range(3)]
    partition = build_partition(clans, registrations)

    placed = [m.id for bucket in partition.buckets for m in bucket.members]
    assert sorted(placed) == sorted(r.id for r in registrations)
    assert [len(b.members) for b in partition.buckets] == [4, 4, 3]


def test_build_places_a_repeated_registration_once():
    ann = make_registration(1, "Ann", "TH14")
    bo = make_registration(2, "Bo", "TH13")
    partition = build_partition([make_clan("A", 5, "L"), make_clan("B", 5, "L")], [ann, ann, bo])

    assert member_names(partition) == [["Ann"], ["Bo"]]


def test_build_is_deterministic(registrations):
    clans = [make_clan("Eclipse", 2, "Gold League"), make_clan("Nova", 2, "Crystal League")]

    assert build_partition(clans, registrations) == build_partition(clans, registrations)


def test_build_with_no_registrations_renders_full_deficit():
    partition = build_partition([make_clan("Eclipse", 15, "Gold League I")], [])

    assert render_message(partition) == (
        "Gold League I\n\nEclipse 15 partecipanti\n\n\nMancano ancora 15 player\n\n---\n\n"
    )


def test_move_player_between_clans_renumbers(registrations):
    clans = [make_clan("Eclipse", 2, "Gold League"), make_clan("Nova", 2, "Crystal League")]
    partition = build_partition(clans, registrations)

    moved = move_player(partition, "3", 0, 1)

    assert member_names(moved) == [["Ann"], ["Bo", "Cid"]]
    message = render_message(moved)
    assert "Eclipse 2 partecipanti\n\n1) Ann TH14\n\nMancano ancora 1 player\n" in message
    assert "Nova 2 partecipanti\n\n1) Bo TH13\n2) Cid TH12\n" in message
    # the original partition is left untouched
    assert member_names(partition) == [["Ann", "Cid"], ["Bo"]]


def test_move_player_does_not_check_capacity(registrations):
    partition = build_partition([make_clan("A", 1, "L"), make_clan("B", 1, "L")], registrations)

    moved = move_player(partition, "2", 1, 0)

    assert member_names(moved) == [["Ann", "Cid", "Bo"], []]
    assert bucket_deficit(moved.buckets[1]) == 1


@pytest.mark.parametrize(
    "registration_id, from_bucket, to_bucket",
    [
        ("2", 0, 1),     # Bo lives in bucket 1
        ("missing", 0, 1),
        ("1", 0, 5),
        ("1", -1, 1),
        ("1", 0, 0),
    ],
)
def test_move_player_invalid_calls_are_noops(registrations, registration_id, from_bucket, to_bucket):
    partition = build_partition([make_clan("A", 2, "L"), make_clan("B", 2, "L")], registrations)

    assert move_player(partition, registration_id, from_bucket, to_bucket) is partition


def test_moves_preserve_total_count():
    registrations = [make_registration(i, f"P{i}", "TH14") for i in range(7)]
    partition = build_partition([make_clan(f"C{i}", 3, "L") for i in range(3)], registrations)

    for reg_id, src, dst in [("0", 0, 1), ("1", 1, 2), ("4", 1, 0), ("0", 1, 2), ("nope", 2, 0)]:
        partition = move_player(partition, reg_id, src, dst)

    assert sum(len(b.members) for b in partition.buckets) == 7
    ids = [m.id for b in partition.buckets for m in b.members]
    assert len(ids) == len(set(ids))


def test_move_up_swaps_with_previous(registrations):
    partition = build_partition([make_clan("Eclipse", 3, "Gold League")], registrations)

    assert member_names(move_up(partition, 0, 2)) == [["Ann", "Cid", "Bo"]]


def test_move_up_at_first_index_is_noop(registrations):
    partition = build_partition([make_clan("Eclipse", 3, "Gold League")], registrations)

    result = move_up(partition, 0, 0)

    assert result is partition
    assert member_names(result) == [["Ann", "Bo", "Cid"]]


def test_move_down_at_last_index_is_noop(registrations):
    partition = build_partition([make_clan("Eclipse", 3, "Gold League")], registrations)

    assert move_down(partition, 0, 2) is partition
    assert member_names(move_down(partition, 0, 0)) == [["Bo", "Ann", "Cid"]]


@pytest.mark.parametrize("bucket, index", [(3, 1), (-1, 1), (0, -1), (0, 10)])
def test_reorder_with_stale_indexes_is_noop(registrations, bucket, index):
    partition = build_partition([make_clan("Eclipse", 3, "Gold League")], registrations)

    assert move_up(partition, bucket, index) is partition
    assert move_down(partition, bucket, index) is partition


@pytest.mark.parametrize("index", [1, 2])
def test_move_up_then_down_restores_order(registrations, index):
    partition = build_partition([make_clan("Eclipse", 3, "Gold League")], registrations)

    restored = move_down(move_up(partition, 0, index), 0, index - 1)

    assert member_names(restored) == member_names(partition)


@pytest.mark.parametrize("members, capacity, expected", [(0, 3, 3), (2, 3, 1), (3, 3, 0), (5, 3, 0)])
def test_deficit_line_only_when_under_capacity(members, capacity, expected):
    registrations = [make_registration(i, f"P{i}", "TH12") for i in range(members)]
    partition = build_partition([make_clan("Eclipse", capacity, "Gold League")], registrations)

    message = render_message(partition)

    assert bucket_deficit(partition.buckets[0]) == expected
    if expected:
        assert f"Mancano ancora {expected} player" in message
    else:
        assert "Mancano ancora" not in message


def test_bucket_views_report_indexes_and_deficits(registrations):
    partition = build_partition([make_clan("A", 2, "L"), make_clan("B", 2, "L")], registrations)

    views = bucket_views(partition)

    assert [v.index for v in views] == [0, 1]
    assert [v.deficit for v in views] == [0, 1]
    assert [v.over_capacity for v in views] == [False, False]
