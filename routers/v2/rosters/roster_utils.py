from typing import Sequence

from routers.v2.rosters.roster_models import (BucketView, ClanBucket,
                                              ClanDescriptor,
                                              PlayerRegistration,
                                              RosterPartition)


class EmptyClanList(ValueError):
    """Raised when players are assigned before any clan has been defined."""

    def __init__(self, message: str = 'At least one clan is required to build a roster'):
        super().__init__(message)


def build_partition(
    clans: Sequence[ClanDescriptor],
    registrations: Sequence[PlayerRegistration],
) -> RosterPartition:
    """
    Distribute registrations across clans round-robin.

    Input:
        - clans: clan descriptors, in the order the buckets should appear
        - registrations: registrations in store (registration) order

    Output:
        - a partition where registration i sits in bucket i mod len(clans)

    Capacity is ignored here, so a bucket can end up over or under its
    advertised size. It only feeds the deficit line of the rendered message.
    """
    if not clans:
        raise EmptyClanList()

    buckets = [ClanBucket(descriptor=clan, members=[]) for clan in clans]
    seen = set()
    position = 0
    for registration in registrations:
        # a registration id may only live in one bucket
        if registration.id in seen:
            continue
        seen.add(registration.id)
        buckets[position % len(buckets)].members.append(registration)
        position += 1

    return RosterPartition(buckets=buckets)


def _valid_bucket(partition: RosterPartition, bucket: int) -> bool:
    return 0 <= bucket < len(partition.buckets)


def _replace_members(
    partition: RosterPartition, changes: dict[int, list[PlayerRegistration]]
) -> RosterPartition:
    buckets = []
    for position, bucket in enumerate(partition.buckets):
        if position in changes:
            bucket = bucket.model_copy(update={'members': changes[position]})
        buckets.append(bucket)
    return RosterPartition(buckets=buckets)


def move_player(
    partition: RosterPartition,
    registration_id: str,
    from_bucket: int,
    to_bucket: int,
) -> RosterPartition:
    """Move a registration to the end of another bucket; unknown ids and bad indexes are no-ops."""
    if not (_valid_bucket(partition, from_bucket) and _valid_bucket(partition, to_bucket)):
        return partition
    if from_bucket == to_bucket:
        return partition

    source = partition.buckets[from_bucket].members
    player = next((m for m in source if m.id == registration_id), None)
    if player is None:
        return partition

    remaining = [m for m in source if m.id != registration_id]
    target = list(partition.buckets[to_bucket].members) + [player]
    return _replace_members(partition, {from_bucket: remaining, to_bucket: target})


def _swap(partition: RosterPartition, bucket: int, first: int, second: int) -> RosterPartition:
    members = list(partition.buckets[bucket].members)
    members[first], members[second] = members[second], members[first]
    return _replace_members(partition, {bucket: members})


def move_up(partition: RosterPartition, bucket: int, index: int) -> RosterPartition:
    if not _valid_bucket(partition, bucket):
        return partition
    if index <= 0 or index >= len(partition.buckets[bucket].members):
        return partition
    return _swap(partition, bucket, index - 1, index)


def move_down(partition: RosterPartition, bucket: int, index: int) -> RosterPartition:
    if not _valid_bucket(partition, bucket):
        return partition
    if index < 0 or index >= len(partition.buckets[bucket].members) - 1:
        return partition
    return _swap(partition, bucket, index, index + 1)


def bucket_deficit(bucket: ClanBucket) -> int:
    return max(0, bucket.descriptor.capacity - len(bucket.members))


def render_message(partition: RosterPartition) -> str:
    """
    Serialize a partition into the CWL roster message.

    The exact layout is what players read in chat and what ends up in the
    exported PDF, so field order and separators must not change.
    """
    message = ''
    for bucket in partition.buckets:
        clan = bucket.descriptor
        message += f'{clan.league_tier}\n\n'
        message += f'{clan.name} {clan.capacity} partecipanti\n\n'

        for number, player in enumerate(bucket.members, start=1):
            message += f'{number}) {player.player_name} {player.level_tag}\n'

        missing_players = bucket_deficit(bucket)
        if missing_players > 0:
            message += f'\nMancano ancora {missing_players} player\n'

        message += '\n---\n\n'
    return message


def bucket_views(partition: RosterPartition) -> list[BucketView]:
    return [
        BucketView(
            index=position,
            descriptor=bucket.descriptor,
            members=bucket.members,
            deficit=bucket_deficit(bucket),
            over_capacity=len(bucket.members) > bucket.descriptor.capacity,
        )
        for position, bucket in enumerate(partition.buckets)
    ]
