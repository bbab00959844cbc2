from models.clan import ClashPlayer
from routers.v2.clan.models import MemberRegistrationCheck, RegistrationCrossReference
from routers.v2.rosters.roster_models import PlayerRegistration
from utils.utils import normalize_player_name


def cross_reference(
    clan_tag: str,
    members: list[ClashPlayer],
    registrations: list[PlayerRegistration],
) -> RegistrationCrossReference:
    """
    Match clan members against the signup list by player name.

    Names are typed by hand in the signup form, so the comparison ignores case
    and surrounding/duplicated whitespace. A registration is matched at most
    once, first come first served.
    """
    by_name: dict[str, list[PlayerRegistration]] = {}
    for registration in registrations:
        by_name.setdefault(normalize_player_name(registration.player_name), []).append(registration)

    checks = []
    matched_ids = set()
    for member in members:
        candidates = by_name.get(normalize_player_name(member.name), [])
        registration = next((r for r in candidates if r.id not in matched_ids), None)
        if registration is not None:
            matched_ids.add(registration.id)
        checks.append(
            MemberRegistrationCheck(
                player=member,
                registered=registration is not None,
                registration_id=registration.id if registration else None,
                level_tag=registration.level_tag if registration else None,
            )
        )

    return RegistrationCrossReference(
        clan_tag=clan_tag,
        members=checks,
        registered_count=len(matched_ids),
        unmatched_registrations=[r for r in registrations if r.id not in matched_ids],
    )


def town_hall_tier(level: int) -> str:
    """Badge color bucket used by the admin page for Town Hall levels"""
    if level >= 15:
        return 'blue'
    if level >= 12:
        return 'green'
    if level >= 9:
        return 'yellow'
    return 'gray'
