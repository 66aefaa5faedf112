"""Reference list of known sports used to derive the "Other" bucket."""

KNOWN_SPORTS: tuple[str, ...] = (
    "Soccer",
    "Basketball",
    "Tennis",
    "Baseball",
    "Volleyball",
    "Hockey",
    "Cricket",
    "Rugby",
    "Golf",
    "Swimming",
    "Track",
)

OTHER_SPORT = "Other"


def is_other(sport: str) -> bool:
    """True when a filter value asks for the "Other" bucket."""
    return sport.strip().lower() == OTHER_SPORT.lower()


def is_known_sport(sport: str, known_sports=KNOWN_SPORTS) -> bool:
    return sport.strip().lower() in {s.lower() for s in known_sports}


def sport_options(known_sports=KNOWN_SPORTS) -> list[str]:
    """Filter choices offered to the dashboard: every known sport plus "Other"."""
    return list(known_sports) + [OTHER_SPORT]
