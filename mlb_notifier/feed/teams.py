"""Static MLB club list used when the teams endpoint is unreachable."""

from mlb_notifier.feed.schema import TeamSearchResult

# id -> (name, abbreviation, location, venue)
_CLUBS: dict[int, tuple[str, str, str, str]] = {
    # ── American League ──────────────────────────────────────
    108: ("Los Angeles Angels", "LAA", "Anaheim", "Angel Stadium"),
    110: ("Baltimore Orioles", "BAL", "Baltimore", "Oriole Park at Camden Yards"),
    111: ("Boston Red Sox", "BOS", "Boston", "Fenway Park"),
    114: ("Cleveland Guardians", "CLE", "Cleveland", "Progressive Field"),
    116: ("Detroit Tigers", "DET", "Detroit", "Comerica Park"),
    117: ("Houston Astros", "HOU", "Houston", "Daikin Park"),
    118: ("Kansas City Royals", "KC", "Kansas City", "Kauffman Stadium"),
    133: ("Athletics", "ATH", "Sacramento", "Sutter Health Park"),
    136: ("Seattle Mariners", "SEA", "Seattle", "T-Mobile Park"),
    139: ("Tampa Bay Rays", "TB", "Tampa Bay", "George M. Steinbrenner Field"),
    140: ("Texas Rangers", "TEX", "Arlington", "Globe Life Field"),
    141: ("Toronto Blue Jays", "TOR", "Toronto", "Rogers Centre"),
    142: ("Minnesota Twins", "MIN", "Minneapolis", "Target Field"),
    145: ("Chicago White Sox", "CWS", "Chicago", "Rate Field"),
    147: ("New York Yankees", "NYY", "Bronx", "Yankee Stadium"),
    # ── National League ──────────────────────────────────────
    109: ("Arizona Diamondbacks", "AZ", "Phoenix", "Chase Field"),
    112: ("Chicago Cubs", "CHC", "Chicago", "Wrigley Field"),
    113: ("Cincinnati Reds", "CIN", "Cincinnati", "Great American Ball Park"),
    115: ("Colorado Rockies", "COL", "Denver", "Coors Field"),
    119: ("Los Angeles Dodgers", "LAD", "Los Angeles", "Dodger Stadium"),
    120: ("Washington Nationals", "WSH", "Washington", "Nationals Park"),
    121: ("New York Mets", "NYM", "Flushing", "Citi Field"),
    134: ("Pittsburgh Pirates", "PIT", "Pittsburgh", "PNC Park"),
    135: ("San Diego Padres", "SD", "San Diego", "Petco Park"),
    137: ("San Francisco Giants", "SF", "San Francisco", "Oracle Park"),
    138: ("St. Louis Cardinals", "STL", "St. Louis", "Busch Stadium"),
    143: ("Philadelphia Phillies", "PHI", "Philadelphia", "Citizens Bank Park"),
    144: ("Atlanta Braves", "ATL", "Atlanta", "Truist Park"),
    146: ("Miami Marlins", "MIA", "Miami", "loanDepot park"),
    158: ("Milwaukee Brewers", "MIL", "Milwaukee", "American Family Field"),
}

FALLBACK_TEAMS: list[TeamSearchResult] = [
    TeamSearchResult(
        id=team_id,
        name=name,
        abbreviation=abbreviation,
        location_name=location,
        venue_name=venue,
    )
    for team_id, (name, abbreviation, location, venue) in sorted(
        _CLUBS.items(), key=lambda item: item[1][0]
    )
]
