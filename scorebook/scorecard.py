from scorebook.engine.wickets import dismissal_text
from scorebook.models import InningsState, MatchSnapshot


def innings_summary(innings: InningsState) -> dict:
    """Plain-dict scorecard of one innings for an external renderer."""
    batters = [
        {
            "name": card.name,
            "position": card.position,
            "dismissal": dismissal_text(card.dismissal),
            "runs": card.runs,
            "balls": card.balls_faced,
            "fours": card.fours,
            "sixes": card.sixes,
            "strike_rate": card.strike_rate,
        }
        for card in sorted(innings.batters.values(), key=lambda c: c.position)
    ]
    bowlers = [
        {
            "name": card.name,
            "overs": card.overs_display,
            "maidens": card.maidens,
            "runs": card.runs_conceded,
            "wickets": card.wickets,
            "economy": card.economy,
            "dots": card.dots,
            "wides": card.wides,
            "no_balls": card.no_balls,
        }
        for card in innings.bowlers.values()
    ]
    return {
        "innings": innings.number,
        "batting_team": innings.batting_team,
        "bowling_team": innings.bowling_team,
        "total_runs": innings.score,
        "wickets": innings.wickets,
        "overs": innings.overs_display,
        "run_rate": innings.run_rate,
        "extras": {**innings.extras.model_dump(), "total": innings.extras.total},
        "batters": batters,
        "bowlers": bowlers,
        "fall_of_wickets": [
            f"{fow.team_score}-{fow.wicket_number} ({fow.batter}, {fow.overs} ov)"
            for fow in innings.fall_of_wickets
        ],
        "partnerships": [p.model_dump() for p in innings.partnerships],
        "end_reason": innings.end_reason.value if innings.end_reason else None,
    }


def match_summary(match: MatchSnapshot) -> dict:
    config = match.config
    return {
        "teams": [config.team1.name, config.team2.name],
        "toss": f"{config.toss_winner} won the toss and chose to {config.toss_decision.value}",
        "format": config.format.value,
        "total_overs": config.total_overs,
        "phase": match.phase.value,
        "target": match.target,
        "innings": [innings_summary(inn) for inn in match.innings],
        "result": match.result.description if match.result else None,
        "man_of_the_match": match.man_of_the_match,
    }
