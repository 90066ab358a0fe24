from dataclasses import dataclass, field
from typing import Dict, List, Union

from .board import color_counts

TIE = 'tie'
WIN_NORMAL = 'normal'
WIN_ALLKILL = 'allkill'


@dataclass
class PlayerScore:
    player_number: int
    score: int
    clicks: int

    def to_dict(self):
        return {'playerNumber': self.player_number, 'score': self.score, 'clicks': self.clicks}


@dataclass
class RoundOutcome:
    winner: Union[int, str]
    win_type: str
    scores: List[PlayerScore] = field(default_factory=list)

    @property
    def is_tie(self) -> bool:
        return self.winner == TIE

    def to_dict(self):
        return {
            'winner': self.winner,
            'scores': [s.to_dict() for s in self.scores],
            'winType': self.win_type,
        }


def resolve_winner(board: List[int], players: List[str], clicks: Dict[str, int], all_kill: bool = False) -> RoundOutcome:
    """Compute the outcome of a finished round.

    A player's score is the number of cells holding their owner index
    (their position in ``players``). The highest score wins; a tie on
    score goes to the leader with the fewest clicks; if the fewest clicks
    are shared too, the round is a tie.
    """
    counts = color_counts(board, max(len(players), max(board, default=0) + 1))
    scores = [
        PlayerScore(player_number=i + 1, score=counts[i], clicks=clicks.get(sid, 0))
        for i, sid in enumerate(players)
    ]
    win_type = WIN_ALLKILL if all_kill else WIN_NORMAL
    if not scores:
        return RoundOutcome(winner=TIE, win_type=win_type, scores=scores)

    max_score = max(s.score for s in scores)
    leaders = [s for s in scores if s.score == max_score]
    if len(leaders) == 1:
        return RoundOutcome(winner=leaders[0].player_number, win_type=win_type, scores=scores)

    min_clicks = min(s.clicks for s in leaders)
    fewest = [s for s in leaders if s.clicks == min_clicks]
    winner = fewest[0].player_number if len(fewest) == 1 else TIE
    return RoundOutcome(winner=winner, win_type=win_type, scores=scores)
